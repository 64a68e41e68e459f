from datetime import datetime
from decimal import Decimal
from enum import IntEnum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from barulogix.db import Base, utcnow


class DeliveryStatus(IntEnum):
    NOT_DELIVERED = 0
    DELIVERED = 1
    RETURNED = 2


PLATFORM_SHEIN_TEMU = "Shein/Temu"
PLATFORM_DROPI = "Dropi"
PLATFORMS = (PLATFORM_SHEIN_TEMU, PLATFORM_DROPI)


class Delivery(Base):
    __tablename__ = "deliveries"
    __table_args__ = (
        UniqueConstraint("tracking", "user_id", name="uq_deliveries_tracking_user"),
        CheckConstraint("status IN (0, 1, 2)", name="ck_deliveries_status"),
        CheckConstraint("value >= 0", name="ck_deliveries_value_non_negative"),
        Index("ix_deliveries_user_date", "user_id", "delivery_date"),
        Index("ix_deliveries_user_status", "user_id", "status"),
        Index("ix_deliveries_user_type", "user_id", "type"),
        Index("ix_deliveries_user_conductor", "user_id", "conductor_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # RESTRICT: borrar entregas de un conductor es decisión explícita del caller
    conductor_id: Mapped[int] = mapped_column(ForeignKey("conductors.id", ondelete="RESTRICT"), nullable=False)

    tracking: Mapped[str] = mapped_column(String(50))
    # "Shein/Temu" | "Dropi"
    type: Mapped[str] = mapped_column(String(20))
    # 0=no entregado, 1=entregado, 2=devuelto
    status: Mapped[int] = mapped_column(Integer, default=DeliveryStatus.NOT_DELIVERED, nullable=False)
    delivery_date: Mapped[datetime] = mapped_column(DateTime)
    value: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    conductor = relationship("Conductor")
