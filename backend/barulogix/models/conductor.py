from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from barulogix.db import Base, utcnow


class Conductor(Base):
    __tablename__ = "conductors"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120))
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    vehicle_type: Mapped[str | None] = mapped_column(String(40), nullable=True)
    license_plate: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="conductors")


# nombre único solo entre conductores activos del mismo tenant
Index(
    "uq_conductors_user_name_active",
    Conductor.user_id,
    Conductor.name,
    unique=True,
    sqlite_where=Conductor.is_active == true(),
    postgresql_where=Conductor.is_active == true(),
)
