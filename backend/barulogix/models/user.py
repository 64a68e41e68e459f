from sqlalchemy import Boolean, Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from barulogix.db import Base, utcnow


ROLES = ("admin", "user")
PLANS = ("free", "pro", "enterprise")
SUBSCRIPTION_STATUSES = ("pending", "trial", "active", "inactive")


class User(Base):
    """Cuenta/tenant: dueña exclusiva de sus conductores y entregas."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(254), unique=True, index=True, nullable=False)
    # NULL cuando la identidad la gestiona un proveedor externo
    password_hash = Column(String(255), nullable=True)
    name = Column(String(120), nullable=False)
    role = Column(String(10), default="user", nullable=False)
    company = Column(String(160), nullable=True)
    phone = Column(String(40), nullable=True)

    plan = Column(String(20), default="free", nullable=False)
    subscription_status = Column(String(20), default="pending", nullable=False)
    subscription_expiry = Column(DateTime, nullable=True)

    unlimited_deliveries = Column(Boolean, default=False, nullable=False)
    unlimited_conductors = Column(Boolean, default=False, nullable=False)
    advanced_reports = Column(Boolean, default=False, nullable=False)
    api_access = Column(Boolean, default=False, nullable=False)

    can_manage_users = Column(Boolean, default=False, nullable=False)
    can_access_reports = Column(Boolean, default=True, nullable=False)
    can_manage_payments = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    conductors = relationship("Conductor", back_populates="user", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
