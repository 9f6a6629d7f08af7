import enum
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Enum, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from portal.database import Base

class Role(str, enum.Enum):
    SUPERADMIN = "superadmin"
    HR = "hr"
    MANAGER = "manager"
    BRANCH_MANAGER = "branch_manager"
    SUPERVISOR = "supervisor"
    FINANCE = "finance"
    STAFF = "staff"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    position = Column(String, nullable=True)

    password_hash = Column(String, nullable=False)

    # values_callable: guardamos "finance", no "FINANCE"
    role = Column(
        Enum(Role, values_callable=lambda e: [r.value for r in e]),
        default=Role.STAFF,
        nullable=False,
    )

    is_active = Column(Boolean, default=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    branch = relationship("Branch", back_populates="users")
