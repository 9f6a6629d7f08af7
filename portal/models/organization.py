# portal/models/organization.py
from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from portal.database import Base

class Branch(Base):
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    region = Column(String, nullable=True)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)

    users = relationship("User", back_populates="branch")
    float_config = relationship("FloatConfig", back_populates="branch", uselist=False)

    @property
    def has_float(self) -> bool:
        return self.float_config is not None
