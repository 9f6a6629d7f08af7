from pydantic import BaseModel, Field
from typing import Optional

class BranchBase(BaseModel):
    name: str = Field(min_length=2, max_length=80)
    region: Optional[str] = None  # Nairobi, Central, Coast...
    address: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True

class BranchCreate(BranchBase):
    pass

class BranchRead(BranchBase):
    id: int
    has_float: bool = False  # Ya tiene fondo de caja chica configurado

    class Config:
        from_attributes = True
