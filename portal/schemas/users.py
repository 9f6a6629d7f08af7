from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from portal.models.users import Role

class UserBase(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    position: Optional[str] = None
    role: Role = Role.STAFF
    branch_id: Optional[int] = None
    is_active: bool = True

class UserCreate(UserBase):
    password: str = Field(min_length=8)

class UserRead(UserBase):
    id: int

    class Config:
        from_attributes = True
