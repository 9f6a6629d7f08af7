import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from portal.database import get_db
from portal.models import User, Role
from portal.schemas.users import UserCreate, UserRead
from portal.security import require_roles, get_password_hash

logger = logging.getLogger(__name__)

router = APIRouter()

# --- 1. LEER TODOS ---
@router.get("/", response_model=List[UserRead])
def read_users(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.SUPERADMIN))
):
    return db.query(User).order_by(User.id).offset(skip).limit(limit).all()

# --- 2. CREAR USUARIO ---
@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.SUPERADMIN))
):
    email = user.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = User(
        email=email,
        full_name=user.full_name,
        position=user.position,
        role=user.role,
        is_active=user.is_active,
        password_hash=get_password_hash(user.password),
        branch_id=user.branch_id
    )

    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info("User %s (%s) created by %s", new_user.id, new_user.role.value, current_user.id)
    return new_user
