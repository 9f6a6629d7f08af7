from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from portal.database import get_db
from portal.models import Branch, Role, User
from portal.schemas.branches import BranchCreate, BranchRead
from portal.security import get_current_user, require_roles

router = APIRouter()

@router.get("/", response_model=List[BranchRead])
def get_branches(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return db.query(Branch).order_by(Branch.name).all()

@router.post("/", response_model=BranchRead, status_code=status.HTTP_201_CREATED)
def create_branch(
    branch: BranchCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.SUPERADMIN))
):
    if db.query(Branch).filter(Branch.name == branch.name).first():
        raise HTTPException(status_code=400, detail="Branch already exists")

    new_branch = Branch(**branch.model_dump())
    db.add(new_branch)
    db.commit()
    db.refresh(new_branch)
    return new_branch
