# portal/routers/recruitment.py
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from portal.crud import recruitment as crud_rec
from portal.database import get_db
from portal.models import Role, User
from portal.schemas.recruitment import (
    ApplicationCreate, ApplicationRead, ApplyResponse,
    JobPostingCreate, JobPostingRead, RuleSetRead, RuleSetUpsert,
)
from portal.security import require_roles

router = APIRouter()

HIRING = (Role.HR, Role.MANAGER, Role.SUPERADMIN)


# --- Vacantes (publicas para el portal de empleo) ---

@router.get("/jobs", response_model=List[JobPostingRead])
def read_jobs(db: Session = Depends(get_db)):
    return crud_rec.list_jobs(db)

@router.get("/jobs/{job_id}", response_model=JobPostingRead)
def read_job(job_id: int, db: Session = Depends(get_db)):
    return crud_rec.get_job(db, job_id)

@router.post("/jobs", response_model=JobPostingRead, status_code=status.HTTP_201_CREATED)
def create_job(
    job_in: JobPostingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*HIRING))
):
    return crud_rec.create_job(db, job_in, current_user)


# --- Reglas de pre-filtro por vacante ---

@router.get("/jobs/{job_id}/rules", response_model=Optional[RuleSetRead])
def read_rules(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*HIRING))
):
    return crud_rec.get_rules(db, job_id)

@router.put("/jobs/{job_id}/rules", response_model=RuleSetRead)
def save_rules(
    job_id: int,
    rules_in: RuleSetUpsert,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*HIRING))
):
    return crud_rec.upsert_rules(db, job_id, rules_in)


# --- Postulaciones ---

@router.post("/applications/apply", response_model=ApplyResponse, status_code=status.HTTP_201_CREATED)
def apply(application_in: ApplicationCreate, db: Session = Depends(get_db)):
    """Postulacion publica: se califica al momento y se fija el estado inicial."""
    application, result = crud_rec.apply(db, application_in)
    return {
        "application": application,
        "score": result.score,
        "decision": result.decision,
        "reasons": result.reasons,
    }

@router.get("/applications/{job_id}", response_model=List[ApplicationRead])
def read_applications(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*HIRING))
):
    return crud_rec.list_applications(db, job_id)
