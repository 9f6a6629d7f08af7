# schemas/recruitment.py
from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional, List
from datetime import datetime

from portal.models.recruitment import ApplicantType, ApplicationStatus, EmploymentType

# --- Vacantes ---

class JobPostingBase(BaseModel):
    title: str = Field(min_length=3)
    description: str = Field(min_length=10)
    branch: Optional[str] = None
    region: Optional[str] = None
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    deadline: Optional[datetime] = None

class JobPostingCreate(JobPostingBase):
    pass

class JobPostingRead(JobPostingBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Reglas por vacante ---

class RuleSetUpsert(BaseModel):
    must_have: List[str] = []
    preferred: List[str] = []
    shortlist_threshold: int = Field(default=35, ge=0)
    reject_threshold: int = Field(default=15, ge=0)

    @model_validator(mode="after")
    def thresholds_in_order(self):
        if self.reject_threshold > self.shortlist_threshold:
            raise ValueError("reject_threshold cannot be above shortlist_threshold")
        return self

class RuleSetRead(RuleSetUpsert):
    id: int
    job_id: int

    class Config:
        from_attributes = True

# --- Postulaciones ---

class ApplicationCreate(BaseModel):
    job_id: int
    applicant_type: ApplicantType
    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    resume_url: Optional[str] = None
    resume_text: Optional[str] = None

class ApplicationRead(BaseModel):
    id: int
    job_id: int
    applicant_type: ApplicantType
    first_name: str
    last_name: str
    email: str
    phone: str
    resume_url: Optional[str] = None
    status: ApplicationStatus
    score: int
    decision: Optional[str] = None
    reasons: List[str] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ApplyResponse(BaseModel):
    application: ApplicationRead
    score: int
    decision: str
    reasons: List[str]
