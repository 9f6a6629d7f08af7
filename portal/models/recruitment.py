# portal/models/recruitment.py
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, JSON
from sqlalchemy.orm import relationship
from portal.database import Base
from portal.utils.dates import utcnow


class EmploymentType(str, enum.Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"


class ApplicantType(str, enum.Enum):
    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"


class ApplicationStatus(str, enum.Enum):
    RECEIVED = "RECEIVED"
    SHORTLISTED = "SHORTLISTED"
    INTERVIEW = "INTERVIEW"
    OFFER = "OFFER"
    HIRED = "HIRED"
    REJECTED = "REJECTED"


class JobPosting(Base):
    __tablename__ = "job_postings"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    branch = Column(String, nullable=True)
    region = Column(String, nullable=True)
    employment_type = Column(Enum(EmploymentType), default=EmploymentType.FULL_TIME)
    deadline = Column(DateTime, nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    applications = relationship("Application", back_populates="job")
    rule_set = relationship("RecruitmentRuleSet", back_populates="job", uselist=False)


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("job_postings.id"), nullable=False, index=True)
    applicant_type = Column(Enum(ApplicantType), nullable=False)

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=False)
    resume_url = Column(String, nullable=True)
    resume_text = Column(Text, nullable=True)

    status = Column(Enum(ApplicationStatus), default=ApplicationStatus.RECEIVED, nullable=False)

    # Resultado del pre-filtro automatico
    score = Column(Integer, default=0)
    decision = Column(String, nullable=True)
    reasons = Column(JSON, default=list)

    created_at = Column(DateTime, default=utcnow)

    job = relationship("JobPosting", back_populates="applications")


class RecruitmentRuleSet(Base):
    """Palabras clave y umbrales propios de una vacante."""
    __tablename__ = "recruitment_rule_sets"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("job_postings.id"), unique=True, nullable=False)

    must_have = Column(JSON, default=list)
    preferred = Column(JSON, default=list)
    shortlist_threshold = Column(Integer, default=35)
    reject_threshold = Column(Integer, default=15)

    job = relationship("JobPosting", back_populates="rule_set")
