import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from portal.exceptions import NotFound
from portal.models import Application, ApplicationStatus, JobPosting, RecruitmentRuleSet, User
from portal.schemas.recruitment import ApplicationCreate, JobPostingCreate, RuleSetUpsert
from portal.utils.scoring import AUTO_REJECT, SHORTLIST, ScoreResult, ScoringRules, score_application

logger = logging.getLogger(__name__)

# Decision del pre-filtro -> estado inicial de la postulacion
DECISION_STATUS = {
    SHORTLIST: ApplicationStatus.SHORTLISTED,
    AUTO_REJECT: ApplicationStatus.REJECTED,
}


def list_jobs(db: Session) -> List[JobPosting]:
    return db.query(JobPosting).order_by(JobPosting.created_at.desc(), JobPosting.id.desc()).all()


def get_job(db: Session, job_id: int) -> JobPosting:
    job = db.query(JobPosting).filter(JobPosting.id == job_id).first()
    if not job:
        raise NotFound("Job not found")
    return job


def create_job(db: Session, job_in: JobPostingCreate, user: Optional[User] = None) -> JobPosting:
    job = JobPosting(**job_in.model_dump(), created_by_id=user.id if user else None)
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info("Job %s '%s' posted", job.id, job.title)
    return job


def get_rules(db: Session, job_id: int) -> Optional[RecruitmentRuleSet]:
    get_job(db, job_id)
    return db.query(RecruitmentRuleSet).filter(RecruitmentRuleSet.job_id == job_id).first()


def upsert_rules(db: Session, job_id: int, rules_in: RuleSetUpsert) -> RecruitmentRuleSet:
    get_job(db, job_id)
    rule_set = db.query(RecruitmentRuleSet).filter(RecruitmentRuleSet.job_id == job_id).first()
    if rule_set is None:
        rule_set = RecruitmentRuleSet(job_id=job_id)
        db.add(rule_set)

    for field, value in rules_in.model_dump().items():
        setattr(rule_set, field, value)

    db.commit()
    db.refresh(rule_set)
    logger.info("Rule set for job %s saved", job_id)
    return rule_set


def apply(db: Session, application_in: ApplicationCreate) -> tuple[Application, ScoreResult]:
    """Registra la postulacion y le asigna estado inicial segun el puntaje."""
    job = get_job(db, application_in.job_id)

    result = score_application(
        applicant_type=application_in.applicant_type,
        job_title=job.title,
        job_description=job.description,
        region=job.region,
        resume_text=application_in.resume_text,
        rules=ScoringRules.from_rule_set(job.rule_set),
    )

    application = Application(
        **application_in.model_dump(),
        status=DECISION_STATUS.get(result.decision, ApplicationStatus.RECEIVED),
        score=result.score,
        decision=result.decision,
        reasons=result.reasons,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    logger.info(
        "Application %s for job %s scored %s -> %s",
        application.id, job.id, result.score, result.decision,
    )
    return application, result


def list_applications(db: Session, job_id: int) -> List[Application]:
    return (
        db.query(Application)
        .filter(Application.job_id == job_id)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .all()
    )
