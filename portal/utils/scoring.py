"""Pre-filtro deterministico de postulaciones.

Sin base de datos ni efectos secundarios: recibe textos y reglas, devuelve
puntaje, decision y motivos. El router de reclutamiento decide que hacer
con el resultado.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

SHORTLIST = "SHORTLIST"
REVIEW = "REVIEW"
AUTO_REJECT = "AUTO-REJECT"

DEFAULT_MUST_HAVE = ("loan", "microfinance")
DEFAULT_PREFERRED = ("collections", "credit", "field", "portfolio", "kpi")

MUST_HAVE_POINTS = 20
PREFERRED_POINTS = 5
INTERNAL_BONUS = 10
REGION_BONUS = 5
REGION_KEYWORD = "nairobi"


@dataclass
class ScoringRules:
    must_have: Sequence[str] = DEFAULT_MUST_HAVE
    preferred: Sequence[str] = DEFAULT_PREFERRED
    shortlist_threshold: int = 35
    reject_threshold: int = 15

    @classmethod
    def from_rule_set(cls, rule_set) -> "ScoringRules":
        """Construye reglas desde un RecruitmentRuleSet; listas vacias usan las por defecto."""
        if rule_set is None:
            return cls()
        return cls(
            must_have=tuple(rule_set.must_have or DEFAULT_MUST_HAVE),
            preferred=tuple(rule_set.preferred or DEFAULT_PREFERRED),
            shortlist_threshold=35 if rule_set.shortlist_threshold is None else rule_set.shortlist_threshold,
            reject_threshold=15 if rule_set.reject_threshold is None else rule_set.reject_threshold,
        )


@dataclass
class ScoreResult:
    score: int
    decision: str
    reasons: List[str] = field(default_factory=list)


def _normalize(keywords: Sequence[str]) -> List[str]:
    seen = []
    for k in keywords:
        k = (k or "").strip().lower()
        if k and k not in seen:
            seen.append(k)
    return seen


def score_application(
    *,
    applicant_type: str,
    job_title: str,
    job_description: str,
    region: Optional[str] = None,
    resume_text: Optional[str] = None,
    rules: Optional[ScoringRules] = None,
) -> ScoreResult:
    rules = rules or ScoringRules()
    score = 0
    reasons: List[str] = []

    hay = f"{job_title} {job_description} {resume_text or ''}".lower()

    # 1. Filtro obligatorio: no descarta por si solo, pero marca la decision
    has_must = any(k in hay for k in _normalize(rules.must_have))
    if has_must:
        score += MUST_HAVE_POINTS
        reasons.append("Has must-have keywords")
    else:
        reasons.append("Missing must-have domain keywords")

    # 2. Deseables (+5 por cada palabra distinta)
    matched = [k for k in _normalize(rules.preferred) if k in hay]
    score += len(matched) * PREFERRED_POINTS
    if matched:
        reasons.append(f"Matched {len(matched)} preferred keyword(s)")

    # 3. Bonos
    if str(getattr(applicant_type, "value", applicant_type)).upper() == "INTERNAL":
        score += INTERNAL_BONUS
        reasons.append("Internal applicant bonus")

    if REGION_KEYWORD in (region or "").lower():
        score += REGION_BONUS
        reasons.append("Region match bonus")

    # 4. Decision
    if score >= rules.shortlist_threshold:
        decision = SHORTLIST
    elif score < rules.reject_threshold or not has_must:
        decision = AUTO_REJECT
    else:
        decision = REVIEW

    return ScoreResult(score=score, decision=decision, reasons=reasons)
