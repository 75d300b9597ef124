import math
import time
from dataclasses import dataclass
from datetime import date, datetime, time as dtime, timezone
from typing import Iterable, List, Optional

from app.models.models import ApplicantProfile, ScholarshipRecord
from app.models.response import MatchResult
from app.utils.exceptions import ProcessingError
from app.utils.logging_config import get_logger

logger = get_logger(__name__)

MODEL_USED = "weighted-rules-v1"

# Axis weights
GPA_MET_POINTS = 30
GPA_BONUS_POINTS = 10
GPA_BONUS_MARGIN = 0.5
NO_GPA_FLOOR_POINTS = 25
GRADE_LEVEL_POINTS = 25
FIELD_MATCH_POINTS = 25
NO_FIELD_CONSTRAINT_POINTS = 15
AFFINITY_POINTS = 15

INCLUSION_THRESHOLD = 30
EXCELLENT_MATCH_MIN = 80
GOOD_MATCH_MIN = 60

HIGH_URGENCY_MAX_DAYS = 30
MEDIUM_URGENCY_MAX_DAYS = 90

SECONDS_PER_DAY = 24 * 60 * 60


def meets_gpa(profile: ApplicantProfile, scholarship: ScholarshipRecord) -> bool:
    min_gpa = scholarship.eligibility_criteria.min_gpa
    return min_gpa is not None and profile.academic.gpa >= min_gpa


def earns_gpa_bonus(profile: ApplicantProfile, scholarship: ScholarshipRecord) -> bool:
    min_gpa = scholarship.eligibility_criteria.min_gpa
    if min_gpa is None:
        return False
    return profile.academic.gpa >= round(min_gpa + GPA_BONUS_MARGIN, 4)


def matches_grade_level(profile: ApplicantProfile, scholarship: ScholarshipRecord) -> bool:
    levels = scholarship.eligibility_criteria.grade_level
    return levels is not None and profile.academic.grade_level in levels


def matches_field_of_study(profile: ApplicantProfile, scholarship: ScholarshipRecord) -> bool:
    """Either side may name the broader field, so containment is checked both ways."""
    fields = scholarship.eligibility_criteria.field_of_study
    if fields is None:
        return False
    mine = profile.academic.field_of_study.strip().lower()
    for field in fields:
        theirs = field.strip().lower()
        if theirs and (theirs in mine or mine in theirs):
            return True
    return False


def matches_affinity(profile: ApplicantProfile, scholarship: ScholarshipRecord) -> bool:
    keywords = [k.lower() for k in list(profile.skills) + list(profile.interests)]
    for tag in scholarship.tags:
        t = tag.strip().lower()
        if t and any(t in k for k in keywords):
            return True
    return False


def calculate_match_score(profile: ApplicantProfile, scholarship: ScholarshipRecord) -> int:
    criteria = scholarship.eligibility_criteria
    score = 0

    if criteria.min_gpa is not None:
        if meets_gpa(profile, scholarship):
            score += GPA_MET_POINTS
            if earns_gpa_bonus(profile, scholarship):
                score += GPA_BONUS_POINTS
    else:
        score += NO_GPA_FLOOR_POINTS

    if matches_grade_level(profile, scholarship):
        score += GRADE_LEVEL_POINTS

    if criteria.field_of_study is not None:
        if matches_field_of_study(profile, scholarship):
            score += FIELD_MATCH_POINTS
    else:
        score += NO_FIELD_CONSTRAINT_POINTS

    if matches_affinity(profile, scholarship):
        score += AFFINITY_POINTS

    return min(100, max(0, score))


def get_matching_reasons(profile: ApplicantProfile, scholarship: ScholarshipRecord, score: int) -> List[str]:
    reasons: List[str] = []
    academic = profile.academic

    if meets_gpa(profile, scholarship):
        reasons.append(
            f"Meets GPA requirement ({academic.gpa:g} >= {scholarship.eligibility_criteria.min_gpa:g})"
        )

    if matches_grade_level(profile, scholarship):
        reasons.append(f"Matches academic level: {academic.grade_level}")

    if matches_field_of_study(profile, scholarship):
        reasons.append(f"Relevant to field of study: {academic.field_of_study}")

    if score >= EXCELLENT_MATCH_MIN:
        reasons.append("Excellent overall match for your profile")
    elif score >= GOOD_MATCH_MIN:
        reasons.append("Good match based on your qualifications")

    return reasons or ["Basic eligibility match"]


def _as_utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def days_until_deadline(deadline: date, now: Optional[datetime] = None) -> int:
    """Whole days until midnight UTC on ``deadline``, rounded up; negative once passed."""
    deadline_at = datetime.combine(deadline, dtime.min, tzinfo=timezone.utc)
    delta = deadline_at - _as_utc(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def classify_urgency(days: int) -> str:
    # past deadlines fall under the first branch as well
    if days <= HIGH_URGENCY_MAX_DAYS:
        return "high"
    if days <= MEDIUM_URGENCY_MAX_DAYS:
        return "medium"
    return "low"


def calculate_urgency(deadline: date, now: Optional[datetime] = None) -> str:
    return classify_urgency(days_until_deadline(deadline, now))


@dataclass
class MatchOutcome:
    matches: List[MatchResult]
    total_processed: int
    processing_time_ms: float


def score_scholarship(profile: ApplicantProfile, scholarship: ScholarshipRecord, now: datetime) -> MatchResult:
    score = calculate_match_score(profile, scholarship)
    days = days_until_deadline(scholarship.application_deadline, now)
    return MatchResult(
        scholarship=scholarship,
        match_score=score,
        reasons=get_matching_reasons(profile, scholarship, score),
        urgency=classify_urgency(days),
        days_until_deadline=days,
    )


def match_scholarships(
    profile: ApplicantProfile,
    catalog: Iterable[ScholarshipRecord],
    now: Optional[datetime] = None,
) -> MatchOutcome:
    """Score every scholarship, keep those above the inclusion threshold, best first.

    Any failure while scoring aborts the whole batch with ProcessingError.
    """
    start = time.perf_counter()
    now = _as_utc(now)

    results: List[MatchResult] = []
    total = 0
    for scholarship in catalog:
        total += 1
        try:
            result = score_scholarship(profile, scholarship, now)
        except Exception as e:
            raise ProcessingError(
                f"Failed to score scholarship {scholarship.id}",
                scholarship_id=scholarship.id,
                cause=e,
            ) from e
        if result.match_score > INCLUSION_THRESHOLD:
            results.append(result)

    # sorted() is stable, so ties keep catalog order
    results = sorted(results, key=lambda r: r.match_score, reverse=True)

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.debug(f"Scored {total} scholarships, {len(results)} above threshold")
    return MatchOutcome(matches=results, total_processed=total, processing_time_ms=elapsed_ms)
