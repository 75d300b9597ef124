from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional, Literal
from datetime import date

GradeLevel = Literal["high-school", "undergraduate", "graduate", "postgraduate"]


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python; immutable once parsed"""
    model_config = ConfigDict(populate_by_name=True, frozen=True, allow_inf_nan=False)


# -------- Applicant profile --------
class AcademicInfo(WireModel):
    gpa: float = Field(ge=0.0, le=4.0)
    grade_level: GradeLevel = Field(alias="gradeLevel")
    field_of_study: str = Field(alias="fieldOfStudy", min_length=1)
    graduation_year: int = Field(alias="graduationYear")
    achievements: List[str] = Field(
        default_factory=list,
        validation_alias="academicAchievements",
        serialization_alias="academicAchievements",
    )

    @field_validator("field_of_study")
    @classmethod
    def field_not_blank(cls, v):
        if not v.strip():
            raise ValueError("fieldOfStudy cannot be blank")
        return v


class Demographics(WireModel):
    state: str = ""
    country: str = ""


class FinancialNeed(WireModel):
    has_financial_aid: bool = Field(default=False, alias="hasFinancialAid")


class ApplicantProfile(WireModel):
    academic: AcademicInfo
    demographics: Demographics = Field(default_factory=Demographics)
    skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    financial_need: FinancialNeed = Field(default_factory=FinancialNeed, alias="financialNeed")


# -------- Scholarships --------
class AwardAmount(WireModel):
    min: float = Field(ge=0)
    max: float = Field(ge=0)
    type: str = "one-time"

    @model_validator(mode="after")
    def check_range(self):
        if self.max < self.min:
            raise ValueError("awardAmount.max must be >= awardAmount.min")
        return self


class EligibilityCriteria(WireModel):
    """Sparse criteria: None means the axis is not constrained"""
    min_gpa: Optional[float] = Field(default=None, alias="minGPA", ge=0.0, le=4.0)
    grade_level: Optional[List[GradeLevel]] = Field(default=None, alias="gradeLevel")
    field_of_study: Optional[List[str]] = Field(default=None, alias="fieldOfStudy")


class SourceInfo(WireModel):
    name: str
    url: str
    last_synced: Optional[str] = Field(default=None, alias="lastSynced")


class ScholarshipRecord(WireModel):
    id: str = Field(min_length=1)
    name: str
    provider: str
    description: str = ""
    award_amount: AwardAmount = Field(alias="awardAmount")
    eligibility_criteria: EligibilityCriteria = Field(default_factory=EligibilityCriteria, alias="eligibilityCriteria")
    application_deadline: date = Field(alias="applicationDeadline")
    application_link: Optional[str] = Field(default=None, alias="applicationLink")
    requirements: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    source: Optional[SourceInfo] = None
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")

    @field_validator("eligibility_criteria", mode="before")
    @classmethod
    def default_criteria(cls, v):
        return {} if v is None else v
