import math

import pytest
from pydantic import ValidationError

from app.models.models import ApplicantProfile, ScholarshipRecord
from conftest import profile_payload, scholarship_payload


class TestApplicantProfile:
    """Profile parsing from the camelCase wire format"""

    def test_achievements_short_key(self):
        payload = profile_payload()
        del payload["academic"]["academicAchievements"]
        payload["academic"]["achievements"] = ["Dean's List"]

        profile = ApplicantProfile.model_validate(payload)

        assert profile.academic.achievements == ["Dean's List"]
        assert profile.model_dump(by_alias=True)["academic"]["academicAchievements"] == ["Dean's List"]

    @pytest.mark.parametrize("gpa", [math.nan, math.inf])
    def test_non_finite_gpa_rejected(self, gpa):
        with pytest.raises(ValidationError):
            ApplicantProfile.model_validate(profile_payload(gpa=gpa))


class TestScholarshipRecord:
    """Catalog record validation"""

    @pytest.mark.parametrize("award", [
        {"min": 1000, "max": math.inf},
        {"min": math.nan, "max": 5000},
    ])
    def test_non_finite_award_rejected(self, award):
        with pytest.raises(ValidationError):
            ScholarshipRecord.model_validate(scholarship_payload(awardAmount=award))

    def test_non_finite_min_gpa_rejected(self):
        with pytest.raises(ValidationError):
            ScholarshipRecord.model_validate(scholarship_payload(eligibilityCriteria={"minGPA": math.nan}))

    def test_missing_criteria_means_unconstrained(self):
        record = ScholarshipRecord.model_validate(scholarship_payload(eligibilityCriteria=None))

        assert record.eligibility_criteria.min_gpa is None
        assert record.eligibility_criteria.grade_level is None
        assert record.eligibility_criteria.field_of_study is None
