import os

# Console-only logging, no log files, before the app module is imported
os.environ["ENVIRONMENT"] = "testing"
os.environ.pop("CATALOG_PATH", None)

import pytest

from app.models.models import ApplicantProfile, ScholarshipRecord


def profile_payload(**academic_overrides):
    academic = {
        "gpa": 3.6,
        "gradeLevel": "undergraduate",
        "fieldOfStudy": "Computer Science",
        "graduationYear": 2026,
        "academicAchievements": [],
    }
    academic.update(academic_overrides)
    return {
        "academic": academic,
        "demographics": {"state": "California", "country": "United States"},
        "skills": ["JavaScript", "Python"],
        "interests": ["Technology", "AI"],
        "financialNeed": {"hasFinancialAid": True},
    }


def scholarship_payload(**overrides):
    data = {
        "id": "sch-001",
        "name": "Test Scholarship",
        "provider": "Test Foundation",
        "description": "A scholarship used in tests.",
        "awardAmount": {"min": 1000, "max": 5000, "type": "one-time"},
        "eligibilityCriteria": {},
        "applicationDeadline": "2030-01-01",
        "applicationLink": "https://example.com/apply",
        "requirements": ["Essay"],
        "tags": [],
        "source": {"name": "Test Source", "url": "https://example.com", "lastSynced": "2026-01-01T00:00:00Z"},
        "lastUpdated": "2026-01-01T00:00:00Z",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_profile():
    def _make(skills=None, interests=None, **academic):
        payload = profile_payload(**academic)
        if skills is not None:
            payload["skills"] = skills
        if interests is not None:
            payload["interests"] = interests
        return ApplicantProfile.model_validate(payload)
    return _make


@pytest.fixture
def make_scholarship():
    def _make(**overrides):
        return ScholarshipRecord.model_validate(scholarship_payload(**overrides))
    return _make


class StaticCatalogProvider:
    """Serves a fixed list of raw records"""
    name = "static"

    def __init__(self, records):
        self.records = records
        self.calls = 0

    def fetch_catalog(self):
        self.calls += 1
        return list(self.records)


@pytest.fixture
def static_provider():
    return StaticCatalogProvider
