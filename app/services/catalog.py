"""
Scholarship catalog providers.

A provider returns raw scholarship dictionaries in wire format; ``load_catalog``
validates them into ``ScholarshipRecord`` objects for the matcher.
"""
import json
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from app.models.models import ScholarshipRecord
from app.utils.exceptions import CatalogError, ProcessingError
from app.utils.logging_config import get_logger

logger = get_logger(__name__)


class CatalogProvider(ABC):
    name: str

    @abstractmethod
    def fetch_catalog(self) -> List[Dict[str, Any]]:
        """Return the current catalog as raw scholarship dictionaries."""


class MockCatalogProvider(CatalogProvider):
    """Static sample catalog standing in for live upstream sources.

    Deadlines are offsets from ``today`` so the sample always spans the
    three urgency tiers.
    """

    name = "mock"

    def __init__(self, today: Optional[date] = None):
        self._today = today

    def fetch_catalog(self) -> List[Dict[str, Any]]:
        today = self._today or datetime.now(timezone.utc).date()
        synced = datetime.now(timezone.utc).isoformat()

        def deadline(days: int) -> str:
            return (today + timedelta(days=days)).isoformat()

        return [
            {
                "id": "merit-excellence",
                "name": "Academic Excellence Scholarship",
                "provider": "National Education Foundation",
                "description": "Merit-based scholarship recognizing outstanding academic achievement and leadership potential.",
                "awardAmount": {"min": 1000, "max": 5000, "type": "one-time"},
                "eligibilityCriteria": {"minGPA": 3.5, "gradeLevel": ["undergraduate", "graduate"]},
                "applicationDeadline": deadline(120),
                "applicationLink": "https://example.com/apply/academic-excellence",
                "requirements": ["Personal Essay", "Official Transcripts", "Two Recommendation Letters"],
                "tags": ["merit-based", "academic", "leadership"],
                "source": {
                    "name": "College Scorecard Integration",
                    "url": "https://collegescorecard.ed.gov",
                    "lastSynced": synced,
                },
                "lastUpdated": synced,
            },
            {
                "id": "stem-innovation",
                "name": "STEM Innovation Grant",
                "provider": "Technology Education Council",
                "description": "Supporting the next generation of innovators in Science, Technology, Engineering, and Mathematics.",
                "awardAmount": {"min": 2500, "max": 10000, "type": "renewable"},
                "eligibilityCriteria": {
                    "minGPA": 3.0,
                    "gradeLevel": ["undergraduate"],
                    "fieldOfStudy": ["Computer Science", "Engineering", "Mathematics", "Physics"],
                },
                "applicationDeadline": deadline(75),
                "applicationLink": "https://example.com/apply/stem-innovation",
                "requirements": ["STEM Project Portfolio", "Academic Transcripts", "Faculty Recommendation"],
                "tags": ["stem", "technology", "innovation", "renewable"],
                "source": {
                    "name": "CareerOneStop Integration",
                    "url": "https://www.careeronestop.org",
                    "lastSynced": synced,
                },
                "lastUpdated": synced,
            },
            {
                "id": "diversity-inclusion",
                "name": "Diversity & Inclusion Excellence Award",
                "provider": "Equal Opportunity Education Fund",
                "description": "Celebrating diversity and promoting inclusion in higher education.",
                "awardAmount": {"min": 1500, "max": 7500, "type": "one-time"},
                "eligibilityCriteria": {"minGPA": 2.8, "gradeLevel": ["undergraduate", "graduate"]},
                "applicationDeadline": deadline(20),
                "applicationLink": "https://example.com/apply/diversity-inclusion",
                "requirements": ["Diversity Essay", "Community Service Record", "Academic Transcripts"],
                "tags": ["diversity", "inclusion", "community-service"],
                "source": {
                    "name": "Federal Student Aid",
                    "url": "https://studentaid.gov",
                    "lastSynced": synced,
                },
                "lastUpdated": synced,
            },
        ]


class JsonFileCatalogProvider(CatalogProvider):
    """Reads a catalog exported to a JSON file.

    Accepts either a top-level list or an object with a ``scholarships`` list.
    The file is re-read on every fetch.
    """

    name = "json-file"

    def __init__(self, path: str):
        self.path = Path(path)

    def fetch_catalog(self) -> List[Dict[str, Any]]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            raise CatalogError(f"Cannot read catalog file {self.path}", source=str(self.path), cause=e) from e
        except json.JSONDecodeError as e:
            raise CatalogError(f"Catalog file {self.path} is not valid JSON", source=str(self.path), cause=e) from e

        if isinstance(payload, dict):
            payload = payload.get("scholarships")
        if not isinstance(payload, list):
            raise CatalogError(
                f"Catalog file {self.path} must contain a list of scholarships",
                source=str(self.path),
            )
        return payload


def load_catalog(provider: CatalogProvider, skip_invalid: bool = True) -> Tuple[List[ScholarshipRecord], int]:
    """Fetch and validate the catalog.

    Returns the valid records (in catalog order) and the number skipped.
    With ``skip_invalid`` off, the first malformed record raises ProcessingError.
    """
    raw_records = provider.fetch_catalog()
    records: List[ScholarshipRecord] = []
    skipped = 0

    for index, raw in enumerate(raw_records):
        record_id = raw.get("id") if isinstance(raw, dict) else None
        try:
            records.append(ScholarshipRecord.model_validate(raw))
        except PydanticValidationError as e:
            if not skip_invalid:
                raise ProcessingError(
                    f"Malformed scholarship record at index {index}",
                    scholarship_id=record_id,
                    cause=e,
                ) from e
            skipped += 1
            logger.warning(
                f"Skipping malformed scholarship record {record_id or index} from {provider.name}: "
                f"{e.error_count()} validation error(s)"
            )

    logger.debug(f"Loaded {len(records)} scholarships from {provider.name} ({skipped} skipped)")
    return records, skipped


def build_catalog_provider(catalog_path: Optional[str] = None) -> CatalogProvider:
    if catalog_path:
        logger.info(f"Using JSON catalog at {catalog_path}")
        return JsonFileCatalogProvider(catalog_path)
    logger.info("Using mock scholarship catalog")
    return MockCatalogProvider()
