# models/response.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal

from app.models.models import ScholarshipRecord

Urgency = Literal["low", "medium", "high"]


class MatchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scholarship: ScholarshipRecord
    match_score: int = Field(ge=0, le=100, alias="matchScore")
    reasons: List[str] = Field(min_length=1)
    urgency: Urgency
    days_until_deadline: int = Field(alias="daysUntilDeadline")


class ProcessingSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_processed: int = Field(alias="totalProcessed")
    processing_time: float = Field(alias="processingTime", description="Milliseconds spent matching")
    model_used: str = Field(alias="modelUsed")
    skipped_records: int = Field(default=0, alias="skippedRecords")


class SearchResult(BaseModel):
    matches: List[MatchResult]
    processing: ProcessingSummary


class SearchResponse(BaseModel):
    success: bool = True
    data: SearchResult
