import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError as PydanticValidationError

from app.models.response import ProcessingSummary, SearchResponse, SearchResult
from app.models.schemas import SearchRequest
from app.services.catalog import CatalogProvider, load_catalog
from app.services.matching import MODEL_USED, match_scholarships
from app.services.rate_limiter import RateLimiter
from app.utils.config import Settings
from app.utils.exceptions import ExceptionContext, PayloadTooLargeError, RateLimitError, ValidationError
from app.utils.logging_config import get_logger, PerformanceMonitor

router = APIRouter(prefix="/api/scholarships", tags=["scholarships"])
logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


# ----------------------
# Dependencies
# ----------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_catalog_provider(request: Request) -> CatalogProvider:
    return request.app.state.catalog_provider


def get_client_key(request: Request) -> str:
    """First X-Forwarded-For hop, or "unknown" when the header is absent"""
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    return first or "unknown"


def enforce_rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> str:
    client_key = get_client_key(request)
    if not limiter.allow(client_key):
        raise RateLimitError(limit=limiter.max_requests, window=limiter.window_seconds)
    return client_key


# ----------------------
# Helpers
# ----------------------

async def _read_json_body(request: Request, max_bytes: int) -> Any:
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise PayloadTooLargeError(limit=max_bytes, size=int(declared))

    body = await request.body()
    if len(body) > max_bytes:
        raise PayloadTooLargeError(limit=max_bytes, size=len(body))
    if not body:
        return {}

    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("Request body must be valid JSON", cause=e) from e


def _parse_search_request(body: Any) -> SearchRequest:
    if not isinstance(body, dict) or body.get("userProfile") is None:
        raise ValidationError("User profile is required", field="userProfile")

    try:
        search = SearchRequest.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid user profile",
            field="userProfile",
            details={"validation_errors": e.errors(include_url=False, include_context=False)},
            cause=e,
        ) from e
    return search


# ----------------------
# Routes
# ----------------------

@router.post("/search", response_model=SearchResponse)
async def search_scholarships(
    request: Request,
    client_key: str = Depends(enforce_rate_limit),
    settings: Settings = Depends(get_settings),
    provider: CatalogProvider = Depends(get_catalog_provider),
):
    """Score the scholarship catalog against an applicant profile"""
    request_id = getattr(request.state, 'request_id', 'unknown')

    body = await _read_json_body(request, settings.max_body_bytes)
    profile = _parse_search_request(body).user_profile

    logger.info(
        f"Matching scholarships for {profile.academic.grade_level} in {profile.academic.field_of_study}",
        extra={"request_id": request_id, "client_key": client_key}
    )

    with PerformanceMonitor("search_scholarships", logger):
        with ExceptionContext("match_scholarships", logger, request_id=request_id):
            catalog, skipped = load_catalog(provider, skip_invalid=settings.skip_invalid_records)
            outcome = match_scholarships(profile, catalog)

    logger.info(
        f"Found {len(outcome.matches)} matches in {outcome.processing_time_ms:.0f}ms",
        extra={"request_id": request_id, "match_count": len(outcome.matches), "skipped_records": skipped}
    )

    return SearchResponse(
        data=SearchResult(
            matches=outcome.matches,
            processing=ProcessingSummary(
                total_processed=outcome.total_processed,
                processing_time=round(outcome.processing_time_ms, 3),
                model_used=MODEL_USED,
                skipped_records=skipped,
            ),
        )
    )


@router.options("/search", include_in_schema=False)
async def search_options() -> Response:
    # Browser preflights never get here; CORSMiddleware answers them first
    return Response(status_code=200, headers=CORS_HEADERS)


@router.get("")
async def list_scholarships(
    request: Request,
    client_key: str = Depends(enforce_rate_limit),
    settings: Settings = Depends(get_settings),
    provider: CatalogProvider = Depends(get_catalog_provider),
) -> Dict[str, Any]:
    """Current catalog, as the matcher sees it"""
    request_id = getattr(request.state, 'request_id', 'unknown')

    with ExceptionContext("list_scholarships", logger, request_id=request_id):
        catalog, skipped = load_catalog(provider, skip_invalid=settings.skip_invalid_records)

    return {
        "success": True,
        "data": {
            "scholarships": [s.model_dump(mode="json", by_alias=True) for s in catalog],
            "total": len(catalog),
            "skippedRecords": skipped,
        }
    }
