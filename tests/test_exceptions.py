import pytest

from app.utils.exceptions import (
    CatalogError,
    ConfigurationError,
    ExceptionContext,
    PayloadTooLargeError,
    ProcessingError,
    RateLimitError,
    ValidationError,
    map_to_http_exception,
)


class TestExceptionMapping:
    """Error taxonomy to HTTP status codes"""

    @pytest.mark.parametrize("exc,status", [
        (ValidationError("bad profile"), 400),
        (RateLimitError(limit=25, window=60), 429),
        (PayloadTooLargeError(limit=10, size=20), 413),
        (ProcessingError("scoring failed"), 500),
        (ConfigurationError("bad env"), 500),
        (CatalogError("upstream down"), 502),
    ])
    def test_status_codes(self, exc, status):
        assert map_to_http_exception(exc).status_code == status

    def test_validation_details_are_public(self):
        exc = ValidationError("User profile is required", field="userProfile")

        detail = map_to_http_exception(exc).detail

        assert detail["error"] == "User profile is required"
        assert detail["details"] == {"field": "userProfile"}

    def test_internal_messages_are_hidden(self):
        exc = ProcessingError("KeyError 'minGPA' in record 42", scholarship_id="42")

        detail = map_to_http_exception(exc).detail

        assert detail == {"error": "Internal server error", "message": "Internal server error"}

    def test_to_dict_includes_cause(self):
        exc = RateLimitError(limit=2, window=60, cause=RuntimeError("x"))

        data = exc.to_dict()

        assert data["error_code"] == "RATE_LIMIT_ERROR"
        assert data["details"] == {"limit": 2, "window_seconds": 60}
        assert data["cause"] == "x"


class TestExceptionContext:
    """Wrapping units of work"""

    def test_passes_through_custom_errors(self):
        with pytest.raises(CatalogError):
            with ExceptionContext("fetch"):
                raise CatalogError("down")

    def test_wraps_unexpected_errors(self):
        with pytest.raises(ProcessingError) as exc_info:
            with ExceptionContext("score", request_id="abc"):
                raise KeyError("minGPA")

        assert exc_info.value.details == {"request_id": "abc"}
        assert isinstance(exc_info.value.cause, KeyError)

    def test_success_is_silent(self):
        with ExceptionContext("noop") as ctx:
            pass

        assert ctx.operation == "noop"
