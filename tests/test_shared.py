"""Tests for the shared validators and exception types."""
import contextvars

from shared.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MAX_SEARCH_TERM_LENGTH
from shared.error_context import set_error_context_id
from shared.exceptions import AuthorizationError, ConflictError, InternalServerError, ServiceUnavailableError
from shared.validators import normalize_search_term, validate_pagination


class TestValidators:
    def test_pagination_defaults_and_caps(self):
        assert validate_pagination() == (DEFAULT_PAGE_SIZE, 0)
        assert validate_pagination(10_000, -5) == (MAX_PAGE_SIZE, 0)
        assert validate_pagination(5, 10) == (5, 10)

    def test_search_term(self):
        assert normalize_search_term("  ali ") == "ali"
        assert normalize_search_term("   ") is None
        assert normalize_search_term(None) is None
        assert len(normalize_search_term("x" * 500)) == MAX_SEARCH_TERM_LENGTH


class TestExceptions:
    def test_authorization_context(self):
        exc = AuthorizationError("denied", ["super-admin"], "manager")
        assert exc.status_code == 403
        assert exc.context == {"required_roles": ["super-admin"], "your_role": "manager"}
        assert exc.error_id

    def test_conflict_context(self):
        exc = ConflictError("nope", current_state="active")
        assert exc.status_code == 409
        assert exc.context == {"current_state": "active"}

    def test_service_unavailable_and_internal(self):
        assert ServiceUnavailableError("Email").status_code == 503
        assert ServiceUnavailableError("Email").detail == "Email service unavailable"
        assert InternalServerError().error_code == "INTERNAL_ERROR"

    def test_error_id_follows_request_context(self):
        def raise_in_request():
            set_error_context_id("req-123")
            return ConflictError("nope")

        exc = contextvars.copy_context().run(raise_in_request)
        assert exc.error_id == "req-123"
