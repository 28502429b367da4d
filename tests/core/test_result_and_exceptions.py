"""Tests for the error taxonomy and Result values."""

from researchly.core.exceptions import (
    CacheTooSmallError,
    ErrorKind,
    NotFoundError,
    PreconditionFailedError,
    ProviderError,
    StorageError,
    VectorStoreError,
)
from researchly.core.result import Err, Ok


class TestErrorKinds:
    """Each exception reports the kind sent to clients as the error code."""

    def test_not_found_defaults(self) -> None:
        exc = NotFoundError(resource_id="abc")
        assert exc.kind == ErrorKind.NOT_FOUND
        assert exc.message == "Paper not found"
        assert exc.details == {"resource_id": "abc"}

    def test_cache_too_small_is_a_provider_error(self) -> None:
        exc = CacheTooSmallError()
        assert isinstance(exc, ProviderError)
        assert exc.details["provider"] == "cache"

    def test_vector_store_error_records_operation(self) -> None:
        exc = VectorStoreError("boom", operation="query")
        assert exc.kind == ErrorKind.PROVIDER_ERROR
        assert exc.details == {"operation": "query", "provider": "vector_index"}

    def test_str_includes_details(self) -> None:
        assert str(StorageError("write failed", operation="save")) == (
            "write failed | Details: {'operation': 'save'}"
        )
        assert str(PreconditionFailedError("Paper has no PDF file")) == "Paper has no PDF file"


class TestResult:
    def test_err_from_exception_keeps_kind_and_message(self) -> None:
        err = Err.from_exception(NotFoundError())
        assert err == Err(ErrorKind.NOT_FOUND, "Paper not found")

    def test_err_from_exception_message_override(self) -> None:
        err = Err.from_exception(StorageError("db down"), "Failed to get chat history")
        assert err.kind == ErrorKind.STORAGE_ERROR
        assert err.message == "Failed to get chat history"

    def test_ok_equality(self) -> None:
        assert Ok(()) == Ok(())
        assert Ok(1) != Err(ErrorKind.NOT_FOUND, "x")
