"""
Tests for the relay exception hierarchy.
"""

import pytest

from upload_relay.core.exceptions import (
    ConfigError, ErrorCode, NotificationError, StorageError, TransportError, UploadRelayError
)


class TestUploadRelayError:
    """Test cases for the error types."""

    @pytest.mark.parametrize("error_cls, code", [
        (ConfigError, ErrorCode.CONFIG_ERROR),
        (TransportError, ErrorCode.TRANSPORT_ERROR),
        (StorageError, ErrorCode.STORAGE_ERROR),
        (NotificationError, ErrorCode.NOTIFICATION_ERROR),
    ])
    def test_subclasses_carry_their_code(self, error_cls: type, code: ErrorCode) -> None:
        error = error_cls("boom", details={"path": "a.txt"})

        assert isinstance(error, UploadRelayError)
        assert error.code is code
        assert error.details == {"path": "a.txt"}
        assert str(error) == "boom"

    def test_every_code_has_an_error_type(self) -> None:
        assert {code.name for code in ErrorCode} == {
            "CONFIG_ERROR", "TRANSPORT_ERROR", "STORAGE_ERROR", "NOTIFICATION_ERROR"
        }

    def test_to_dict(self) -> None:
        assert StorageError("disk full").to_dict() == {
            "error": "storage_error",
            "code": 20003,
            "message": "disk full",
        }
