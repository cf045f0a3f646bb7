"""Tests for error types and the admin error decorator."""

import logging

import pytest

from support_agents.utils.decorators import handle_admin_errors
from support_agents.utils.errors import (
    ConfigurationError,
    CreationError,
    DuplicateCapabilityError,
    PermissionDeniedError,
    SupportAgentNotFoundError,
    SupportAgentsError,
    ValidationError,
)


class TestErrors:
    """Tests for the error hierarchy."""

    @pytest.mark.parametrize(
        "error",
        [
            ValidationError("bad"),
            CreationError("failed"),
            SupportAgentNotFoundError(5),
            PermissionDeniedError("wu_edit_support_agents"),
            ConfigurationError("missing"),
            DuplicateCapabilityError("export", "b", "a"),
        ],
    )
    def test_all_errors_share_base(self, error):
        assert isinstance(error, SupportAgentsError)

    def test_default_codes(self):
        assert ValidationError("bad").code == "invalid_input"
        assert CreationError("failed").code == "creation_failed"
        assert SupportAgentNotFoundError(5).code == "not_found"
        assert PermissionDeniedError("x").code == "permission_denied"

    def test_messages(self):
        assert str(SupportAgentNotFoundError(5)) == "Support agent not found: 5"
        assert "wu_edit_support_agents" in str(PermissionDeniedError("wu_edit_support_agents"))


class TestHandleAdminErrors:
    """Tests for the handle_admin_errors decorator."""

    def test_success_envelope(self):
        @handle_admin_errors
        def handler():
            return {"id": 1}

        assert handler() == {"success": True, "data": {"id": 1}}

    def test_none_payload_becomes_empty_dict(self):
        @handle_admin_errors
        def handler():
            return None

        assert handler() == {"success": True, "data": {}}

    @pytest.mark.parametrize(
        "error, code",
        [
            (ValidationError("bad user", code="invalid_user"), "invalid_user"),
            (CreationError("no account"), "creation_failed"),
            (SupportAgentNotFoundError(9), "not_found"),
            (PermissionDeniedError("wu_add_support_agents"), "permission_denied"),
        ],
    )
    def test_known_errors_become_error_envelope(self, error, code):
        @handle_admin_errors
        def handler():
            raise error

        response = handler()

        assert response["success"] is False
        assert response["data"]["code"] == code
        assert response["data"]["message"] == str(error)

    def test_unexpected_errors_propagate(self, caplog):
        @handle_admin_errors
        def handler():
            raise KeyError("boom")

        with caplog.at_level(logging.ERROR), pytest.raises(KeyError):
            handler()
        assert "unexpected error" in caplog.text

    def test_preserves_metadata(self):
        @handle_admin_errors
        def handle_something():
            """Handle something."""
            return {}

        assert handle_something.__name__ == "handle_something"
        assert handle_something.__doc__ == "Handle something."
