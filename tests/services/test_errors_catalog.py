import pytest

from iiscommons.errors_catalog import actionable_error


def test_actionable_error_formats_message_with_suggested_action():
    message = actionable_error("host_required", operation="Creating an authorisation file")

    assert "Creating an authorisation file can only be run" in message
    assert "Suggested action:" in message


def test_actionable_error_rejects_unknown_code():
    with pytest.raises(KeyError):
        actionable_error("no_such_error")


def test_error_hierarchy_only_holds_raised_errors():
    from iiscommons import errors

    names = {
        name
        for name, value in vars(errors).items()
        if isinstance(value, type) and issubclass(value, errors.ContextError)
    }

    assert names == {
        "ContextError",
        "CredentialFileNotFoundError",
        "MalformedInventoryError",
        "HostRequiredError",
        "EncryptionError",
        "CommandTimeoutError",
        "IncompleteAuthenticationError",
        "IncompleteConnectionError",
        "RestConnectionError",
    }
