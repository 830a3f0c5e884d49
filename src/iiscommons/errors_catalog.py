"""Actionable error catalog for iis-commons."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "credential_file_not_found": {
        "what": "Unable to find an authorisation file: {path}",
        "next": "Create one with `iis-commons create-auth-file` or pass its location.",
    },
    "malformed_inventory": {
        "what": "Install registry is missing required information: {detail}",
        "next": "Check that Version.xml belongs to a complete installation.",
    },
    "host_required": {
        "what": "{operation} can only be run on the Information Server host.",
        "next": "Run the command on the engine tier where the platform is installed.",
    },
    "remote_not_configured": {
        "what": "No {template} is configured for remote execution.",
        "next": "Add remote connection details with `iis-commons add-remote-details`.",
    },
    "missing_placeholders": {
        "what": "Remote copy template is missing {placeholders}: {template}",
        "next": "Recreate the remote connection details for the authorisation file.",
    },
    "encryption_failed": {
        "what": "Unable to encrypt password for authorisation file: exit code {exit_code}.",
        "next": "Check that {command} exists and runs for the current user.",
    },
    "incomplete_auth": {
        "what": "Incomplete authentication information, missing username or password (or both).",
        "next": "Provide both a username and a password for the REST connection.",
    },
    "incomplete_connection": {
        "what": "Incomplete connection information, missing host or port (or both).",
        "next": "Provide both the domain tier host and its console port.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
