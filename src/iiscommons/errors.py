"""Domain errors for iis-commons."""


class ContextError(RuntimeError):
    """Raised when the environment context cannot satisfy a request."""


class CredentialFileNotFoundError(ContextError, FileNotFoundError):
    """The authorisation file is absent or unreadable."""


class MalformedInventoryError(ContextError):
    """The install registry is missing a required node."""


class HostRequiredError(ContextError):
    """A host-only operation was requested from a remote context."""


class EncryptionError(ContextError):
    """The platform encryption command did not produce a password."""


class CommandTimeoutError(ContextError):
    """An external command exceeded the configured timeout."""


class IncompleteAuthenticationError(ContextError):
    """Username or password missing for a REST connection."""


class IncompleteConnectionError(ContextError):
    """Host or port missing for a REST connection."""


class RestConnectionError(ContextError):
    """A REST request could not be completed."""
