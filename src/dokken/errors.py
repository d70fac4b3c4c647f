"""Exception hierarchy for dokken."""


class DokkenError(Exception):
    """Base class for all dokken errors."""
    pass


class ConfigError(DokkenError):
    """Invalid or missing configuration."""
    pass


class EngineError(DokkenError):
    """A container engine call failed."""
    pass


class NotFoundError(EngineError):
    """The requested image or container does not exist."""
    pass


class ConflictError(EngineError):
    """A resource with the same name already exists."""
    pass


class TransientEngineError(EngineError):
    """Engine failure that may succeed when the call is repeated."""
    pass


class ServerError(TransientEngineError):
    """The engine answered with a server-side error."""
    pass


class UnexpectedResponseError(TransientEngineError):
    """The engine answered with an unexpected status or malformed body."""
    pass


class EngineTimeoutError(TransientEngineError):
    """The engine did not answer within the configured timeout."""
    pass


class EngineIOError(TransientEngineError):
    """The connection to the engine failed."""
    pass
