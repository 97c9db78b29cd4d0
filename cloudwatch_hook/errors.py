"""Exceptions raised by the CloudWatch log hook."""


class CloudwatchHookError(Exception):
    """Base class for every error raised by this package."""


class InitializationError(CloudwatchHookError):
    """The remote client could not be opened or the group/stream set up."""


class SerializationError(CloudwatchHookError):
    """Structured fields could not be serialized onto the message."""


class DispatchError(CloudwatchHookError):
    """An append to the remote log stream failed."""
