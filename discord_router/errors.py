"""Exceptions raised by the interaction router."""


class ConfigurationError(RuntimeError):
    """Deployment/setup defect (missing variable, missing capability)."""

    def __init__(self, variable: str, message: str = None):
        self.variable = variable
        super().__init__(message or f"{variable} is not configured")


class BackgroundExecutionUnavailable(ConfigurationError):
    """Deferred work was requested but the host offers no wait_until."""

    def __init__(self):
        super().__init__(
            'execution_ctx',
            'This context has no wait_until capability; deferred replies need an execution context'
        )


class DispatchError(Exception):
    """Request-level error raised while routing an interaction."""

    status_code = 400


class MalformedInteractionError(DispatchError):
    """Verified body is not a JSON interaction object."""


class InvalidCustomIdError(DispatchError):
    """Custom id does not contain the routing separator."""

    def __init__(self, custom_id: str, separator: str):
        self.custom_id = custom_id
        self.separator = separator
        super().__init__(f"Custom id {custom_id!r} has no {separator!r} separator")


class HandlerNotFoundError(DispatchError):
    """No handler registered for the resolved key."""

    def __init__(self, partition, key: str):
        self.partition = partition
        self.key = key
        super().__init__(f"No {partition.name.lower()} handler registered for {key!r}")
