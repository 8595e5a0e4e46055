"""Domain-specific errors for dartlink."""

from typing import Final


class DartlinkError(Exception):
    """Base error for dartlink."""


class DeviceError(DartlinkError):
    """Base error for talking to the board manager."""


class DeviceTimeoutError(DeviceError):
    """Raised when the board manager does not answer within the request budget."""


class DeviceConnectionError(DeviceError):
    """Raised when the socket fails before a response completes.

    The underlying transport error is chained as ``__cause__``.
    """


class PayloadParseError(DartlinkError):
    """Raised when a board manager response body is not the expected JSON."""


class OverrideValidationError(DartlinkError):
    """Raised when a runtime override value is rejected."""


# Failures that mean "the board is not reachable" (drive the connectivity state)
NETWORK_ERRORS: Final = (DeviceTimeoutError, DeviceConnectionError)
