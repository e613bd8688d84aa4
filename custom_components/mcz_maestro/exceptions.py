"""Exceptions raised by the MCZ Maestro transports."""


class MaestroError(Exception):
    """Base exception for MCZ Maestro errors."""


class AuthenticationError(MaestroError):
    """Raised when the cloud rejects the credentials or a token refresh fails."""


class MaestroApiError(MaestroError):
    """Raised when the cloud API answers with an unexpected HTTP error."""


class MaestroConnectionError(MaestroError):
    """Raised when a transport cannot reach the stove or the cloud."""


class ConnectionTimeoutError(MaestroConnectionError):
    """Raised when opening a connection takes longer than allowed."""


class MessageTimeoutError(MaestroError):
    """Raised when no response matching a request arrives in time."""


class ModelUnavailableError(MaestroError):
    """Raised when the sensor model of an appliance cannot be retrieved.

    The generation detector relies on this error to recognise first
    generation stoves, so it is a signal rather than a fault.
    """


class SensorNotFoundError(MaestroError):
    """Raised when an essential sensor is missing from the sensor registry."""


class UndeterminedMacError(MaestroError):
    """Raised when no MAC address can be found for the Socket.IO transport."""


class CommandFailedError(MaestroError):
    """Raised when a command cannot be delivered to the stove.

    Attributes:
        connection_lost: True when the failure comes from a lost connection.

    """

    def __init__(self, message: str, *, connection_lost: bool = False) -> None:
        """Initialize the error."""
        super().__init__(message)
        self.connection_lost = connection_lost
