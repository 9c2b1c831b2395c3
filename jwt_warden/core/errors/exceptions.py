from typing import Any


class CoreException(Exception):
    def __init__(
        self, message: str | None = None, additional_info: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        self.additional_info = additional_info


class InfrastructureException(CoreException):
    pass


class UnauthorizedException(CoreException):
    pass


class TokenDecodeError(CoreException):
    """
    A token string failed verification.

    Only raised by the signing codec's strict decode path; the lookup path turns
    it into ``None``. ``reason`` names the failed check for diagnostics.
    """

    def __init__(
        self,
        reason: str,
        message: str | None = None,
        additional_info: dict[str, Any] | None = None,
    ):
        super().__init__(message or reason, additional_info)
        self.reason = reason
