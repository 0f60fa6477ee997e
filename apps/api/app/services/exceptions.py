from __future__ import annotations

from app.services.error_codes import ErrorCode


class ServiceError(Exception):
    """Domain failure carrying a stable machine-readable code."""

    def __init__(self, code: ErrorCode | str, message: str | None = None) -> None:
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.message = message or self.code
        super().__init__(self.message)


class NotFoundError(ServiceError):
    pass


class ConflictError(ServiceError):
    pass


class ValidationError(ServiceError):
    pass


class CapacityExceededError(ConflictError):
    def __init__(self, message: str = "not enough capacity") -> None:
        super().__init__(ErrorCode.CAPACITY_EXCEEDED, message)


class DuplicateDeviceError(ConflictError):
    def __init__(self, message: str = "device already registered for this prayer") -> None:
        super().__init__(ErrorCode.DEVICE_ALREADY_REGISTERED, message)


class InactiveRegistrationError(ConflictError):
    def __init__(self, message: str = "registration is not active") -> None:
        super().__init__(ErrorCode.REGISTRATION_NOT_ACTIVE, message)


class RegistrationClosedError(ConflictError):
    def __init__(self, message: str = "registration is closed for this prayer") -> None:
        super().__init__(ErrorCode.REGISTRATION_CLOSED, message)


class InvalidInputError(ValidationError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.INVALID_INPUT, message)
