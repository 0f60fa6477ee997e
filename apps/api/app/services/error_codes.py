from enum import Enum


class ErrorCode(str, Enum):
    PRAYER_NOT_FOUND = "PRAYER_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    CAPACITY_BELOW_CONFIRMED = "CAPACITY_BELOW_CONFIRMED"
    DEVICE_ALREADY_REGISTERED = "DEVICE_ALREADY_REGISTERED"
    REGISTRATION_NOT_ACTIVE = "REGISTRATION_NOT_ACTIVE"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    INVALID_INPUT = "INVALID_INPUT"
