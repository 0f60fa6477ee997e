from app.api.v1.schemas.prayers import (
    PrayerCreate,
    PrayerDetailOut,
    PrayerOut,
    PrayerUpdate,
    PublicPrayerOut,
)
from app.api.v1.schemas.registrations import (
    AdminRegistrationOut,
    OkOut,
    QRPayload,
    RegistrationCreate,
    RegistrationCreatedOut,
    RegistrationOut,
    RegistrationPrayerOut,
    RegistrationUpdate,
)

__all__ = [
    "PrayerCreate",
    "PrayerUpdate",
    "PrayerOut",
    "PrayerDetailOut",
    "PublicPrayerOut",
    "QRPayload",
    "RegistrationCreate",
    "RegistrationUpdate",
    "RegistrationCreatedOut",
    "RegistrationOut",
    "RegistrationPrayerOut",
    "AdminRegistrationOut",
    "OkOut",
]
