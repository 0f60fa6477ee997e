from app.services.prayers_service import (
    create_prayer,
    delete_prayer,
    export_registrations_csv,
    get_prayer,
    list_open_prayers,
    list_prayers,
    update_prayer,
)
from app.services.registration_service import admit, amend, cancel, get_registration, list_registrations

__all__ = [
    "create_prayer",
    "update_prayer",
    "delete_prayer",
    "get_prayer",
    "list_prayers",
    "list_open_prayers",
    "export_registrations_csv",
    "admit",
    "amend",
    "cancel",
    "get_registration",
    "list_registrations",
]
