# Remote store and resource descriptors
from clinic_admin.api.resources import (
    DOCTORS,
    DOCUMENT_TEMPLATES,
    PASSWORDS,
    PATIENTS,
    PROFILES,
    TREATMENTS,
    Resource,
)
from clinic_admin.api.store import HttpRemoteStore, RemoteStore

__all__ = [
    "Resource",
    "PATIENTS",
    "TREATMENTS",
    "DOCTORS",
    "DOCUMENT_TEMPLATES",
    "PROFILES",
    "PASSWORDS",
    "RemoteStore",
    "HttpRemoteStore",
]
