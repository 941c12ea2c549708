"""
Error taxonomy

- Local errors (validation, coercion) never reach the network
- Remote errors carry the human-readable message normalized by the store
- Controllers convert every RemoteError into a Failed request status
"""
from typing import Optional


class ClinicAdminError(Exception):
    """
    Base error, always carries a message suitable for display
    """
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormValidationError(ClinicAdminError):
    """
    A draft (or a selected file) failed a local rule
    """
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class FieldCoercionError(ClinicAdminError):
    """
    Raw input could not be coerced to the field's declared kind
    """
    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class RemoteError(ClinicAdminError):
    """
    A remote store call failed
    """
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkError(RemoteError):
    """Transport failure, server error or unparsable response"""


class NotFoundError(RemoteError):
    """The requested entity does not exist"""


class ConflictError(RemoteError):
    """Duplicate unique field or similar conflict"""


class InvalidTransitionError(ClinicAdminError):
    """
    Illegal RequestStatus transition

    Raised for programming errors only, never converted into a status.
    """
