"""
Request status value object

- One instance per controller, replaced (never mutated) on every transition
- Idle -> Loading -> Succeeded | Failed -> Idle
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from clinic_admin.core.errors import InvalidTransitionError


class StatusKind(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RequestStatus:
    """
    Drives spinners, alerts and disabled buttons in the presentation layer
    """
    kind: StatusKind = StatusKind.IDLE
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> "RequestStatus":
        return cls(StatusKind.IDLE)

    @classmethod
    def loading(cls) -> "RequestStatus":
        return cls(StatusKind.LOADING)

    @classmethod
    def succeeded(cls, message: str) -> "RequestStatus":
        return cls(StatusKind.SUCCEEDED, message)

    @classmethod
    def failed(cls, message: str) -> "RequestStatus":
        return cls(StatusKind.FAILED, message)

    @property
    def is_idle(self) -> bool:
        return self.kind is StatusKind.IDLE

    @property
    def is_loading(self) -> bool:
        return self.kind is StatusKind.LOADING

    @property
    def is_succeeded(self) -> bool:
        return self.kind is StatusKind.SUCCEEDED

    @property
    def is_failed(self) -> bool:
        return self.kind is StatusKind.FAILED

    def start(self) -> "RequestStatus":
        """
        Begin an operation

        Starting from a settled state implicitly dismisses its message.
        Raises InvalidTransitionError if an operation is already loading.
        """
        if self.is_loading:
            raise InvalidTransitionError("An operation is already in progress")
        return RequestStatus.loading()

    def succeed(self, message: str) -> "RequestStatus":
        if not self.is_loading:
            raise InvalidTransitionError(f"Cannot succeed from {self.kind.value}")
        return RequestStatus.succeeded(message)

    def complete(self) -> "RequestStatus":
        """
        Finish a load silently: the populated view is the feedback
        """
        if not self.is_loading:
            raise InvalidTransitionError(f"Cannot complete from {self.kind.value}")
        return RequestStatus.idle()

    def fail(self, message: str) -> "RequestStatus":
        if not self.is_loading:
            raise InvalidTransitionError(f"Cannot fail from {self.kind.value}")
        return RequestStatus.failed(message)

    def reject(self, message: str) -> "RequestStatus":
        """
        Fail locally without a network round-trip (validation errors)
        """
        if self.is_loading:
            raise InvalidTransitionError("Cannot reject while an operation is loading")
        return RequestStatus.failed(message)

    def dismiss(self) -> "RequestStatus":
        if self.is_loading:
            raise InvalidTransitionError("Cannot dismiss while an operation is loading")
        return RequestStatus.idle()
