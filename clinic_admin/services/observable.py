"""
Observable state and the shared controller plumbing

- Observable: explicit subscribe/notify in place of framework re-renders
- BaseController: request status, request tokens and the re-entrancy guard
  shared by the list, form and reference controllers
"""
import logging
from typing import Callable, Iterable, List, Optional

from clinic_admin.models.status import RequestStatus

logger = logging.getLogger(__name__)

Listener = Callable[[object], None]


class Observable:
    """
    Minimal subscription mechanism

    Listeners receive the observable itself and read whatever state they need.
    """

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener, returns a callable that unregisters it
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception(f"Listener {listener!r} failed on {type(self).__name__}")


class BaseController(Observable):
    """
    Owns one RequestStatus and the request token discipline

    Every operation takes a token from `_begin`; after each suspension point
    the continuation checks `_is_current(token)` and drops its result when a
    newer operation started or the controller was closed.
    """

    def __init__(self):
        super().__init__()
        self._status = RequestStatus.idle()
        self._token = 0
        self._operation: Optional[str] = None
        self._closed = False

    @property
    def status(self) -> RequestStatus:
        return self._status

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def busy(self) -> bool:
        return self._status.is_loading

    def _begin(self, operation: str, supersedes: Iterable[str] = ()) -> Optional[int]:
        """
        Start an operation, or return None when it must be rejected

        An in-flight operation named in `supersedes` is abandoned (last request
        wins); any other in-flight operation rejects the new one.
        """
        if self._closed:
            logger.debug(f"{type(self).__name__} closed, ignoring {operation}")
            return None
        if self._status.is_loading:
            if self._operation not in tuple(supersedes):
                logger.info(f"Rejected {operation}: {self._operation} already in progress")
                return None
        else:
            self._status = self._status.start()
        self._token += 1
        self._operation = operation
        logger.debug(f"{type(self).__name__} started {operation} (token {self._token})")
        self.notify()
        return self._token

    def _is_current(self, token: int) -> bool:
        if self._closed or token != self._token:
            logger.debug(f"{type(self).__name__} discarding stale continuation (token {token})")
            return False
        return True

    def _complete(self) -> None:
        self._operation = None
        self._status = self._status.complete()

    def _succeed(self, message: str) -> None:
        self._operation = None
        self._status = self._status.succeed(message)

    def _fail(self, message: str) -> None:
        self._operation = None
        self._status = self._status.fail(message)
        logger.warning(f"{type(self).__name__} failed: {message}")

    def _reject(self, message: str) -> None:
        self._status = self._status.reject(message)

    def dismiss(self) -> None:
        """
        Clear a settled message back to Idle, leaving data untouched
        """
        if self._status.is_loading or self._status.is_idle:
            return
        self._status = self._status.dismiss()
        self.notify()

    def close(self) -> None:
        """
        Detach the controller (screen unmounted): in-flight results become no-ops
        """
        self._closed = True
        self._token += 1
        self._listeners.clear()
