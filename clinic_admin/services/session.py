"""
Session accessor

Controllers receive a SessionProvider at construction instead of reaching
into global auth state; they only need the current user's id.
"""
from typing import Optional, Protocol


class SessionProvider(Protocol):
    def current_user_id(self) -> Optional[str]: ...


class StaticSession:
    """
    Fixed identity, for scripts, tests and single-user tools
    """
    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self.user_id
