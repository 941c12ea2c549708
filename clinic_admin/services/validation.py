"""
Declarative draft validation

Rules are plain data declared per screen, independent of presentation.
`validate` runs them in order and stops at the first failure, so the form
shows one message at a time.
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence

from clinic_admin.services.fields import get_path

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


@dataclass(frozen=True)
class ValidationResult:
    message: Optional[str] = None
    field: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.message is None

    def __bool__(self) -> bool:
        return self.ok


VALID = ValidationResult()


@dataclass(frozen=True)
class Rule(ABC):
    """
    Base rule: `message` is reported against `field` when `passes` is False
    """
    field: str
    message: str

    @abstractmethod
    def passes(self, draft: Mapping[str, Any]) -> bool:
        ...


@dataclass(frozen=True)
class Required(Rule):
    def passes(self, draft: Mapping[str, Any]) -> bool:
        return not is_blank(get_path(draft, self.field))


@dataclass(frozen=True)
class Positive(Rule):
    def passes(self, draft: Mapping[str, Any]) -> bool:
        value = get_path(draft, self.field)
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class MatchesPattern(Rule):
    """
    Regex format check; blank values are left to a Required rule
    """
    pattern: str = ""

    def passes(self, draft: Mapping[str, Any]) -> bool:
        value = get_path(draft, self.field)
        if is_blank(value):
            return True
        return re.search(self.pattern, str(value)) is not None


@dataclass(frozen=True)
class MinLength(Rule):
    length: int = 0

    def passes(self, draft: Mapping[str, Any]) -> bool:
        return len(get_path(draft, self.field) or "") >= self.length


@dataclass(frozen=True)
class RequiredWhen(Rule):
    """
    `field` must be set whenever the `when` flag is truthy
    """
    when: str = ""

    def passes(self, draft: Mapping[str, Any]) -> bool:
        if not get_path(draft, self.when):
            return True
        return not is_blank(get_path(draft, self.field))


@dataclass(frozen=True)
class SameAs(Rule):
    other: str = ""

    def passes(self, draft: Mapping[str, Any]) -> bool:
        return get_path(draft, self.field) == get_path(draft, self.other)


@dataclass(frozen=True)
class Check(Rule):
    """
    Escape hatch for one-off rules: `check(draft)` returns True when valid
    """
    check: Callable[[Mapping[str, Any]], bool] = lambda draft: True

    def passes(self, draft: Mapping[str, Any]) -> bool:
        return bool(self.check(draft))


def validate(draft: Mapping[str, Any], rules: Sequence[Rule]) -> ValidationResult:
    for rule in rules:
        if not rule.passes(draft):
            return ValidationResult(rule.message, rule.field)
    return VALID
