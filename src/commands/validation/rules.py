"""
Field-level validation rules.

A command declares an ordered list of rules. Every rule is evaluated, even
after an earlier one fails, so the caller receives the complete error set in
one pass. Rules other than PresenceRule skip blank values; pair them with a
PresenceRule when the field is mandatory.
"""

import fnmatch
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Optional, Sequence
from urllib.parse import urlparse

from src.config.constants import ALLOWED_URL_SCHEMES
from src.repositories.goal_repository import coerce_id

if TYPE_CHECKING:
    from src.commands.interfaces.command_context import CommandContext

Lookup = Callable[["CommandContext", Any], Awaitable[bool]]


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


class FieldRule(ABC):
    """A named check on a single input field"""

    name: str = "rule"
    skip_blank: bool = True

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        self._message = message

    async def evaluate(self, context: "CommandContext") -> bool:
        """
        Run the rule against the context, recording an error on failure.

        Returns:
            True if the rule passed (or was skipped)
        """
        value = context.get_field(self.field)
        if self.skip_blank and is_blank(value):
            return True

        failure = await self.check(value, context)
        if failure is None:
            return True

        context.errors.add(self.field, self.name, self._message or failure)
        return False

    @abstractmethod
    async def check(self, value: Any, context: "CommandContext") -> Optional[str]:
        """Return a failure message, or None if the value is acceptable"""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field='{self.field}')"


class PresenceRule(FieldRule):
    name = "presence"
    skip_blank = False

    async def check(self, value: Any, context: "CommandContext") -> Optional[str]:
        if is_blank(value):
            return "can't be blank"
        return None


class LengthRule(FieldRule):
    name = "length"

    def __init__(
        self,
        field: str,
        minimum: Optional[int] = None,
        maximum: Optional[int] = None,
        message: Optional[str] = None,
    ):
        super().__init__(field, message)
        if minimum is None and maximum is None:
            raise ValueError("LengthRule needs a minimum or a maximum")
        self.minimum = minimum
        self.maximum = maximum

    async def check(self, value: Any, context: "CommandContext") -> Optional[str]:
        if isinstance(value, str):
            length = len(value.strip())
        elif isinstance(value, (list, tuple)):
            length = len(value)
        else:
            return "must be a string"
        if self.minimum is not None and length < self.minimum:
            return f"is too short (minimum is {self.minimum} characters)"
        if self.maximum is not None and length > self.maximum:
            return f"is too long (maximum is {self.maximum} characters)"
        return None


class FormatRule(FieldRule):
    name = "format"

    def __init__(self, field: str, pattern: str, message: Optional[str] = None):
        super().__init__(field, message)
        self.pattern = re.compile(pattern)

    async def check(self, value: Any, context: "CommandContext") -> Optional[str]:
        if not isinstance(value, str) or not self.pattern.match(value):
            return "is invalid"
        return None


class IntegerRule(FieldRule):
    name = "integer"

    async def check(self, value: Any, context: "CommandContext") -> Optional[str]:
        if coerce_id(value) is None:
            return "must be an integer"
        return None


class UriRule(FieldRule):
    name = "uri"

    def __init__(
        self,
        field: str,
        schemes: Sequence[str] = ALLOWED_URL_SCHEMES,
        message: Optional[str] = None,
    ):
        super().__init__(field, message)
        self.schemes = tuple(schemes)

    async def check(self, value: Any, context: "CommandContext") -> Optional[str]:
        if not isinstance(value, str):
            return "is not a valid URI"
        try:
            parsed = urlparse(value.strip())
        except ValueError:
            return "is not a valid URI"
        if parsed.scheme not in self.schemes or not parsed.netloc:
            return f"is not a valid URI (expected {', '.join(self.schemes)})"
        return None


class ExistsRule(FieldRule):
    """Fails when the referenced record cannot be found"""

    name = "exists"

    def __init__(self, field: str, lookup: Lookup, message: Optional[str] = None):
        super().__init__(field, message)
        self.lookup = lookup

    async def check(self, value: Any, context: "CommandContext") -> Optional[str]:
        if not await self.lookup(context, value):
            return "does not exist"
        return None


class UniqueRule(FieldRule):
    """Fails when the value is already taken; lookup returns True if taken"""

    name = "unique"

    def __init__(self, field: str, lookup: Lookup, message: Optional[str] = None):
        super().__init__(field, message)
        self.lookup = lookup

    async def check(self, value: Any, context: "CommandContext") -> Optional[str]:
        if await self.lookup(context, value):
            return "has already been taken"
        return None


class ContentTypeRule(FieldRule):
    """Matches a MIME type against allowed patterns (``image/*`` style wildcards)"""

    name = "content_type"

    def __init__(
        self, field: str, allowed: Iterable[str], message: Optional[str] = None
    ):
        super().__init__(field, message)
        self.allowed = tuple(pattern.lower() for pattern in allowed)
        if not self.allowed:
            raise ValueError("ContentTypeRule needs at least one allowed type")

    async def check(self, value: Any, context: "CommandContext") -> Optional[str]:
        if not isinstance(value, str):
            return "is not a valid content type"
        # Ignore parameters such as "; charset=utf-8"
        mime = value.split(";", 1)[0].strip().lower()
        if any(fnmatch.fnmatchcase(mime, pattern) for pattern in self.allowed):
            return None
        return f"must be one of {', '.join(self.allowed)}"


async def evaluate_rules(rules: Iterable[FieldRule], context: "CommandContext") -> int:
    """
    Evaluate rules in declaration order without stopping at the first failure.

    Returns:
        Number of rules that failed
    """
    failed = 0
    for rule in rules:
        if not await rule.evaluate(context):
            failed += 1
    return failed
