from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class FieldError:
    """A single failed rule on a field"""

    rule: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"rule": self.rule, "message": self.message}


class ValidationErrors:
    """
    Per-field collection of validation failures.

    Errors keep insertion order per field so callers see them in rule
    declaration order.
    """

    def __init__(self) -> None:
        self._errors: Dict[str, List[FieldError]] = {}

    def add(self, field: str, rule: str, message: str) -> None:
        self._errors.setdefault(field, []).append(FieldError(rule, message))

    def is_empty(self) -> bool:
        return not self._errors

    def fields(self) -> List[str]:
        return list(self._errors.keys())

    def for_field(self, field: str) -> List[FieldError]:
        return list(self._errors.get(field, []))

    def rules_for(self, field: str) -> List[str]:
        return [error.rule for error in self._errors.get(field, [])]

    def clear(self) -> None:
        self._errors.clear()

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {
            field: [error.to_dict() for error in errors]
            for field, errors in self._errors.items()
        }

    def __len__(self) -> int:
        return sum(len(errors) for errors in self._errors.values())

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __repr__(self) -> str:
        return f"ValidationErrors({self.to_dict()!r})"
