"""Result type returned by mutating services."""

from dataclasses import dataclass
from typing import Any

from greenquest.errors import GreenQuestError


@dataclass
class Result:
    """Either ``ok`` with a value, or not ``ok`` with a domain error."""

    ok: bool
    value: Any = None
    error: GreenQuestError | None = None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: GreenQuestError) -> "Result":
        return cls(ok=False, error=error)

    def unwrap(self) -> Any:
        """Return the value, or raise the carried error."""
        if not self.ok:
            raise self.error
        return self.value
