"""Skip-and-continue outcomes.

Boundary functions (one candidate search, one field read, one relation search)
return either their value or a ``Skip``. Callers check with ``isinstance`` and
move on; skipping is an expected outcome, not an exception path.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Skip:
    reason: str
    detail: List[str] = field(default_factory=list)

    @classmethod
    def from_exception(cls, reason: str, exc: BaseException, *detail: str) -> "Skip":
        return cls(reason=reason, detail=[*detail, f"{type(exc).__name__}: {exc}"])

