# errors.py
from __future__ import annotations

from typing import List, Optional


class TeardownError(Exception):
    """A deletion failed with something other than not-found; the run stops here."""

    def __init__(self, kind: str, name: str, cause: Optional[BaseException] = None):
        self.kind = kind
        self.name = name
        self.cause = cause
        super().__init__(f"failed to delete {kind} [{name}]: {cause}")


class AggregateError(Exception):
    """Per-object failures collected over a full pass, in the order they happened."""

    def __init__(self, errors: List[BaseException]):
        self.errors = list(errors)
        super().__init__("; ".join(str(e) for e in self.errors))

    def __len__(self) -> int:
        return len(self.errors)
