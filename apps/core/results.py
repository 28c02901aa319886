"""Summary returned by every bulk operation."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import List


@dataclass
class BatchResult:
    total: int = 0
    success: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    def ok(self):
        self.total += 1
        self.success += 1

    def fail(self, message: str):
        self.total += 1
        self.failed += 1
        self.errors.append(message)

    def as_dict(self) -> dict:
        return asdict(self)
