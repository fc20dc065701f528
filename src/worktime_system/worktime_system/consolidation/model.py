from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class EmployeeOutcome:
    user_id: int
    username: str
    entries_processed: int = 0
    merge_operations: int = 0
    skipped_in_process: int = 0
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class ConsolidationResult:
    """Structured outcome of one consolidation run.

    ``success`` with a non-zero ``error_count`` means success with warnings:
    the failed employees were skipped, everybody else was consolidated.
    """

    success: bool
    message: str
    year: int
    month: int
    employees_processed: int = 0
    total_entries: int = 0
    total_merge_operations: int = 0
    error_count: int = 0
    written: bool = False
    warnings: list[str] = field(default_factory=list)
    per_employee: list[EmployeeOutcome] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return self.success and self.error_count > 0

    @classmethod
    def failure(cls, year: int, month: int, message: str) -> "ConsolidationResult":
        return cls(success=False, message=message, year=year, month=month, error_count=1)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["has_warnings"] = self.has_warnings
        return data
