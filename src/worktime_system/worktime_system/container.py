from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .consolidation.service import ConsolidationService
from .core.constants import DEFAULT_CONSOLIDATION_MAX_WORKERS, DEFAULT_EMPLOYEE_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .merge.factory import MergeRuleFactory
from .merge.service import WorktimeMergeService
from .worktime.calculator.base import WorkPolicy
from .worktime.calculator.standard_calculator import StandardWorktimeCalculator
from .worktime.mysql_entry_repository import MySQLEntryRepository
from .worktime.repository import EntryRepository
from .worktime.service import WorktimeEditService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection | None

    entries_repo: EntryRepository

    calculator: StandardWorktimeCalculator
    merge_service: WorktimeMergeService
    consolidation_service: ConsolidationService
    edit_service: WorktimeEditService


def build_services(repository: EntryRepository, *, settings: Any = None, conn: DatabaseConnection | None = None) -> Container:
    """Wire services around any EntryRepository (MySQL in the app, fakes in tests)."""
    calculator = StandardWorktimeCalculator(WorkPolicy.from_settings(settings))
    merge_service = WorktimeMergeService(rule_factory=MergeRuleFactory())
    consolidation_service = ConsolidationService(
        repository,
        calculator,
        merge_service,
        max_workers=int(getattr(settings, "CONSOLIDATION_MAX_WORKERS", DEFAULT_CONSOLIDATION_MAX_WORKERS)),
        employee_timeout=float(
            getattr(settings, "CONSOLIDATION_EMPLOYEE_TIMEOUT_SECONDS", DEFAULT_EMPLOYEE_TIMEOUT_SECONDS)
        ),
    )
    edit_service = WorktimeEditService(repository, calculator)

    return Container(
        conn=conn,
        entries_repo=repository,
        calculator=calculator,
        merge_service=merge_service,
        consolidation_service=consolidation_service,
        edit_service=edit_service,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(MySQLEntryRepository(conn), settings=settings, conn=conn)
