from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .calendar.triple_days import StaticTripleDayCalendar, TripleDayCalendar
from .database.connection import DBConfig, DatabaseConnection
from .notifications.service import NotificationService
from .overtime.mysql_overtime_repository import MySQLOvertimeRepository
from .overtime.repository import OvertimeRepository
from .overtime.service import OvertimeService
from .stats.service import OvertimeStatsService


@dataclass(frozen=True)
class Container:
    overtime_repo: OvertimeRepository
    calendar: TripleDayCalendar

    overtime_service: OvertimeService
    notification_service: NotificationService
    stats_service: OvertimeStatsService


def build_services(
    overtime_repo: OvertimeRepository,
    *,
    calendar: Optional[TripleDayCalendar] = None,
) -> Container:
    calendar = calendar or StaticTripleDayCalendar()
    return Container(
        overtime_repo=overtime_repo,
        calendar=calendar,
        overtime_service=OvertimeService(overtime_repo, calendar),
        notification_service=NotificationService(overtime_repo),
        stats_service=OvertimeStatsService(overtime_repo),
    )


def build_container(*, db_config: dict, triple_days: str | Iterable[str] | None = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    return build_services(
        MySQLOvertimeRepository(conn),
        calendar=StaticTripleDayCalendar.from_setting(triple_days),
    )
