"""Dashboard service - statistics derived from the appointment book"""

import logging
from datetime import date, timedelta
from typing import Callable, Optional

from ...models import AppointmentStatus
from ..appointments.repository import AppointmentRepository
from ..users.repository import UserRepository
from .schemas import DashboardStats, DayCount, RoleCount, ServiceCount

logger = logging.getLogger(__name__)

# Today plus the six previous days
TRAILING_DAYS = 7


class DashboardService:
    """Recomputes every figure on each call; nothing is cached."""

    def __init__(
        self,
        appointments: AppointmentRepository,
        users: Optional[UserRepository] = None,
        today: Callable[[], date] = date.today,
    ):
        self.appointments = appointments
        self.users = users
        self.today = today

    def compute_dashboard_stats(self) -> DashboardStats:
        today = self.today()
        window_start = today - timedelta(days=TRAILING_DAYS - 1)

        # total is derived from the buckets so they always add up under concurrent writes
        by_status = self.appointments.count_by_status()
        by_service = self.appointments.count_by_service()
        by_day = self.appointments.count_by_date(window_start, today)
        users_by_role = self.users.count_by_role() if self.users is not None else {}

        stats = DashboardStats(
            total=sum(by_status.values()),
            pending=by_status.get(AppointmentStatus.PENDING.value, 0),
            confirmed=by_status.get(AppointmentStatus.CONFIRMED.value, 0),
            completed=by_status.get(AppointmentStatus.COMPLETED.value, 0),
            cancelled=by_status.get(AppointmentStatus.CANCELLED.value, 0),
            byService=[ServiceCount(service_type=s, count=c) for s, c in by_service],
            byDay=[DayCount(date=d, count=c) for d, c in by_day],
            today=self.appointments.count_on_date(today),
            uniqueUsers=self.appointments.count_distinct_owners(),
            usersByRole=[RoleCount(role=r, count=c) for r, c in sorted(users_by_role.items())],
        )
        logger.debug(f"📊 Dashboard stats computed: total={stats.total}, today={stats.today}")
        return stats
