"""Tests for domain/dashboard/service.py"""

import unittest
from datetime import date, timedelta

from salon_booking.domain.dashboard.service import DashboardService

from tests.fakes import InMemoryAppointmentRepository, InMemoryUserRepository

TODAY = date(2025, 6, 10)


class WriteDuringStatsRepository(InMemoryAppointmentRepository):
    """Books one more appointment right after the status counts are read."""

    def __init__(self, users, late_owner_id):
        super().__init__(users)
        self.late_owner_id = late_owner_id

    def count_by_status(self):
        counts = super().count_by_status()
        self.add(self.late_owner_id, TODAY, "18:00", "Manicura")
        return counts


class TestDashboardStats(unittest.TestCase):
    def setUp(self):
        self.users = InMemoryUserRepository()
        self.alice = self.users.create("Alice", "alice@example.com", "hash", "user")
        self.bob = self.users.create("Bob", "bob@example.com", "hash", "user")
        self.users.create("Ana", "ana@example.com", "hash", "attendant")
        self.users.create("Root", "root@example.com", "hash", "admin")
        self.repo = InMemoryAppointmentRepository(self.users)
        self.service = DashboardService(self.repo, self.users, today=lambda: TODAY)

    def add(self, owner, day, time, service_type="Manicura", status="pendiente"):
        appointment = self.repo.add(owner.id, day, time, service_type)
        if status != "pendiente":
            self.repo.update(appointment, status=status)
        return appointment

    def test_status_buckets(self):
        self.add(self.alice, TODAY, "09:00", status="pendiente")
        self.add(self.alice, TODAY, "10:00", status="pendiente")
        self.add(self.bob, TODAY, "11:00", status="confirmada")
        self.add(self.bob, TODAY, "12:00", status="cancelada")

        stats = self.service.compute_dashboard_stats()

        self.assertEqual(stats.total, 4)
        self.assertEqual(stats.pending, 2)
        self.assertEqual(stats.confirmed, 1)
        self.assertEqual(stats.completed, 0)
        self.assertEqual(stats.cancelled, 1)
        self.assertEqual(
            stats.pending + stats.confirmed + stats.completed + stats.cancelled, stats.total
        )

    def test_total_matches_buckets_when_a_write_lands_mid_report(self):
        repo = WriteDuringStatsRepository(self.users, self.bob.id)
        repo.add(self.alice.id, TODAY, "09:00", "Manicura")
        repo.add(self.alice.id, TODAY, "10:00", "Pedicura")

        stats = DashboardService(repo, self.users, today=lambda: TODAY).compute_dashboard_stats()

        self.assertEqual(stats.total, 2)
        self.assertEqual(
            stats.pending + stats.confirmed + stats.completed + stats.cancelled, stats.total
        )

    def test_by_service_sums_to_total(self):
        self.add(self.alice, TODAY, "09:00", service_type="Manicura")
        self.add(self.alice, TODAY, "10:00", service_type="Pedicura")
        self.add(self.bob, TODAY, "11:00", service_type="Manicura")

        stats = self.service.compute_dashboard_stats()

        by_service = {row.service_type: row.count for row in stats.byService}
        self.assertEqual(by_service, {"Manicura": 2, "Pedicura": 1})
        self.assertEqual(sum(by_service.values()), stats.total)

    def test_trailing_week_and_today(self):
        self.add(self.alice, TODAY, "09:00")
        self.add(self.bob, TODAY, "10:00")
        self.add(self.alice, TODAY - timedelta(days=6), "09:00")
        # Outside the window on both sides
        self.add(self.alice, TODAY - timedelta(days=7), "09:00")
        self.add(self.alice, TODAY + timedelta(days=1), "09:00")

        stats = self.service.compute_dashboard_stats()

        self.assertEqual(
            [(row.date, row.count) for row in stats.byDay],
            [(TODAY - timedelta(days=6), 1), (TODAY, 2)],
        )
        self.assertEqual(stats.today, 2)
        self.assertEqual(stats.total, 5)

    def test_unique_users_and_roles(self):
        self.add(self.alice, TODAY, "09:00")
        self.add(self.alice, TODAY, "10:00")
        self.add(self.bob, TODAY, "11:00")

        stats = self.service.compute_dashboard_stats()

        self.assertEqual(stats.uniqueUsers, 2)
        self.assertEqual(
            {row.role: row.count for row in stats.usersByRole},
            {"user": 2, "attendant": 1, "admin": 1},
        )

    def test_empty_book(self):
        stats = self.service.compute_dashboard_stats()

        self.assertEqual(stats.total, 0)
        self.assertEqual(stats.byService, [])
        self.assertEqual(stats.byDay, [])
        self.assertEqual(stats.today, 0)
        self.assertEqual(stats.uniqueUsers, 0)


if __name__ == "__main__":
    unittest.main()
