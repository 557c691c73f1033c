"""Dashboard domain schemas"""

import datetime

from pydantic import BaseModel


class ServiceCount(BaseModel):
    service_type: str
    count: int


class DayCount(BaseModel):
    date: datetime.date
    count: int


class RoleCount(BaseModel):
    role: str
    count: int


class DashboardStats(BaseModel):
    total: int
    pending: int
    confirmed: int
    completed: int
    cancelled: int
    byService: list[ServiceCount]
    byDay: list[DayCount]
    today: int
    uniqueUsers: int
    usersByRole: list[RoleCount] = []
