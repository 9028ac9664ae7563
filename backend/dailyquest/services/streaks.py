from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from dailyquest.schemas import User
from dailyquest.services.users import UserStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class StreakService:
    def __init__(self, users: UserStore, now: Callable[[], datetime] = _utcnow):
        self.users = users
        self.now = now

    def continue_streak(self, user: User) -> dict:
        user = self.users.update(user, {"$set": {"lastStreakDate": self.now()}})
        return {"lastStreakDate": _iso(user.last_streak_date)}

    def streak_info(self, user: User) -> dict:
        return {"lastStreakDate": _iso(user.last_streak_date)}
