from datetime import datetime, timezone

from dailyquest.services.streaks import StreakService


def test_continue_then_info(svc, make_user):
    fixed = datetime(2026, 5, 4, 12, 30, tzinfo=timezone.utc)
    streaks = StreakService(svc.users, now=lambda: fixed)
    user = make_user()

    assert streaks.streak_info(user) == {"lastStreakDate": None}
    assert streaks.continue_streak(user) == {"lastStreakDate": fixed.isoformat()}
    assert streaks.streak_info(svc.users.get(user.id)) == {"lastStreakDate": fixed.isoformat()}
