from __future__ import annotations

from dailyquest.errors import Conflict, NotFound
from dailyquest.schemas import Challenge, ChallengeStatus, User, UserChallengeInfo
from dailyquest.services.users import UserStore


def _status_docs(statuses: list[ChallengeStatus]) -> list[dict]:
    return [s.to_doc() for s in statuses]


class ChallengeStatusReconciler:
    """Keeps each user's ``challengeStatuses`` in step with the shared catalog."""

    def __init__(self, users: UserStore):
        self.users = users

    def _reconciled(self, user: User, catalog: list[Challenge]) -> list[ChallengeStatus]:
        by_id = {s.challenge_id: s for s in user.challenge_statuses}
        return [
            ChallengeStatus(challenge_id=c.id, completed=by_id[c.id].completed if c.id in by_id else False)
            for c in catalog
        ]

    def sync(self, user: User, catalog: list[Challenge]) -> User:
        """Persist the reconciled status list if it differs from what is stored."""
        statuses = self._reconciled(user, catalog)
        if _status_docs(statuses) == _status_docs(user.challenge_statuses):
            return user
        return self.users.update(user, {"$set": {"challengeStatuses": _status_docs(statuses)}})

    def reconcile(self, user: User, catalog: list[Challenge]) -> list[UserChallengeInfo]:
        user = self.sync(user, catalog)
        completed = {s.challenge_id: s.completed for s in user.challenge_statuses}
        return [
            UserChallengeInfo(
                id=c.id,
                name=c.name,
                description=c.description,
                point_reward=c.point_reward,
                end_time=c.end_time,
                completed=completed.get(c.id, False),
            )
            for c in catalog
        ]

    def complete_challenge(self, user: User, challenge_id: str, catalog: list[Challenge]) -> int:
        """Mark ``challenge_id`` completed and credit its reward. Returns the new point total."""
        if not any(s.challenge_id == challenge_id for s in user.challenge_statuses):
            user = self.sync(user, catalog)

        challenge = next((c for c in catalog if c.id == challenge_id), None)
        index = next(
            (i for i, s in enumerate(user.challenge_statuses) if s.challenge_id == challenge_id),
            None,
        )
        if challenge is None or index is None:
            raise NotFound("Challenge not found")
        if user.challenge_statuses[index].completed:
            raise Conflict("Challenge already completed")

        statuses = _status_docs(user.challenge_statuses)
        statuses[index]["completed"] = True
        user = self.users.update(user, {
            "$set": {"challengeStatuses": statuses},
            "$inc": {"points": challenge.point_reward},
        })
        return user.points
