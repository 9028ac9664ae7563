from __future__ import annotations

from pydantic import ValidationError as SchemaError

from dailyquest.errors import Conflict, Internal, NotFound
from dailyquest.schemas import User
from dailyquest.utils.documents import DocumentStore, StaleDocumentError

USERS = "users"


class UserStore:
    """CRUD over user documents. Every write goes through one atomic update."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _parse(self, doc: dict | None) -> User | None:
        if doc is None:
            return None
        try:
            return User.model_validate(doc)
        except SchemaError as e:
            raise Internal(f"User data is not valid: {doc.get('id')}") from e

    def get(self, user_id: str) -> User | None:
        return self._parse(self.store.find_by_id(USERS, user_id))

    def require(self, user_id: str) -> User:
        user = self.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def find_by_email(self, email: str) -> User | None:
        return self._parse(self.store.find_one(USERS, {"email": email.strip().lower()}))

    def find_by_username(self, username: str) -> User | None:
        return self._parse(self.store.find_one(USERS, {"username": username}))

    def create(self, *, username: str, email: str, password_hash: str) -> User:
        doc = {
            "username": username,
            "email": email.strip().lower(),
            "passwordHash": password_hash,
            "points": 0,
            "enemy": None,
            "enemyHealthModifier": 0,
            "inventory": [],
            "challengeStatuses": [],
            "lastStreakDate": None,
        }
        user_id = self.store.insert(USERS, doc)
        return self.require(user_id)

    def update(self, user: User, patch: dict) -> User:
        """Apply ``patch`` only if nobody else wrote the user since it was read."""
        try:
            doc = self.store.update_atomic(USERS, user.id, patch, expected_version=user.version)
        except StaleDocumentError:
            raise Conflict("Your data changed concurrently, please retry")
        if doc is None:
            raise NotFound("User not found")
        return self._parse(doc)

    def delete(self, user_id: str) -> bool:
        return self.store.delete(USERS, user_id)
