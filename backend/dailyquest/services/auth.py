from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable

from pydantic import ValidationError as SchemaError
from werkzeug.security import check_password_hash, generate_password_hash

from dailyquest.errors import BadRequest, Conflict, Unauthorized, ValidationError
from dailyquest.schemas import RegisterRequest, Session, SetUsernameRequest, User
from dailyquest.services.users import UserStore
from dailyquest.utils.documents import DocumentStore

SESSIONS = "sessions"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthCore:
    """Credentials and server-side sessions.

    A session is a document in ``sessions`` whose id is the opaque token handed
    to the client. Resolving a token never touches the user document.
    """

    def __init__(
        self,
        users: UserStore,
        store: DocumentStore,
        *,
        session_ttl_seconds: int,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.users = users
        self.store = store
        self.session_ttl = timedelta(seconds=session_ttl_seconds)
        self.now = now

    # -----------------------------
    # Accounts
    # -----------------------------
    def register(self, username: str, email: str, password: str) -> User:
        try:
            data = RegisterRequest(username=username, email=email, password=password)
        except SchemaError as e:
            raise ValidationError() from e

        email = str(data.email).strip().lower()
        if self.users.find_by_email(email) is not None:
            raise Conflict("Email is already in use")
        if self.users.find_by_username(data.username) is not None:
            raise Conflict("Username is already taken")

        return self.users.create(
            username=data.username,
            email=email,
            password_hash=generate_password_hash(data.password),
        )

    def _resolve_identity(self, username_or_email: str) -> User | None:
        value = (username_or_email or "").strip()
        if "@" in value:
            user = self.users.find_by_email(value)
            if user is not None:
                return user
        return self.users.find_by_username(value)

    def login(self, username_or_email: str, password: str) -> tuple[User, str]:
        user = self._resolve_identity(username_or_email)
        if user is None or not check_password_hash(user.password_hash, password or ""):
            raise Unauthorized()

        token = secrets.token_urlsafe(32)
        self.store.insert(SESSIONS, {
            "id": token,
            "userId": user.id,
            "expiresAt": self.now() + self.session_ttl,
        })
        return user, token

    def change_password(self, user_id: str, old_password: str, new_password: str, confirm: str) -> None:
        if new_password != confirm:
            raise BadRequest("New passwords do not match")
        user = self.users.require(user_id)
        if not check_password_hash(user.password_hash, old_password or ""):
            raise Unauthorized("Incorrect password")
        self.users.update(user, {"$set": {"passwordHash": generate_password_hash(new_password)}})

    def delete_account(self, user_id: str, password: str) -> None:
        user = self.users.require(user_id)
        if not check_password_hash(user.password_hash, password or ""):
            raise Unauthorized("Incorrect password")
        self.users.delete(user.id)
        for session in self.store.find_all(SESSIONS, {"userId": user.id}):
            self.store.delete(SESSIONS, session["id"])

    def set_username(self, user_id: str, username: str) -> User:
        try:
            data = SetUsernameRequest(username=username)
        except SchemaError as e:
            raise ValidationError() from e

        user = self.users.require(user_id)
        if data.username == user.username:
            return user
        taken = self.users.find_by_username(data.username)
        if taken is not None and taken.id != user.id:
            raise Conflict("Username is already taken")
        return self.users.update(user, {"$set": {"username": data.username}})

    # -----------------------------
    # Sessions
    # -----------------------------
    def resolve_session(self, token: str | None) -> str | None:
        if not token:
            return None
        doc = self.store.find_by_id(SESSIONS, token)
        if doc is None:
            return None
        try:
            session = Session.model_validate(doc)
        except SchemaError:
            self.store.delete(SESSIONS, token)
            return None
        expires_at = session.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at <= self.now():
            self.store.delete(SESSIONS, token)
            return None
        return session.user_id

    def logout(self, token: str | None) -> None:
        if token:
            self.store.delete(SESSIONS, token)

    def purge_expired_sessions(self) -> int:
        """Delete every session past its expiry. Returns how many were removed."""
        now = self.now()
        removed = 0
        for doc in self.store.find_all(SESSIONS):
            try:
                expires_at = Session.model_validate(doc).expires_at
            except SchemaError:
                expires_at = None
            if expires_at is not None and expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            if expires_at is None or expires_at <= now:
                removed += self.store.delete(SESSIONS, doc["id"])
        return removed
