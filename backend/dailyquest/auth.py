from __future__ import annotations

from flask import request, session
from flask_login import UserMixin, current_user

from dailyquest.errors import Unauthenticated
from dailyquest.extensions import login_manager
from dailyquest.schemas import User
from dailyquest.services import services

SESSION_KEY = "token"


class SessionUser(UserMixin):
    """What flask_login keeps as ``current_user``: the user id plus the session token."""

    def __init__(self, user_id: str, token: str):
        self.id = user_id
        self.token = token


def get_bearer_token(header: str) -> str | None:
    if not header or not header.startswith("Bearer "):
        return None
    return header.replace("Bearer ", "", 1).strip() or None


def request_token(req) -> str | None:
    return get_bearer_token(req.headers.get("Authorization", "")) or session.get(SESSION_KEY)


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve the session token from the Bearer header or the signed cookie."""
    token = request_token(req)
    if not token:
        return None
    user_id = services().auth.resolve_session(token)
    if user_id is None:
        session.pop(SESSION_KEY, None)
        return None
    return SessionUser(user_id, token)


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthenticated()


def current_user_doc() -> User:
    """Load the logged-in user's document, or fail as unauthenticated."""
    if not current_user.is_authenticated:
        raise Unauthenticated()
    user = services().users.get(current_user.id)
    if user is None:
        raise Unauthenticated()
    return user


def start_session(token: str) -> None:
    session[SESSION_KEY] = token


def end_session() -> str | None:
    token = request_token(request)
    session.pop(SESSION_KEY, None)
    return token
