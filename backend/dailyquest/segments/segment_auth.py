from flask import Blueprint, jsonify

from dailyquest.auth import end_session, start_session
from dailyquest.schemas import LoginRequest, RegisterRequest
from dailyquest.services import services
from dailyquest.utils.validation import parse_body

auth_bp = Blueprint("auth_bp", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register():
    data = parse_body(RegisterRequest)
    user = services().auth.register(data.username, str(data.email), data.password)
    return jsonify({"user": user.public_dict()}), 201


@auth_bp.post("/login")
def login():
    data = parse_body(LoginRequest)
    user, token = services().auth.login(data.username_email, data.password)
    start_session(token)
    return jsonify({"user": user.public_dict(), "token": token}), 200


@auth_bp.post("/logout")
def logout():
    services().auth.logout(end_session())
    return jsonify({"ok": True})
