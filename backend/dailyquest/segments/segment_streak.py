from flask import Blueprint, jsonify
from flask_login import login_required

from dailyquest.auth import current_user_doc
from dailyquest.services import services

streak_bp = Blueprint("streak_bp", __name__, url_prefix="/api/streak")


@streak_bp.post("/continue")
@login_required
def continue_streak():
    return jsonify(services().streaks.continue_streak(current_user_doc()))


@streak_bp.get("/info")
@login_required
def info():
    return jsonify(services().streaks.streak_info(current_user_doc()))
