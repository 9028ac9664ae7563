from flask import Blueprint, jsonify
from flask_login import login_required

from dailyquest.auth import current_user_doc
from dailyquest.schemas import DamageRequest
from dailyquest.services import services
from dailyquest.utils.validation import parse_body

enemy_bp = Blueprint("enemy_bp", __name__, url_prefix="/api/enemy")


@enemy_bp.get("/info")
@login_required
def info():
    info = services().combat.get_enemy(current_user_doc())
    return jsonify(info.to_doc())


@enemy_bp.post("/damage")
@login_required
def damage():
    data = parse_body(DamageRequest)
    info = services().combat.damage_enemy(current_user_doc(), data.damage)
    return jsonify(info.to_doc())
