from flask import Blueprint, jsonify
from flask_login import login_required

from dailyquest.auth import current_user_doc
from dailyquest.schemas import CompleteChallengeRequest
from dailyquest.services import services
from dailyquest.utils.validation import parse_body

challenges_bp = Blueprint("challenges_bp", __name__, url_prefix="/api/challenge")


@challenges_bp.get("/getAll")
@login_required
def get_all():
    user = current_user_doc()
    svc = services()
    catalog = svc.catalog.get_active_challenges()
    infos = svc.reconciler.reconcile(user, catalog)
    return jsonify([i.to_doc() for i in infos])


@challenges_bp.post("/complete")
@login_required
def complete():
    data = parse_body(CompleteChallengeRequest)
    user = current_user_doc()
    svc = services()
    catalog = svc.catalog.get_active_challenges()
    points = svc.reconciler.complete_challenge(user, data.challenge_id, catalog)
    return jsonify({"points": points})
