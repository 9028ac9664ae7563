from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from dailyquest.auth import current_user_doc, end_session
from dailyquest.schemas import DeleteAccountRequest, SetPasswordRequest, SetUsernameRequest
from dailyquest.services import services
from dailyquest.utils.validation import parse_body

account_bp = Blueprint("account_bp", __name__, url_prefix="/api/account")


@account_bp.post("/setPassword")
@login_required
def set_password():
    data = parse_body(SetPasswordRequest)
    services().auth.change_password(
        current_user.id, data.password, data.password_new, data.password_new_validate
    )
    return jsonify({"ok": True})


@account_bp.post("/setUsername")
@login_required
def set_username():
    data = parse_body(SetUsernameRequest)
    user = services().auth.set_username(current_user.id, data.username)
    return jsonify({"ok": True, "user": user.public_dict()})


@account_bp.post("/deleteAccount")
@login_required
def delete_account():
    data = parse_body(DeleteAccountRequest)
    services().auth.delete_account(current_user.id, data.password)
    end_session()
    return jsonify({"ok": True})


@account_bp.get("/profile")
@login_required
def profile():
    user = current_user_doc()
    items = services().shop.inventory_items(user)
    return jsonify({
        "user": user.public_dict(),
        "inventory": [i.to_doc() for i in items],
    })
