from flask import Blueprint, jsonify
from flask_login import login_required

from dailyquest.auth import current_user_doc
from dailyquest.schemas import BuyItemRequest
from dailyquest.services import services
from dailyquest.utils.validation import parse_body

shop_bp = Blueprint("shop_bp", __name__, url_prefix="/api/shop")


@shop_bp.get("/items")
def items():
    return jsonify([i.to_doc() for i in services().shop.list_items()])


@shop_bp.post("/buy")
@login_required
def buy():
    data = parse_body(BuyItemRequest)
    item = services().shop.buy_item(current_user_doc(), data.item_id)
    return jsonify(item.to_doc())
