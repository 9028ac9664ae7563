from __future__ import annotations

from flask import current_app
from pydantic import ValidationError as SchemaError

from dailyquest.errors import InsufficientPoints, NotFound, ValidationError
from dailyquest.schemas import Item, User
from dailyquest.services.users import UserStore
from dailyquest.utils.documents import DocumentStore

ITEMS = "items"


class ShopEngine:
    def __init__(self, users: UserStore, store: DocumentStore):
        self.users = users
        self.store = store

    def get_item(self, item_id: str) -> Item:
        doc = self.store.find_by_id(ITEMS, item_id)
        if doc is None:
            raise NotFound("Item not found")
        try:
            return Item.model_validate(doc)
        except SchemaError as e:
            raise ValidationError("Item data is not valid") from e

    def list_items(self) -> list[Item]:
        items = []
        for doc in self.store.find_all(ITEMS):
            try:
                items.append(Item.model_validate(doc))
            except SchemaError:
                current_app.logger.warning("Skipping invalid shop item %s", doc.get("id"))
        return items

    def buy_item(self, user: User, item_id: str) -> Item:
        """Deduct the price and add the item to the inventory, both or neither."""
        item = self.get_item(item_id)
        if user.points < item.price:
            raise InsufficientPoints()
        self.users.update(user, {
            "$inc": {"points": -item.price},
            "$push": {"inventory": item.id},
        })
        return item

    def inventory_items(self, user: User) -> list[Item]:
        out = []
        for item_id in user.inventory:
            doc = self.store.find_by_id(ITEMS, item_id)
            if doc is None:
                continue
            try:
                out.append(Item.model_validate(doc))
            except SchemaError:
                current_app.logger.warning("Skipping invalid inventory item %s", item_id)
        return out
