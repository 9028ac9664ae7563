"""
Tests for the shop engine.
"""

import pytest

from dailyquest.errors import InsufficientPoints, NotFound, ValidationError
from dailyquest.services.shop import ITEMS


@pytest.fixture
def sword(svc):
    return svc.store.insert(ITEMS, {
        "name": "Sword", "description": "Sharp", "price": 40, "image": "/img/sword.png",
    })


class TestGetItem:
    def test_found(self, svc, sword):
        item = svc.shop.get_item(sword)
        assert item.name == "Sword"
        assert item.price == 40

    def test_missing(self, svc):
        with pytest.raises(NotFound):
            svc.shop.get_item("nope")

    @pytest.mark.parametrize("doc", [
        {"name": "Free", "price": 0, "image": "/img/x.png"},
        {"name": "   ", "price": 5, "image": "/img/x.png"},
        {"name": "No image", "price": 5, "image": ""},
    ])
    def test_invalid_stored_item(self, svc, doc):
        item_id = svc.store.insert(ITEMS, doc)
        with pytest.raises(ValidationError):
            svc.shop.get_item(item_id)

    def test_list_skips_invalid(self, svc, sword):
        svc.store.insert(ITEMS, {"name": "Broken", "price": -1, "image": "/img/x.png"})
        assert [i.id for i in svc.shop.list_items()] == [sword]


class TestBuy:
    def test_buy_deducts_and_adds(self, svc, make_user, sword):
        user = make_user(points=50)
        item = svc.shop.buy_item(user, sword)
        assert item.id == sword

        stored = svc.users.get(user.id)
        assert stored.points == 10
        assert stored.inventory == [sword]
        assert [i.id for i in svc.shop.inventory_items(stored)] == [sword]

    def test_cannot_afford_changes_nothing(self, svc, make_user, sword):
        user = make_user(points=39, inventory=["old"])
        with pytest.raises(InsufficientPoints):
            svc.shop.buy_item(user, sword)

        stored = svc.users.get(user.id)
        assert stored.points == 39
        assert stored.inventory == ["old"]
        assert stored.version == user.version

    def test_inventory_skips_missing_items(self, svc, make_user, sword):
        user = make_user(inventory=["gone", sword])
        assert [i.id for i in svc.shop.inventory_items(user)] == [sword]
