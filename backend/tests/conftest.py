"""
Pytest fixtures for DailyQuest tests.
"""

import pytest

from dailyquest import create_app
from dailyquest.config import Config
from dailyquest.extensions import db
from dailyquest.schemas import ChallengeDraft
from dailyquest.utils.weather_client import WeatherClient


class FixedGenerator:
    """Challenge generator that hands out drafts with the given rewards, in order."""

    def __init__(self, rewards=(24, 50, 75)):
        self.rewards = list(rewards)
        self.calls = []
        self._n = 0

    def generate(self, count):
        self.calls.append(count)
        out = []
        for _ in range(count):
            reward = self.rewards[self._n % len(self.rewards)]
            self._n += 1
            out.append(ChallengeDraft(
                name=f"Challenge {self._n}",
                description=f"Do thing number {self._n}.",
                point_reward=reward,
            ))
        return out


class EmptyGenerator:
    def generate(self, count):
        return []


@pytest.fixture
def generator():
    return FixedGenerator()


@pytest.fixture
def config():
    return Config(
        env="test",
        secret_key="test-secret-key-123",
        database_url="sqlite:///:memory:",
        flask_overrides={"TESTING": True},
    )


@pytest.fixture
def app(config, generator):
    app = create_app(
        config,
        generator=generator,
        weather=WeatherClient(api_key="", enabled=False),
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def svc(app):
    return app.extensions["dailyquest"]


@pytest.fixture
def make_user(svc):
    """Create a user and optionally set fields on its document."""
    counter = {"n": 0}

    def _make(password="password123", **fields):
        counter["n"] += 1
        n = counter["n"]
        user = svc.auth.register(f"player{n}", f"player{n}@example.com", password)
        if fields:
            user = svc.users.update(user, {"$set": fields})
        return user

    return _make


@pytest.fixture
def logged_in(client, svc):
    """Register + log in through the API; returns the user's id."""
    svc.auth.register("hero", "hero@example.com", "password123")
    r = client.post("/api/auth/login", json={"usernameEmail": "hero", "password": "password123"})
    assert r.status_code == 200
    return r.get_json()["user"]["id"]
