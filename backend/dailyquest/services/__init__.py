from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from dailyquest.config import Config
from dailyquest.services.auth import AuthCore
from dailyquest.services.challenges import (
    AIChallengeGenerator,
    ChallengeCatalog,
    ChallengeGenerator,
    RandomChallengeGenerator,
)
from dailyquest.services.combat import CombatEngine
from dailyquest.services.reconciler import ChallengeStatusReconciler
from dailyquest.services.shop import ShopEngine
from dailyquest.services.streaks import StreakService
from dailyquest.services.users import UserStore
from dailyquest.utils.ai_client import GeminiClient
from dailyquest.utils.documents import DocumentStore, SqlDocumentStore
from dailyquest.utils.weather_client import WeatherClient


@dataclass
class Services:
    store: DocumentStore
    users: UserStore
    auth: AuthCore
    catalog: ChallengeCatalog
    reconciler: ChallengeStatusReconciler
    combat: CombatEngine
    shop: ShopEngine
    streaks: StreakService
    weather: WeatherClient


def build_generator(config: Config) -> ChallengeGenerator:
    if config.ai_challenges_enabled:
        client = GeminiClient(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            timeout=config.ai_timeout_seconds,
        )
        return AIChallengeGenerator(client)
    return RandomChallengeGenerator()


def build_services(
    config: Config,
    *,
    store: DocumentStore | None = None,
    generator: ChallengeGenerator | None = None,
    weather: WeatherClient | None = None,
) -> Services:
    store = store or SqlDocumentStore()
    users = UserStore(store)
    return Services(
        store=store,
        users=users,
        auth=AuthCore(users, store, session_ttl_seconds=config.session_ttl_seconds),
        catalog=ChallengeCatalog(store, generator or build_generator(config)),
        reconciler=ChallengeStatusReconciler(users),
        combat=CombatEngine(users, store),
        shop=ShopEngine(users, store),
        streaks=StreakService(users),
        weather=weather or WeatherClient(
            api_key=config.open_weather_map_api_key,
            enabled=config.weather_api_enabled,
            timeout=config.weather_timeout_seconds,
        ),
    )


def services() -> Services:
    return current_app.extensions["dailyquest"]
