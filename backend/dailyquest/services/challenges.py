"""Daily challenge catalog.

The catalog is shared by every user. Each challenge lives until ``endTime``
(midnight at UTC-8). Reading the catalog drops expired or malformed entries
and tops it back up to ``N_CHALLENGES`` through the configured generator.
"""
from __future__ import annotations

import json
import random
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Protocol

from flask import current_app
from pydantic import ValidationError as SchemaError

from dailyquest.schemas import MAX_REWARD, MIN_REWARD, Challenge, ChallengeDraft
from dailyquest.utils.ai_client import GenerationError
from dailyquest.utils.documents import DocumentStore, StoreError

CHALLENGES = "challenges"
N_CHALLENGES = 3
RESET_TZ = timezone(timedelta(hours=-8))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_reset(now: datetime) -> datetime:
    """Start of the next calendar day at UTC-8."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(RESET_TZ)
    return datetime.combine(local.date() + timedelta(days=1), time(0, 0), tzinfo=RESET_TZ)


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str: ...


class ChallengeGenerator(Protocol):
    def generate(self, count: int) -> list[ChallengeDraft]: ...


# Built-in pool for the random generator.
CHALLENGE_POOL = [
    ("Morning Walk", "Take a 20 minute walk before noon."),
    ("Hydration Hero", "Drink eight glasses of water today."),
    ("Bookworm", "Read at least 15 pages of a book."),
    ("Tidy Up", "Clean and organise one room or your desk."),
    ("Stretch It Out", "Do a 10 minute stretching routine."),
    ("Screen Break", "Spend one hour without your phone."),
    ("Kind Word", "Send a thank-you message to someone."),
    ("Green Plate", "Eat a meal with at least two vegetables."),
    ("Early Night", "Go to bed before 11pm."),
    ("Learn Something", "Watch or read a short lesson on a new topic."),
    ("Push-up Set", "Do 3 sets of push-ups."),
    ("Fresh Air", "Spend 30 minutes outside."),
]


class RandomChallengeGenerator:
    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def generate(self, count: int) -> list[ChallengeDraft]:
        if count <= 0:
            return []
        picks = self.rng.sample(CHALLENGE_POOL, k=min(count, len(CHALLENGE_POOL)))
        while len(picks) < count:
            picks.append(self.rng.choice(CHALLENGE_POOL))
        return [
            ChallengeDraft(
                name=name,
                description=description,
                point_reward=self.rng.randint(MIN_REWARD, MAX_REWARD),
            )
            for name, description in picks
        ]


AI_PROMPT = (
    "Create {count} short daily self-improvement challenges for a habit tracking game. "
    "Reply with only a JSON array. Each element must be an object with exactly these keys: "
    '"name" (string, at most 80 characters), "description" (string, at most 300 characters) '
    'and "pointReward" (integer between {low} and {high}, harder challenges are worth more).'
)


def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


class AIChallengeGenerator:
    """Asks a text model for challenges and keeps only the ones that validate."""

    def __init__(self, client: TextGenerator):
        self.client = client

    def generate(self, count: int) -> list[ChallengeDraft]:
        if count <= 0:
            return []
        prompt = AI_PROMPT.format(count=count, low=MIN_REWARD, high=MAX_REWARD)
        try:
            text = self.client.generate(prompt)
        except GenerationError as e:
            current_app.logger.warning("AI challenge generation failed: %s", e)
            return []

        try:
            raw = json.loads(_strip_fences(text))
        except ValueError:
            current_app.logger.warning("AI challenge output was not JSON; discarded")
            return []
        if not isinstance(raw, list):
            current_app.logger.warning("AI challenge output was not a JSON array; discarded")
            return []

        drafts = []
        for entry in raw:
            try:
                drafts.append(ChallengeDraft.model_validate(entry))
            except SchemaError:
                current_app.logger.warning("Dropped invalid AI challenge: %r", entry)
        return drafts[:count]


class ChallengeCatalog:
    def __init__(
        self,
        store: DocumentStore,
        generator: ChallengeGenerator,
        *,
        now: Callable[[], datetime] = _utcnow,
        size: int = N_CHALLENGES,
    ):
        self.store = store
        self.generator = generator
        self.now = now
        self.size = size

    def _delete(self, doc_id: str, reason: str) -> bool:
        try:
            self.store.delete(CHALLENGES, doc_id)
            return True
        except StoreError as e:
            current_app.logger.warning("Failed to delete %s challenge %s: %s", reason, doc_id, e)
            return False

    def _sweep(self) -> tuple[list[Challenge], int]:
        """Return (active challenges, number of entries removed)."""
        now = self.now()
        active = []
        removed = 0
        for doc in self.store.find_all(CHALLENGES):
            try:
                challenge = Challenge.model_validate(doc)
            except SchemaError:
                removed += self._delete(doc.get("id"), "invalid")
                continue
            if challenge.end_time <= now:
                removed += self._delete(challenge.id, "expired")
                continue
            active.append(challenge)
        return active, removed

    def get_active_challenges(self) -> list[Challenge]:
        active, _ = self._sweep()
        if len(active) > self.size:
            # Concurrent top-ups can overfill; keep the oldest entries.
            for extra in active[self.size:]:
                self._delete(extra.id, "surplus")
            return active[: self.size]
        missing = self.size - len(active)
        if missing == 0:
            return active
        return active + self._create(missing)

    def _create(self, count: int) -> list[Challenge]:
        drafts = self.generator.generate(count)[:count]
        if not drafts:
            current_app.logger.warning("Challenge generator returned nothing; catalog holds fewer than %d", self.size)
            return []

        end_time = next_reset(self.now())
        docs = [dict(d.to_doc(), endTime=end_time.isoformat()) for d in drafts]
        ids = self.store.insert_many(CHALLENGES, docs)
        current_app.logger.info("Created %d new challenge(s) ending %s", len(ids), end_time.isoformat())
        return [
            Challenge(id=doc_id, name=d.name, description=d.description,
                      point_reward=d.point_reward, end_time=end_time)
            for doc_id, d in zip(ids, drafts)
        ]

    def purge_expired(self) -> int:
        _, removed = self._sweep()
        return removed
