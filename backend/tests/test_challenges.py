"""
Tests for the challenge catalog and its generators.
"""

import json
import random
from datetime import datetime, timedelta, timezone

import pytest

from dailyquest.schemas import MAX_REWARD, MIN_REWARD
from dailyquest.services.challenges import (
    CHALLENGES,
    N_CHALLENGES,
    RESET_TZ,
    AIChallengeGenerator,
    ChallengeCatalog,
    RandomChallengeGenerator,
    next_reset,
)
from dailyquest.utils.ai_client import GenerationError

from .conftest import EmptyGenerator, FixedGenerator


class FakeText:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.text


def test_next_reset_is_next_midnight_at_utc_minus_8():
    # 07:59 UTC on Jan 2 is still Jan 1 at UTC-8
    now = datetime(2026, 1, 2, 7, 59, tzinfo=timezone.utc)
    end = next_reset(now)
    assert end == datetime(2026, 1, 2, 0, 0, tzinfo=RESET_TZ)
    assert end.astimezone(timezone.utc) == datetime(2026, 1, 2, 8, 0, tzinfo=timezone.utc)

    # 08:00 UTC is midnight there; the next reset is a full day away
    now = datetime(2026, 1, 2, 8, 0, tzinfo=timezone.utc)
    assert next_reset(now) == datetime(2026, 1, 3, 0, 0, tzinfo=RESET_TZ)


class TestCatalog:
    def test_fills_to_n_with_shared_end_time(self, svc):
        catalog = svc.catalog.get_active_challenges()
        assert len(catalog) == N_CHALLENGES
        now = datetime.now(timezone.utc)
        assert all(c.end_time > now for c in catalog)
        assert len({c.end_time for c in catalog}) == 1

    def test_reads_are_stable(self, svc, generator):
        first = svc.catalog.get_active_challenges()
        second = svc.catalog.get_active_challenges()
        assert [c.id for c in first] == [c.id for c in second]
        assert generator.calls == [N_CHALLENGES]

    def test_expired_and_invalid_entries_are_replaced(self, app, svc):
        clock = {"now": datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)}
        gen = FixedGenerator(rewards=[30])
        catalog = ChallengeCatalog(svc.store, gen, now=lambda: clock["now"])

        first = catalog.get_active_challenges()
        svc.store.insert(CHALLENGES, {"name": "broken", "pointReward": "lots"})

        clock["now"] += timedelta(days=1)
        second = catalog.get_active_challenges()

        assert len(second) == N_CHALLENGES
        assert not ({c.id for c in first} & {c.id for c in second})
        ids = [d["id"] for d in svc.store.find_all(CHALLENGES)]
        assert ids == [c.id for c in second]

    def test_only_shortfall_is_generated(self, svc):
        gen = FixedGenerator()
        catalog = ChallengeCatalog(svc.store, gen)
        catalog.get_active_challenges()
        victim = svc.store.find_all(CHALLENGES)[0]["id"]
        svc.store.delete(CHALLENGES, victim)

        out = catalog.get_active_challenges()
        assert len(out) == N_CHALLENGES
        assert gen.calls == [N_CHALLENGES, 1]
        assert victim not in [c.id for c in out]

    def test_surplus_is_trimmed_to_oldest(self, svc):
        end = next_reset(datetime.now(timezone.utc)).isoformat()
        ids = svc.store.insert_many(CHALLENGES, [
            {"name": f"C{i}", "description": "d", "pointReward": 10 + i, "endTime": end}
            for i in range(5)
        ])
        gen = FixedGenerator()
        catalog = ChallengeCatalog(svc.store, gen)

        out = catalog.get_active_challenges()
        assert [c.id for c in out] == ids[:N_CHALLENGES]
        assert [d["id"] for d in svc.store.find_all(CHALLENGES)] == ids[:N_CHALLENGES]
        assert gen.calls == []

    def test_generator_failure_leaves_catalog_short(self, svc):
        catalog = ChallengeCatalog(svc.store, EmptyGenerator())
        assert catalog.get_active_challenges() == []
        assert svc.store.find_all(CHALLENGES) == []

    def test_purge_expired_counts(self, svc):
        clock = {"now": datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)}
        catalog = ChallengeCatalog(svc.store, FixedGenerator(), now=lambda: clock["now"])
        catalog.get_active_challenges()
        assert catalog.purge_expired() == 0
        clock["now"] += timedelta(days=2)
        assert catalog.purge_expired() == N_CHALLENGES
        assert svc.store.find_all(CHALLENGES) == []


class TestRandomGenerator:
    def test_rewards_in_range(self):
        drafts = RandomChallengeGenerator(random.Random(7)).generate(20)
        assert len(drafts) == 20
        assert all(MIN_REWARD <= d.point_reward <= MAX_REWARD for d in drafts)
        assert all(d.name and d.description for d in drafts)

    def test_zero(self):
        assert RandomChallengeGenerator().generate(0) == []


class TestAIGenerator:
    def test_valid_output(self, app):
        text = json.dumps([
            {"name": "Walk", "description": "Walk 5k steps", "pointReward": 20},
            {"name": "Read", "description": "Read a chapter", "pointReward": 35},
        ])
        client = FakeText(text=text)
        drafts = AIChallengeGenerator(client).generate(2)
        assert [(d.name, d.point_reward) for d in drafts] == [("Walk", 20), ("Read", 35)]
        assert "2" in client.prompts[0]

    def test_code_fences_are_tolerated(self, app):
        text = '```json\n[{"name": "Walk", "description": "Walk", "pointReward": 20}]\n```'
        assert len(AIChallengeGenerator(FakeText(text=text)).generate(1)) == 1

    def test_invalid_entries_are_dropped(self, app):
        text = json.dumps([
            {"name": "Ok", "description": "Fine", "pointReward": 50},
            {"name": "Too rich", "description": "x", "pointReward": 500},
            {"name": "", "description": "blank name", "pointReward": 20},
            {"name": "Stringly", "description": "x", "pointReward": "20"},
            {"name": "Extra", "description": "x", "pointReward": 20, "secret": True},
            "not an object",
        ])
        drafts = AIChallengeGenerator(FakeText(text=text)).generate(3)
        assert [d.name for d in drafts] == ["Ok"]

    @pytest.mark.parametrize("text", ["not json", '{"name": "x"}', ""])
    def test_unusable_output_yields_nothing(self, app, text):
        assert AIChallengeGenerator(FakeText(text=text)).generate(3) == []

    def test_generation_error_yields_nothing(self, app):
        client = FakeText(error=GenerationError("boom"))
        assert AIChallengeGenerator(client).generate(3) == []

    def test_never_returns_more_than_asked(self, app):
        text = json.dumps([{"name": f"C{i}", "description": "d", "pointReward": 10} for i in range(5)])
        assert len(AIChallengeGenerator(FakeText(text=text)).generate(2)) == 2
