from __future__ import annotations

import random

from flask import current_app
from pydantic import ValidationError as SchemaError

from dailyquest.errors import BadRequest
from dailyquest.schemas import Enemy, EnemyInfo, EnemyTemplate, User
from dailyquest.services.users import UserStore
from dailyquest.utils.documents import DocumentStore

ENEMIES = "enemies"
BASE_HP = 100
MODIFIER_STEP = 10

DEFAULT_TEMPLATE = EnemyTemplate(name="Procrastination Slime", image="/images/enemies/slime.png")


class CombatEngine:
    """Per-user enemy that soaks up points and comes back tougher after each kill."""

    def __init__(self, users: UserStore, store: DocumentStore, rng: random.Random | None = None):
        self.users = users
        self.store = store
        self.rng = rng or random.Random()

    def _templates(self) -> list[EnemyTemplate]:
        out = []
        for doc in self.store.find_all(ENEMIES):
            try:
                out.append(EnemyTemplate.model_validate(doc))
            except SchemaError:
                current_app.logger.warning("Skipping invalid enemy template %s", doc.get("id"))
        return out

    def roll_enemy(self, modifier: int) -> Enemy:
        templates = self._templates() or [DEFAULT_TEMPLATE]
        t = self.rng.choice(templates)
        return Enemy(name=t.name, image=t.image, health=BASE_HP + modifier)

    @staticmethod
    def _info(user: User) -> EnemyInfo:
        enemy = user.enemy
        return EnemyInfo(
            name=enemy.name,
            image=enemy.image,
            health=enemy.health,
            max_health=BASE_HP + user.enemy_health_modifier,
            health_modifier=user.enemy_health_modifier,
            points=user.points,
        )

    def get_enemy(self, user: User) -> EnemyInfo:
        if user.enemy is None or user.enemy.health <= 0:
            enemy = self.roll_enemy(user.enemy_health_modifier)
            user = self.users.update(user, {"$set": {"enemy": enemy.to_doc()}})
        return self._info(user)

    def damage_enemy(self, user: User, damage: int | None = None) -> EnemyInfo:
        if damage is None:
            damage = user.points
        if damage <= 0:
            raise BadRequest("Damage must be a positive number")

        enemy = user.enemy
        if enemy is None or enemy.health <= 0:
            enemy = self.roll_enemy(user.enemy_health_modifier)

        dealt = min(damage, user.points, enemy.health)
        if dealt <= 0:
            raise BadRequest("You do not have any points to attack with")

        new_health = enemy.health - dealt
        new_points = user.points - dealt

        if new_health <= 0:
            modifier = user.enemy_health_modifier + MODIFIER_STEP
            respawned = self.roll_enemy(modifier)
            patch = {"$set": {
                "enemy": respawned.to_doc(),
                "enemyHealthModifier": modifier,
                "points": new_points,
            }}
        else:
            patch = {"$set": {
                "enemy": dict(enemy.to_doc(), health=new_health),
                "points": new_points,
            }}

        user = self.users.update(user, patch)
        return self._info(user)
