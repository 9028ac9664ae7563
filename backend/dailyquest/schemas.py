"""
Schemas for DailyQuest

Document models mirror what lives in each collection ("users", "challenges",
"items", "enemies", "sessions"). Request models validate JSON bodies at the
HTTP boundary so the services only ever see typed, already-checked input.

Field names on the wire are camelCase; Python attributes are snake_case.
"""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictInt, field_validator

USERNAME_PATTERN = r"^[A-Za-z0-9]+$"

MIN_REWARD = 10
MAX_REWARD = 99


class _Doc(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_doc(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class _NonBlank(_Doc):
    @field_validator("name", "image", check_fields=False)
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v


# ----------------------
# Stored documents
# ----------------------

class ChallengeStatus(_Doc):
    challenge_id: str = Field(..., alias="challengeId")
    completed: bool = False


class Enemy(_NonBlank):
    name: str
    image: str
    health: int = Field(..., ge=0)


class EnemyTemplate(_NonBlank):
    """
    Enemy looks, rolled when a user needs a new enemy
    Collection: "enemies"
    """
    name: str
    image: str


class User(_Doc):
    """
    Registered users
    Collection: "users"
    """
    id: str
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: str
    password_hash: str = Field(..., alias="passwordHash")
    points: int = Field(0, ge=0)
    enemy: Optional[Enemy] = None
    enemy_health_modifier: int = Field(0, ge=0, alias="enemyHealthModifier")
    inventory: list[str] = Field(default_factory=list)
    challenge_statuses: list[ChallengeStatus] = Field(default_factory=list, alias="challengeStatuses")
    last_streak_date: Optional[datetime] = Field(None, alias="lastStreakDate")
    version: int = 1

    def public_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "points": self.points,
            "lastStreakDate": self.last_streak_date.isoformat() if self.last_streak_date else None,
        }


class Challenge(_Doc):
    """
    Shared daily challenges
    Collection: "challenges"
    """
    id: str
    name: str = Field(..., min_length=1)
    description: str
    point_reward: int = Field(..., ge=MIN_REWARD, le=MAX_REWARD, alias="pointReward")
    end_time: datetime = Field(..., alias="endTime")

    @field_validator("end_time")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("endTime must carry a timezone")
        return v


class ChallengeDraft(_Doc):
    """One generated challenge, before it gets an id and an end time."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid", strict=True)

    name: str = Field(..., min_length=1, max_length=80)
    description: str = Field(..., min_length=1, max_length=300)
    point_reward: int = Field(..., ge=MIN_REWARD, le=MAX_REWARD, alias="pointReward")

    @field_validator("name", "description")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class UserChallengeInfo(_Doc):
    id: str
    name: str
    description: str
    point_reward: int = Field(..., alias="pointReward")
    end_time: datetime = Field(..., alias="endTime")
    completed: bool


class Item(_NonBlank):
    """
    Shop items
    Collection: "items"
    """
    id: str
    name: str
    description: str = ""
    price: int = Field(..., gt=0)
    image: str


class EnemyInfo(_Doc):
    name: str
    image: str
    health: int
    max_health: int = Field(..., alias="maxHealth")
    health_modifier: int = Field(..., alias="healthModifier")
    points: int


class Session(_Doc):
    """
    Server-side login sessions, keyed by the opaque token
    Collection: "sessions"
    """
    id: str
    user_id: str = Field(..., alias="userId")
    expires_at: datetime = Field(..., alias="expiresAt")


# ----------------------
# Requests
# ----------------------

class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RegisterRequest(_Request):
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=50)

    @field_validator("email")
    @classmethod
    def _email_length(cls, v: str) -> str:
        if len(v) > 50:
            raise ValueError("email must be at most 50 characters")
        return v


class LoginRequest(_Request):
    username_email: str = Field(..., min_length=3, max_length=50, alias="usernameEmail")
    password: str = Field(..., min_length=1, max_length=50)


class SetPasswordRequest(_Request):
    password: str = Field(..., min_length=1, max_length=50)
    password_new: str = Field(..., min_length=8, max_length=50, alias="passwordNew")
    password_new_validate: str = Field(..., min_length=8, max_length=50, alias="passwordNewValidate")


class SetUsernameRequest(_Request):
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)


class DeleteAccountRequest(_Request):
    password: str = Field(..., min_length=1, max_length=50)


class CompleteChallengeRequest(_Request):
    challenge_id: str = Field(..., min_length=1, max_length=64, alias="challengeId")


class DamageRequest(_Request):
    damage: Optional[StrictInt] = None


class BuyItemRequest(_Request):
    item_id: str = Field(..., min_length=1, max_length=64, alias="itemId")


class WeatherRequest(_Request):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    units: Literal["metric", "imperial", "standard"] = "metric"
