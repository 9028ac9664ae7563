"""Flask CLI commands for local setup and scheduled maintenance.

    flask catalog seed
    flask challenges refresh
    flask sessions purge
"""
from __future__ import annotations

import click
from flask import current_app
from flask.cli import AppGroup

from dailyquest.jobs.challenge_refresher import run_challenge_refresh
from dailyquest.services import services
from dailyquest.services.combat import ENEMIES
from dailyquest.services.shop import ITEMS

catalog_cli = AppGroup("catalog", help="Shop items and enemy templates.")
challenges_cli = AppGroup("challenges", help="Daily challenge catalog.")
sessions_cli = AppGroup("sessions", help="Server-side login sessions.")

DEFAULT_ITEMS = [
    {"name": "Wooden Sword", "description": "A humble start.", "price": 25, "image": "/images/items/wooden_sword.png"},
    {"name": "Iron Helmet", "description": "Keeps the doubts out.", "price": 60, "image": "/images/items/iron_helmet.png"},
    {"name": "Focus Potion", "description": "Smells like coffee.", "price": 40, "image": "/images/items/focus_potion.png"},
    {"name": "Golden Crown", "description": "For streak royalty.", "price": 250, "image": "/images/items/golden_crown.png"},
]

DEFAULT_ENEMIES = [
    {"name": "Procrastination Slime", "image": "/images/enemies/slime.png"},
    {"name": "Doomscroll Goblin", "image": "/images/enemies/goblin.png"},
    {"name": "Snooze Dragon", "image": "/images/enemies/dragon.png"},
]


def seed_catalog() -> dict:
    """Insert default items and enemy templates that are not there yet (matched by name)."""
    store = services().store
    added = {}
    for collection, defaults in ((ITEMS, DEFAULT_ITEMS), (ENEMIES, DEFAULT_ENEMIES)):
        existing = {d.get("name") for d in store.find_all(collection)}
        missing = [d for d in defaults if d["name"] not in existing]
        if missing:
            store.insert_many(collection, missing)
        added[collection] = len(missing)
    current_app.logger.info("Seeded catalog: %s", added)
    return added


@catalog_cli.command("seed")
def seed_command():
    added = seed_catalog()
    click.echo(f"items added: {added[ITEMS]}, enemies added: {added[ENEMIES]}")


@challenges_cli.command("refresh")
def refresh_command():
    out = run_challenge_refresh()
    click.echo(f"purged: {out['purged']}, active: {out['active']}")
    if not out["complete"]:
        click.echo("warning: challenge generator came up short", err=True)


@sessions_cli.command("purge")
def purge_sessions_command():
    removed = services().auth.purge_expired_sessions()
    current_app.logger.info("Purged %d expired session(s)", removed)
    click.echo(f"sessions purged: {removed}")


def register_cli(app) -> None:
    app.cli.add_command(catalog_cli)
    app.cli.add_command(challenges_cli)
    app.cli.add_command(sessions_cli)
