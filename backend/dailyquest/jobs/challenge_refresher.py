from __future__ import annotations

from flask import current_app

from dailyquest.services import services


def run_challenge_refresh() -> dict:
    """Drop expired/invalid challenges, then top the catalog back up."""
    catalog = services().catalog
    purged = catalog.purge_expired()
    active = catalog.get_active_challenges()
    current_app.logger.info("Challenge refresh: purged=%d active=%d", purged, len(active))
    return {
        "ok": True,
        "purged": purged,
        "active": len(active),
        "complete": len(active) >= catalog.size,
    }
