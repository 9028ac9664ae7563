import os

from flask import Flask, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from dailyquest.config import Config
from dailyquest.errors import register_error_handlers
from dailyquest.extensions import cors, db, login_manager, migrate
from dailyquest.segments.segment_account import account_bp
from dailyquest.segments.segment_auth import auth_bp
from dailyquest.segments.segment_challenges import challenges_bp
from dailyquest.segments.segment_enemy import enemy_bp
from dailyquest.segments.segment_shop import shop_bp
from dailyquest.segments.segment_streak import streak_bp
from dailyquest.segments.segment_weather import weather_bp
from dailyquest.services import build_services


def create_app(config: Config | None = None, *, store=None, generator=None, weather=None):
    app = Flask(__name__)

    # Ensure instance dir exists for SQLite paths
    instance_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "instance"))
    os.makedirs(instance_dir, exist_ok=True)

    config = (config or Config.from_env(instance_dir=instance_dir)).validate()
    app.config["SECRET_KEY"] = config.secret_key
    app.config["SQLALCHEMY_DATABASE_URI"] = config.database_url
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_SECURE"] = config.is_production
    app.config.update(config.flask_overrides)

    cors.init_app(
        app,
        resources={r"/api/*": {"origins": list(config.cors_origins)}},
        supports_credentials="*" not in config.cors_origins,
    )

    # Init extensions
    db.init_app(app)
    migrations_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "migrations"))
    migrate.init_app(app, db, directory=migrations_dir)
    login_manager.init_app(app)

    # Loaders register themselves on import
    from dailyquest import auth  # noqa: F401

    app.extensions["dailyquest"] = build_services(
        config, store=store, generator=generator, weather=weather
    )
    register_error_handlers(app)

    # Register API routes
    app.register_blueprint(auth_bp)
    app.register_blueprint(account_bp)
    app.register_blueprint(challenges_bp)
    app.register_blueprint(enemy_bp)
    app.register_blueprint(shop_bp)
    app.register_blueprint(streak_bp)
    app.register_blueprint(weather_bp)

    from dailyquest.devtools import register_cli
    register_cli(app)

    # Health check
    @app.get("/api/health")
    def health():
        db_state = "ok"
        try:
            db.session.execute(text("SELECT 1"))
        except SQLAlchemyError:
            db.session.rollback()
            db_state = "fail"
        return jsonify({
            "ok": True,
            "service": "dailyquest-backend",
            "env": config.env,
            "db": db_state,
        })

    app.logger.info("DailyQuest started (env=%s, ai_challenges=%s)", config.env, config.ai_challenges_enabled)
    return app
