"""
API gateway: combines the users, auth, and attendance blueprints.
This is the local entrypoint for development.
"""

import logging
from typing import Optional

from argon2 import PasswordHasher
from flask import Flask, jsonify
from flask_cors import CORS

from event_api.attendance_service.routes import attendance_bp
from event_api.attendance_service.service import AttendanceService
from event_api.auth_service.routes import auth_bp
from event_api.auth_service.service import AuthService
from event_api.auth_service.utils import Gatekeeper
from event_api.config import Settings, load_settings
from event_api.database.db_connection import Database
from event_api.errors import register_error_handlers
from event_api.users_service.routes import users_bp
from event_api.users_service.service import UserService

API_VERSION = "1.0.0"


def configure_logging(level: str = "INFO") -> None:
    """Basic console logging during API requests."""
    logging.basicConfig(level=level, format="[%(levelname)s] %(asctime)s - %(message)s")


def create_app(
    settings: Optional[Settings] = None,
    db: Optional[Database] = None,
    hasher: Optional[PasswordHasher] = None,
) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        settings (Settings, optional): Loaded from the environment if omitted.
        db (Database, optional): Connection pool. A new pool is opened from
            settings if omitted.
        hasher (PasswordHasher, optional): Argon2 hasher with library defaults
            if omitted.

    Returns:
        Flask: The configured Flask application.
    """
    settings = settings or load_settings()
    db = db or Database.from_settings(settings)
    hasher = hasher or PasswordHasher()

    app = Flask(__name__)
    app.config["EXPOSE_ERROR_DETAILS"] = settings.expose_error_details

    CORS(app, resources={
        r"/*": {
            "origins": list(settings.cors_origins),
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
            "allow_headers": ["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
            "supports_credentials": True,
        }
    })

    # --- SERVICES ---
    app.extensions["user_service"] = UserService(db, hasher)
    app.extensions["auth_service"] = AuthService(db, hasher, settings.auth_token)
    app.extensions["attendance_service"] = AttendanceService(db)
    app.extensions["gatekeeper"] = Gatekeeper(settings.auth_token)

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(users_bp, url_prefix="/users")
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(attendance_bp, url_prefix="/attendance")
    register_error_handlers(app)
    logging.info("All blueprints registered successfully.")

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def index():
        """
        Root URL: service name, version, and endpoint map.
        """
        return jsonify({
            "message": "Event API is running",
            "version": API_VERSION,
            "endpoints": {
                "users": "/users",
                "auth": "/auth",
                "attendance": "/attendance",
            },
        }), 200

    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    return app


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logging.info(f"Event API available at http://localhost:{settings.port}")
    app.run(host="0.0.0.0", port=settings.port, debug=settings.expose_error_details)


if __name__ == "__main__":
    main()
