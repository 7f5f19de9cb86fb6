"""
FLASK APP FACTORY - MFA BACKEND SERVER
======================================

Builds the Flask app, enables CORS and registers the MFA blueprint.

CONFIGURATION (environment variables, prefix MFA_):
- MFA_ISSUER             issuer label shown in authenticator apps
- MFA_DATABASE_FILE      SQLite file; empty -> in-memory store
- MFA_BACKUP_CODE_COUNT  backup codes per enable / regenerate
- MFA_TOLERANCE_STEPS    TOTP steps accepted either side of now
- MFA_LOG_LEVEL          logging level name
"""

import logging

from flask import Flask
from flask_cors import CORS

from ..core.backup_codes import BACKUP_CODE_COUNT
from ..core.enrollment import MFAService
from ..core.otp_core import DEFAULT_TOLERANCE
from ..core.uri import DEFAULT_ISSUER
from ..database import InMemoryProfileStore, SQLiteProfileStore
from .routes import mfa_bp

DEFAULT_CONFIG = {
    "ISSUER": DEFAULT_ISSUER,
    "DATABASE_FILE": "database/mfa_database.db",
    "BACKUP_CODE_COUNT": BACKUP_CODE_COUNT,
    "TOLERANCE_STEPS": DEFAULT_TOLERANCE,
    "LOG_LEVEL": "INFO",
}


def create_app(config: dict = None, store=None, clock=None, random=None) -> Flask:
    """
    Arguments:
        config: overrides applied after the MFA_* environment variables
        store: profile store to use instead of the configured database
        clock, random: passed through to MFAService (tests pin them)
    """
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env("MFA")
    if config:
        app.config.from_mapping(config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # browser frontends run on another origin
    CORS(app)

    if store is None:
        database_file = app.config["DATABASE_FILE"]
        store = SQLiteProfileStore(database_file) if database_file else InMemoryProfileStore()

    app.extensions["mfa"] = MFAService(
        store,
        clock=clock,
        random=random,
        issuer=app.config["ISSUER"],
        backup_code_count=int(app.config["BACKUP_CODE_COUNT"]),
        tolerance_steps=int(app.config["TOLERANCE_STEPS"]),
    )
    app.register_blueprint(mfa_bp)

    @app.route("/", methods=["GET"])
    def index():
        return {
            "service": "PointBridge MFA",
            "endpoints": sorted(
                rule.rule for rule in app.url_map.iter_rules() if rule.rule.startswith("/api/")
            ),
        }

    return app


if __name__ == "__main__":
    # debug server: http://localhost:5000
    create_app().run(debug=True, host="0.0.0.0", port=5000)
