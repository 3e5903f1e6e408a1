# app.py
# Flask application built with the Application Factory pattern

import logging

from flask import Flask, jsonify

from config import Config
from errors import AuthorizationError, FestivalError
from extensions import db, migrate

# Imported here so Alembic (Migrate) sees every table
from models import User, Event, Participant, EventRegistration, Judge, EventJudge, EvaluationSession, Evaluation, EventLog


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    db.init_app(app)
    migrate.init_app(app, db)

    # Connects the audit receivers to the lifecycle signals
    import hooks  # noqa: F401

    from routes.auth import auth_bp
    from routes.main import main_bp
    from routes.admin import admin_bp
    from routes.responses import STATUS_CODES

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(admin_bp)

    @app.errorhandler(FestivalError)
    def handle_festival_error(error):
        # Raised from the access gate and from request parsing helpers
        if isinstance(error, AuthorizationError):
            app.logger.warning("Access denied: %s", error.message)
        status = STATUS_CODES.get(error.code, 400)
        return jsonify({'success': False, 'error': error.message, 'code': error.code}), status

    @app.cli.command('init-db')
    def init_db():
        """Create all tables on a fresh database."""
        db.create_all()
        print('Database tables created.')

    return app
