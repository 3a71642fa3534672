from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import logging
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()


def _error_payload(status: int, title: str, detail: str):
    return {'error': {'status': status, 'title': title, 'detail': detail}}, status


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    # register every table on the shared metadata
    from .models import authz, catalog, audit  # noqa: F401

    jwt.init_app(app)

    from .routes.auth import auth_bp
    from .routes.catalog import catalog_bp
    from .routes.staff import staff_bp
    from .routes.roles import roles_bp
    from .routes.permissions import perms_bp
    from .routes.audit import audit_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(catalog_bp, url_prefix='/catalog')
    app.register_blueprint(staff_bp, url_prefix='/staff')
    app.register_blueprint(perms_bp, url_prefix='/staff')  # overrides live under /staff/<id>/permissions
    app.register_blueprint(roles_bp, url_prefix='/roles')
    app.register_blueprint(audit_bp, url_prefix='/audit')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    @app.errorhandler(ValidationError)
    def handle_validation(e):  # type: ignore
        from .schemas import first_error_message
        return _error_payload(400, 'Bad Request', first_error_message(e))

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            return _error_payload(e.code, e.name, e.description)
        app.logger.exception('Unhandled exception')
        SessionLocal.rollback()
        return _error_payload(500, 'Internal Server Error', 'Unexpected error')

    return app


def get_db():
    return SessionLocal()
