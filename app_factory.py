import logging
import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_caching import Cache
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from fleet.config import Config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
cache = Cache()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES clauses unless this is set per connection
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_app(config_class=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    os.makedirs(app.instance_path, exist_ok=True)

    # Init extensions
    db.init_app(app)
    cache.init_app(app)

    # Blueprint
    from fleet.routes import bp
    app.register_blueprint(bp, url_prefix="/api")

    from fleet.cli import register_commands
    register_commands(app)

    check_connection(app)
    if app.config.get("AUTO_CREATE_SCHEMA"):
        with app.app_context():
            from fleet import models  # noqa: F401
            db.create_all()

    return app


def check_connection(app):
    """
    Open one connection against the configured store.

    A store that cannot be reached at startup is fatal; there is no retry.
    """
    with app.app_context():
        try:
            with db.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.error("Database connection failed: %s",
                         app.config["SQLALCHEMY_DATABASE_URI"], exc_info=True)
            raise SystemExit(1)
    logger.info("Connected to the database.")
