import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration, read from the environment."""
    # relative SQLite paths resolve inside the app instance folder
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///fleet.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_SCHEMA = os.environ.get("AUTO_CREATE_SCHEMA", "1") == "1"

    # CACHE CONFIG
    CACHE_TYPE = os.environ.get("CACHE_TYPE", "SimpleCache")
    CACHE_REDIS_URL = os.environ.get("CACHE_REDIS_URL", "redis://localhost:6379/0")
    CACHE_DEFAULT_TIMEOUT = int(os.environ.get("CACHE_DEFAULT_TIMEOUT", "30"))
    HEATMAP_CACHE_TIMEOUT = int(os.environ.get("HEATMAP_CACHE_TIMEOUT", "60"))

    # "left" tolerates rentals that have not been returned yet,
    # "inner" is the legacy behaviour that hides them.
    RENTAL_DETAIL_DESTINATION_JOIN = os.environ.get("RENTAL_DETAIL_DESTINATION_JOIN", "left")

    # Presentation layer
    FLEET_API_URL = os.environ.get("FLEET_API_URL", "http://localhost:3000/api")
    PAGE_SIZE = int(os.environ.get("PAGE_SIZE", "12"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    PORT = int(os.environ.get("PORT", "3000"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    AUTO_CREATE_SCHEMA = True
    CACHE_TYPE = "SimpleCache"
