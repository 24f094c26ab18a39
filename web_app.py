# web_app.py
import logging

from flask import Flask

from config import settings
from day_status import DayStatusStore
from habit_manager import HabitManager
from habit_registry import HabitRegistry
from habits_bp import habits_bp
from kv_repo import SqlKeyValueStore
from local_storage import LocalKeyValueStore

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.LOG_LEVEL):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def make_storage(backend: str = settings.STORAGE_BACKEND):
    """Open the key-value store selected in the settings."""
    if backend == "sqlite":
        return SqlKeyValueStore.from_url(settings.DATABASE_URL)
    if backend == "json":
        return LocalKeyValueStore(settings.STORAGE_FILE)
    raise ValueError(f"Unknown storage backend '{backend}' (expected json or sqlite)")


def build_manager(storage, reminders=None, clock=None) -> HabitManager:
    """Wire both stores on one key-value store and run first-start seeding."""
    registry = HabitRegistry(storage)
    registry.initialize()
    kwargs = {"clock": clock} if clock else {}
    return HabitManager(registry, DayStatusStore(storage), reminders=reminders, **kwargs)


def create_app(storage=None, reminders=None, clock=None) -> Flask:
    app = Flask(__name__)
    app.secret_key = settings.SECRET_KEY

    if storage is None:
        storage = make_storage()
    app.extensions["habit_manager"] = build_manager(storage, reminders, clock)
    app.register_blueprint(habits_bp)
    return app


if __name__ == "__main__":
    configure_logging()
    logger.info(f"Starting habit tracker with {settings.STORAGE_BACKEND} storage")
    create_app().run(debug=False)
