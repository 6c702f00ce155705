import logging
import os
from dotenv import load_dotenv
from functools import lru_cache
from typing import Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

logger = logging.getLogger(__name__)


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


@lru_cache(maxsize=1)
def get_mongo_client() -> MongoClient:
    """Cached MongoClient for the slide-state store.

    Env:
      - MONGODB_URI: connection string (required)
      - MONGODB_TIMEOUT_MS (optional): server selection timeout in ms (default 5000)
    """
    load_dotenv()
    uri = _get_env("MONGODB_URI")
    if not uri:
        raise RuntimeError("MONGODB_URI is not set")

    timeout_ms = int(_get_env("MONGODB_TIMEOUT_MS", "5000"))
    client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms, appname="slide-asset-editor")
    try:
        client.admin.command("ping")
    except ServerSelectionTimeoutError as e:
        raise RuntimeError(f"Cannot connect to MongoDB: {e}") from e
    return client


def get_db_name() -> str:
    return _get_env("MONGODB_DB_NAME", "slide_editor")


def get_db():
    return get_mongo_client()[get_db_name()]


def get_collection(name: str) -> Collection:
    return get_db()[name]


def ping_db() -> bool:
    """True when the store answers a ping; used for readiness reporting only."""
    try:
        get_mongo_client().admin.command("ping")
    except (RuntimeError, PyMongoError) as exc:
        logger.debug("MongoDB not reachable: %s", exc)
        return False
    return True
