"""
Persistence for round state and the cached word list.

GameStore speaks JSON over a tiny key/value backend. Two backends exist:
SqlBackend (SQLAlchemy, a local SQLite file by default) and RedisBackend.
"""
import json
import logging

import redis
from sqlalchemy.exc import SQLAlchemyError

from db.database import get_db, init_database, make_engine, make_session_factory
from db.models import StoredValue
from errors import StorageUnavailable
from game_logic import COLS
from game_state import GameState

logger = logging.getLogger(__name__)

# Bump the version suffix whenever a record format changes
GAME_STATE_KEY = "wordle-game-state-v1"
SECRET_WORD_KEY = "wordle-secret-word-v1"
WORD_LIST_KEY = "wordle-5-letter-words-v1"


class SqlBackend:
    def __init__(self, engine):
        self.session_factory = make_session_factory(engine)
        try:
            init_database(engine)
        except SQLAlchemyError as e:
            logger.warning("Could not create tables: %s", e)

    @classmethod
    def from_url(cls, database_url):
        return cls(make_engine(database_url))

    def get(self, key):
        try:
            with get_db(self.session_factory) as db:
                row = db.get(StoredValue, key)
                return row.value if row is not None else None
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Could not read '{key}': {e}") from e

    def set(self, key, value):
        try:
            with get_db(self.session_factory) as db:
                try:
                    db.merge(StoredValue(key=key, value=value))
                    db.commit()
                except SQLAlchemyError:
                    db.rollback()
                    raise
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Could not write '{key}': {e}") from e

    def delete(self, key):
        try:
            with get_db(self.session_factory) as db:
                try:
                    db.query(StoredValue).filter(StoredValue.key == key).delete()
                    db.commit()
                except SQLAlchemyError:
                    db.rollback()
                    raise
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Could not delete '{key}': {e}") from e


class RedisBackend:
    def __init__(self, client):
        self.r = client

    @classmethod
    def from_url(cls, redis_url):
        return cls(redis.from_url(redis_url, decode_responses=True))

    def get(self, key):
        try:
            return self.r.get(key)
        except redis.RedisError as e:
            raise StorageUnavailable(f"Redis error reading '{key}': {e}") from e

    def set(self, key, value):
        try:
            self.r.set(key, value)
        except redis.RedisError as e:
            raise StorageUnavailable(f"Redis error writing '{key}': {e}") from e

    def delete(self, key):
        try:
            self.r.delete(key)
        except redis.RedisError as e:
            raise StorageUnavailable(f"Redis error deleting '{key}': {e}") from e


def make_backend(config):
    """Build the backend named by STORAGE_BACKEND."""
    kind = config["STORAGE_BACKEND"]
    if kind == "sql":
        return SqlBackend.from_url(config["DATABASE_URL"])
    if kind == "redis":
        return RedisBackend.from_url(config["REDIS_URL"])
    raise ValueError(f"Unknown STORAGE_BACKEND '{kind}'")


class GameStore:
    """
    Saves and restores game data.

    Writes never raise: a failed write is logged and play continues in memory.
    Reads return None when the value is missing, unreadable or corrupt.
    """

    def __init__(self, backend):
        self.backend = backend

    # --------------------
    # Round state
    # --------------------
    def save(self, state: GameState):
        self._write(GAME_STATE_KEY, state.to_dict())

    def load(self):
        data = self._read(GAME_STATE_KEY)
        if data is None:
            return None
        try:
            return GameState.from_dict(data)
        except ValueError as e:
            logger.warning("Discarding corrupt game state: %s", e)
            return None

    def save_secret(self, word: str):
        self._write(SECRET_WORD_KEY, word)

    def load_secret(self):
        word = self._read(SECRET_WORD_KEY)
        if not isinstance(word, str) or len(word) != COLS or not (word.isascii() and word.isalpha()):
            if word is not None:
                logger.warning("Discarding corrupt secret word record")
            return None
        return word.lower()

    def clear(self):
        """Forget the current round. The word list cache is kept."""
        for key in (GAME_STATE_KEY, SECRET_WORD_KEY):
            try:
                self.backend.delete(key)
            except StorageUnavailable as e:
                logger.warning("Storage unavailable, could not clear %s: %s", key, e)

    # --------------------
    # Word list cache
    # --------------------
    def save_dictionary(self, words):
        self._write(WORD_LIST_KEY, sorted(words))

    def load_dictionary(self):
        words = self._read(WORD_LIST_KEY)
        if words is None:
            return None
        if not isinstance(words, list) or not all(isinstance(w, str) for w in words):
            logger.warning("Discarding corrupt word list cache")
            return None
        return words

    def _write(self, key, value):
        try:
            self.backend.set(key, json.dumps(value))
        except StorageUnavailable as e:
            logger.warning("Storage unavailable, %s not saved: %s", key, e)

    def _read(self, key):
        try:
            raw = self.backend.get(key)
        except StorageUnavailable as e:
            logger.warning("Storage unavailable, %s not loaded: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            logger.warning("Invalid JSON stored under %s", key)
            return None
