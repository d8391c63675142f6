"""
Application configuration, read from the environment (and a .env file if present).
"""
import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_WORD_LIST_URL = "https://raw.githubusercontent.com/dwyl/english-words/master/words_alpha.txt"


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")

    # Storage: "sql" keeps everything in a local SQLite file, "redis" uses REDIS_URL
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "sql")
    DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///db/wordle.db")
    REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")

    WORD_LIST_URL = os.environ.get("WORD_LIST_URL", DEFAULT_WORD_LIST_URL)
    WORD_LIST_TIMEOUT = float(os.environ.get("WORD_LIST_TIMEOUT", "10"))

    # Seconds before "Not in word list" clears itself
    MESSAGE_TIMEOUT = float(os.environ.get("MESSAGE_TIMEOUT", "5"))

    PORT = int(os.environ.get("PORT", "5000"))
