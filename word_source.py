"""
Word list acquisition and secret word selection.
"""
import logging
import random

import requests

from errors import DictionaryLoadFailure
from game_logic import COLS

logger = logging.getLogger(__name__)


def is_playable(word: str) -> bool:
    return len(word) == COLS and word.isascii() and word.isalpha() and word.islower()


def fetch_words(url, timeout=10):
    """
    Download a newline-separated word list and keep the 5-letter words.

    Raises:
        DictionaryLoadFailure: on network or HTTP errors
    """
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise DictionaryLoadFailure(f"Could not fetch word list from {url}: {e}") from e

    words = set()
    for line in r.text.splitlines():
        w = line.strip().lower()
        if is_playable(w):
            words.add(w)
    return words


def load_dictionary(store, url, timeout=10):
    """
    Return the playable word set, from the cache when possible.

    A freshly fetched list is written back to the cache. Failures are not
    retried here; the caller decides when to try again.

    Raises:
        DictionaryLoadFailure: nothing cached and the fetch failed or was empty
    """
    if store is not None:
        cached = store.load_dictionary()
        if cached:
            words = {w for w in cached if is_playable(w)}
            if words:
                logger.info("Loaded %d words from cache", len(words))
                return frozenset(words)

    words = fetch_words(url, timeout=timeout)
    if not words:
        raise DictionaryLoadFailure(f"Word list at {url} has no {COLS}-letter words")

    logger.info("Fetched %d words from %s", len(words), url)
    if store is not None:
        store.save_dictionary(words)
    return frozenset(words)


def pick_secret(dictionary, rng=random):
    """Uniformly random word from the dictionary."""
    if not dictionary:
        raise ValueError("Cannot pick a word from an empty dictionary")
    return rng.choice(sorted(dictionary))
