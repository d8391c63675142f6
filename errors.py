"""
Error types raised by the game engine, storage and word source.
"""


class GameError(Exception):
    """Base class for all game errors."""


class GuessRejected(GameError):
    """A submitted guess was refused. Round state is left untouched."""

    code = "guess_rejected"

    def __init__(self, message: str, row: int):
        super().__init__(message)
        self.message = message
        self.row = row


class IncompleteGuess(GuessRejected):
    code = "incomplete_guess"


class UnknownWord(GuessRejected):
    code = "unknown_word"


class StorageUnavailable(GameError):
    """Persistent storage could not be read or written."""


class DictionaryLoadFailure(GameError):
    """No word list could be fetched and none was cached."""
