"""
Round state and the state machine that drives a single round.
"""
import copy
import logging
import random
import time
from dataclasses import dataclass, field
from typing import List, Optional

from errors import IncompleteGuess, UnknownWord
from game_logic import (
    COLS,
    CORRECT,
    MARKS,
    ROWS,
    aggregate_letter_status,
    evaluate_guess,
    is_valid_word,
)
from word_source import pick_secret

logger = logging.getLogger(__name__)

NOT_ENOUGH_LETTERS = "Not enough letters"
NOT_IN_WORD_LIST = "Not in word list"
DEFAULT_MESSAGE_TIMEOUT = 5.0


def _empty_guesses():
    return [""] * ROWS


def _empty_feedback():
    return [None] * ROWS


@dataclass
class GameState:
    """Everything needed to redraw and resume a round (the secret lives elsewhere)."""
    guesses: List[str] = field(default_factory=_empty_guesses)
    feedback: List[Optional[List[str]]] = field(default_factory=_empty_feedback)
    current_row: int = 0
    current_col: int = 0
    game_over: bool = False
    game_won: bool = False

    @property
    def current_guess(self) -> str:
        return self.guesses[self.current_row]

    def to_dict(self) -> dict:
        return {
            "guesses": list(self.guesses),
            "feedback": [list(marks) if marks is not None else None for marks in self.feedback],
            "currentRow": self.current_row,
            "currentCol": self.current_col,
            "gameOver": self.game_over,
            "gameWon": self.game_won,
        }

    @classmethod
    def from_dict(cls, data) -> "GameState":
        """
        Rebuild a state from its persisted record.

        Raises:
            ValueError: if the record is malformed
        """
        if not isinstance(data, dict):
            raise ValueError("State record must be an object")

        try:
            guesses = data["guesses"]
            feedback = data["feedback"]
            current_row = data["currentRow"]
            current_col = data["currentCol"]
            game_over = data["gameOver"]
            game_won = data["gameWon"]
        except KeyError as e:
            raise ValueError(f"State record is missing {e}") from e

        if not isinstance(guesses, list) or len(guesses) != ROWS:
            raise ValueError(f"guesses must be a list of {ROWS} strings")
        for guess in guesses:
            if not isinstance(guess, str) or len(guess) > COLS:
                raise ValueError(f"Invalid guess {guess!r}")
            if guess and not (guess.isascii() and guess.isalpha() and guess.islower()):
                raise ValueError(f"Invalid guess {guess!r}")

        if not isinstance(feedback, list) or len(feedback) != ROWS:
            raise ValueError(f"feedback must be a list of {ROWS} entries")
        for marks in feedback:
            if marks is None:
                continue
            if not isinstance(marks, list) or len(marks) != COLS or any(m not in MARKS for m in marks):
                raise ValueError(f"Invalid feedback {marks!r}")

        for name, value in (("currentRow", current_row), ("currentCol", current_col)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer")
        if not 0 <= current_row < ROWS:
            raise ValueError(f"currentRow {current_row} out of range")
        if not 0 <= current_col <= COLS:
            raise ValueError(f"currentCol {current_col} out of range")
        if not isinstance(game_over, bool) or not isinstance(game_won, bool):
            raise ValueError("gameOver and gameWon must be booleans")
        if game_won and not game_over:
            raise ValueError("gameWon set on a round that is not over")

        # Rows before the current one are scored, the current one only once the round ended
        for row, (guess, marks) in enumerate(zip(guesses, feedback)):
            scored = row < current_row or (row == current_row and game_over)
            if scored and marks is None:
                raise ValueError(f"Row {row} was played but has no feedback")
            if not scored and marks is not None:
                raise ValueError(f"Row {row} has feedback but was never submitted")
            if marks is not None and len(guess) != COLS:
                raise ValueError(f"Row {row} has feedback for an incomplete guess")
            if row > current_row and guess:
                raise ValueError(f"Row {row} has letters past the current row")
        if game_won and feedback[current_row] != [CORRECT] * COLS:
            raise ValueError("gameWon set but the final row is not all correct")
        if game_over and not game_won and current_row != ROWS - 1:
            raise ValueError("Round lost before the last row")

        return cls(
            guesses=list(guesses),
            feedback=[list(marks) if marks is not None else None for marks in feedback],
            current_row=current_row,
            current_col=current_col,
            game_over=game_over,
            game_won=game_won,
        )


@dataclass
class Message:
    text: str
    expires_at: Optional[float] = None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


def _scored_against(state: GameState, secret: str) -> bool:
    """True if every scored row matches what the secret would give."""
    return all(
        marks is None or marks == evaluate_guess(guess, secret)
        for guess, marks in zip(state.guesses, state.feedback)
    ) and state.game_won == (state.game_over and state.current_guess == secret)


class GameSession:
    """
    Owns one round at a time and applies input events to it.

    Every mutation is written through the store (when one is given). Store
    failures are handled inside GameStore and never reach the player.
    """

    def __init__(self, dictionary, store=None, clock=time.monotonic, rng=None,
                 message_timeout: float = DEFAULT_MESSAGE_TIMEOUT):
        if not dictionary:
            raise ValueError("Cannot start a game with an empty dictionary")
        self.dictionary = frozenset(dictionary)
        self.store = store
        self.clock = clock
        self.rng = rng or random.Random()
        self.message_timeout = message_timeout

        self.state = GameState()
        self.secret = None
        self.message: Optional[Message] = None
        self.shake_row: Optional[int] = None

    # --------------------
    # Lifecycle
    # --------------------
    def start(self):
        """Resume the persisted round if there is a usable one, otherwise begin a new round."""
        if self.store is not None:
            state = self.store.load()
            secret = self.store.load_secret()
            if state is not None and secret is not None and secret in self.dictionary \
                    and _scored_against(state, secret):
                self.state = state
                self.secret = secret
                self.message = None
                self.shake_row = None
                logger.info("Resumed round at row %d", state.current_row)
                return self.snapshot()
            if state is not None:
                logger.warning("Saved round does not match a usable secret word, starting fresh")
        return self.new_round()

    def new_round(self):
        self.secret = pick_secret(self.dictionary, self.rng)
        self.state = GameState()
        self.shake_row = None
        self.clear_message()
        if self.store is not None:
            self.store.save_secret(self.secret)
        self._persist()
        logger.info("New round started")
        logger.debug("Secret word is %s", self.secret)
        return self.snapshot()

    reset = new_round

    # --------------------
    # Input events
    # --------------------
    def input_letter(self, ch: str):
        if not isinstance(ch, str) or len(ch) != 1 or not (ch.isascii() and ch.isalpha()):
            raise ValueError(f"Expected a single letter, got {ch!r}")

        self.shake_row = None
        state = self.state
        if state.game_over or len(state.current_guess) >= COLS:
            return self.snapshot()

        state.guesses[state.current_row] += ch.lower()
        state.current_col = len(state.current_guess)
        self._persist()
        return self.snapshot()

    def delete_letter(self):
        self.shake_row = None
        state = self.state
        if state.game_over or not state.current_guess:
            return self.snapshot()

        state.guesses[state.current_row] = state.current_guess[:-1]
        state.current_col = len(state.current_guess)
        self._persist()
        return self.snapshot()

    def submit_guess(self):
        """
        Score the current row.

        Raises:
            IncompleteGuess: the row has fewer than COLS letters
            UnknownWord: the row is not in the dictionary
        """
        self.shake_row = None
        state = self.state
        if state.game_over:
            return self.snapshot()

        row = state.current_row
        guess = state.current_guess

        if len(guess) != COLS:
            self._reject(NOT_ENOUGH_LETTERS, row)
            raise IncompleteGuess(NOT_ENOUGH_LETTERS, row)

        if not is_valid_word(guess, self.dictionary):
            self._reject(NOT_IN_WORD_LIST, row, timeout=self.message_timeout)
            raise UnknownWord(NOT_IN_WORD_LIST, row)

        state.feedback[row] = evaluate_guess(guess, self.secret)

        if guess == self.secret:
            state.game_over = True
            state.game_won = True
            logger.info("Round won on row %d", row)
        elif row == ROWS - 1:
            state.game_over = True
            state.game_won = False
            logger.info("Round lost")
        else:
            state.current_row += 1
            state.current_col = len(state.current_guess)
            self.clear_message()

        self._persist()
        return self.snapshot()

    def _reject(self, text, row, timeout=None):
        self.show_message(text, timeout=timeout)
        self.shake_row = row

    # --------------------
    # Messages
    # --------------------
    def show_message(self, text: str, timeout: Optional[float] = None):
        """Replace the current message. A new message cancels any pending expiry."""
        expires_at = self.clock() + timeout if timeout is not None else None
        self.message = Message(text, expires_at)

    def clear_message(self):
        self.message = None

    def _message_expires_in(self) -> Optional[float]:
        """Seconds until the current message clears itself, or None if it stays."""
        if self.message is None or self.message.expires_at is None:
            return None
        return max(0.0, self.message.expires_at - self.clock())

    def current_message(self) -> Optional[str]:
        if self.message is not None and self.message.expired(self.clock()):
            self.message = None
        return self.message.text if self.message is not None else None

    # --------------------
    # Views
    # --------------------
    def aggregate_letter_status(self):
        return aggregate_letter_status(self.state.guesses, self.state.feedback, self.state.current_row)

    def snapshot(self) -> dict:
        state = self.state
        text = self.current_message()
        outcome = None
        if state.game_over:
            outcome = {"won": state.game_won, "secret": self.secret}
        return copy.deepcopy({
            "state": state.to_dict(),
            "message": text,
            "messageExpiresIn": self._message_expires_in() if text is not None else None,
            "shakeRow": self.shake_row,
            "letterStatus": self.aggregate_letter_status(),
            "canSubmit": not state.game_over and len(state.current_guess) == COLS,
            "outcome": outcome,
        })

    def _persist(self):
        if self.store is not None:
            self.store.save(self.state)
