import logging
import threading
from flask import Blueprint, Flask, current_app, request, jsonify
from config import Config
from errors import DictionaryLoadFailure, GuessRejected
from game_state import GameSession
from storage import GameStore, make_backend
from word_source import load_dictionary

logger = logging.getLogger(__name__)

bp = Blueprint("wordle", __name__)


class GameService:
    """Holds the app's single game session and serializes access to it."""

    def __init__(self, store, config):
        self.store = store
        self.config = config
        self.session = None
        self.lock = threading.Lock()

    def get_session(self):
        """Load the word list and start (or resume) a round on first use."""
        if self.session is None:
            try:
                dictionary = load_dictionary(
                    self.store,
                    self.config["WORD_LIST_URL"],
                    timeout=self.config["WORD_LIST_TIMEOUT"],
                )
            except DictionaryLoadFailure as e:
                logger.error("Word list unavailable: %s", e)
                raise
            session = GameSession(
                dictionary,
                store=self.store,
                message_timeout=self.config["MESSAGE_TIMEOUT"],
            )
            session.start()
            self.session = session
        return self.session


# Flask app setup
def create_app(test_config=None, store=None):
    """Factory function to create and configure Flask app."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    if store is None:
        store = GameStore(make_backend(app.config))
    app.extensions["wordle"] = GameService(store, app.config)
    app.register_blueprint(bp)
    return app


def _service():
    return current_app.extensions["wordle"]


@bp.errorhandler(DictionaryLoadFailure)
def dictionary_unavailable(e):
    return jsonify({"error": "Word list unavailable", "detail": str(e)}), 503


def _json_object():
    """Request body as a dict. Missing, invalid or non-object JSON gives {}."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _rejected(session, e):
    return jsonify({"error": e.message, "code": e.code, **session.snapshot()}), 400


# --------------------
# Game routes
# --------------------
@bp.route("/api/state")
def get_state():
    """Current snapshot of the round."""
    service = _service()
    with service.lock:
        return jsonify(service.get_session().snapshot())


@bp.route("/api/letter", methods=["POST"])
def input_letter():
    """Type one letter into the current row."""
    data = _json_object()
    letter = data.get("letter", "")

    service = _service()
    with service.lock:
        session = service.get_session()
        try:
            return jsonify(session.input_letter(letter))
        except ValueError:
            return jsonify({"error": "Letter must be a single character a-z"}), 400


@bp.route("/api/delete", methods=["POST"])
def delete_letter():
    """Remove the last letter of the current row."""
    service = _service()
    with service.lock:
        return jsonify(service.get_session().delete_letter())


@bp.route("/api/submit", methods=["POST"])
def submit_guess():
    """Score the current row against the secret word."""
    service = _service()
    with service.lock:
        session = service.get_session()
        try:
            return jsonify(session.submit_guess())
        except GuessRejected as e:
            return _rejected(session, e)


@bp.route("/api/key", methods=["POST"])
def press_key():
    """Map a raw key name the way a keyboard handler would."""
    data = _json_object()
    key = data.get("key", "")

    service = _service()
    with service.lock:
        session = service.get_session()
        if isinstance(key, str) and len(key) == 1 and key.isascii() and key.isalpha():
            return jsonify(session.input_letter(key))
        if key == "Backspace":
            return jsonify(session.delete_letter())
        if key == "Enter":
            try:
                return jsonify(session.submit_guess())
            except GuessRejected as e:
                return _rejected(session, e)
        return jsonify(session.snapshot())


@bp.route("/api/new-round", methods=["POST"])
def new_round():
    """Throw away the current round and start another."""
    service = _service()
    with service.lock:
        return jsonify(service.get_session().new_round())


@bp.route("/api/message/clear", methods=["POST"])
def clear_message():
    service = _service()
    with service.lock:
        session = service.get_session()
        session.clear_message()
        return jsonify(session.snapshot())


@bp.route("/health")
def health():
    """Health check endpoint"""
    service = _service()
    return jsonify({
        "status": "ok",
        "word_list_loaded": service.session is not None,
    })


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()
    app.run(host="0.0.0.0", port=app.config["PORT"], debug=True)
