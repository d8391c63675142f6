from unittest import mock

import pytest
import requests

from app import create_app
from game_logic import CORRECT, ROWS
from game_state import GameState
from storage import GameStore
from tests.helpers import WORDS, FlakyBackend


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "STORAGE_BACKEND": "sql",
        "DATABASE_URL": f"sqlite:///{tmp_path / 'app.db'}",
        "WORD_LIST_URL": "https://example.test/words.txt",
    })
    store = app.extensions["wordle"].store
    store.save_dictionary(WORDS)
    # A saved empty round pins the secret word
    store.save(GameState())
    store.save_secret("crane")
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def send_word(client, word):
    for ch in word:
        client.post("/api/letter", json={"letter": ch})
    return client.post("/api/submit")


def test_health_before_first_round(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok", "word_list_loaded": False}


def test_state_starts_round(client):
    data = client.get("/api/state").get_json()
    assert data["state"]["guesses"] == [""] * ROWS
    assert data["state"]["currentRow"] == 0
    assert client.get("/health").get_json()["word_list_loaded"] is True


def test_letter_and_delete(client):
    client.post("/api/letter", json={"letter": "C"})
    data = client.post("/api/letter", json={"letter": "r"}).get_json()
    assert data["state"]["guesses"][0] == "cr"
    data = client.post("/api/delete").get_json()
    assert data["state"]["guesses"][0] == "c"
    assert data["state"]["currentCol"] == 1


@pytest.mark.parametrize("payload", [
    {}, {"letter": ""}, {"letter": "ab"}, {"letter": "7"}, {"letter": 3}, ["a"], "a", 7,
])
def test_bad_letter_is_400(client, payload):
    response = client.post("/api/letter", json=payload)
    assert response.status_code == 400
    assert client.get("/api/state").get_json()["state"]["guesses"][0] == ""


def test_incomplete_guess(client):
    client.post("/api/letter", json={"letter": "c"})
    response = client.post("/api/submit")
    assert response.status_code == 400
    data = response.get_json()
    assert data["code"] == "incomplete_guess"
    assert data["error"] == "Not enough letters"
    assert data["shakeRow"] == 0
    assert data["state"]["currentRow"] == 0


def test_unknown_word(client):
    response = send_word(client, "zzzzz")
    assert response.status_code == 400
    data = response.get_json()
    assert data["code"] == "unknown_word"
    assert data["message"] == "Not in word list"
    assert data["messageExpiresIn"] == pytest.approx(5, abs=1)
    assert data["state"]["feedback"][0] is None


def test_clear_message(client):
    send_word(client, "zzzzz")
    data = client.post("/api/message/clear").get_json()
    assert data["message"] is None


def test_win(client):
    send_word(client, "slate")
    data = send_word(client, "crane").get_json()
    assert data["state"]["gameOver"] is True
    assert data["state"]["gameWon"] is True
    assert data["outcome"] == {"won": True, "secret": "crane"}
    assert data["letterStatus"]["c"] == CORRECT


def test_loss_reveals_secret(client):
    for _ in range(ROWS):
        data = send_word(client, "slate").get_json()
    assert data["state"]["gameOver"] is True
    assert data["state"]["gameWon"] is False
    assert data["outcome"]["secret"] == "crane"


def test_key_route_maps_keys(client):
    for key in ["c", "R", "a", "x"]:
        client.post("/api/key", json={"key": key})
    data = client.post("/api/key", json={"key": "Backspace"}).get_json()
    assert data["state"]["guesses"][0] == "cra"
    data = client.post("/api/key", json={"key": "Shift"}).get_json()
    assert data["state"]["guesses"][0] == "cra"
    response = client.post("/api/key", json={"key": "Enter"})
    assert response.status_code == 400
    for key in ["n", "e", "Enter"]:
        response = client.post("/api/key", json={"key": key})
    assert response.status_code == 200
    assert response.get_json()["state"]["gameWon"] is True


@pytest.mark.parametrize("payload", [["Enter"], "c", 7, None])
def test_key_route_ignores_non_object_body(client, payload):
    client.post("/api/letter", json={"letter": "c"})
    response = client.post("/api/key", json=payload)
    assert response.status_code == 200
    data = response.get_json()
    assert data["state"]["guesses"][0] == "c"
    assert data["message"] is None


def test_new_round(client):
    send_word(client, "slate")
    data = client.post("/api/new-round").get_json()
    assert data["state"]["currentRow"] == 0
    assert data["state"]["guesses"] == [""] * ROWS
    assert data["outcome"] is None


def test_state_survives_app_restart(app, tmp_path):
    client = app.test_client()
    send_word(client, "slate")
    client.post("/api/letter", json={"letter": "c"})

    restarted = create_app({
        "TESTING": True,
        "STORAGE_BACKEND": "sql",
        "DATABASE_URL": f"sqlite:///{tmp_path / 'app.db'}",
    })
    data = restarted.test_client().get("/api/state").get_json()
    assert data["state"]["guesses"][:2] == ["slate", "c"]
    assert data["state"]["currentRow"] == 1


def test_word_list_unavailable_is_503():
    app = create_app({"TESTING": True}, store=GameStore(FlakyBackend()))
    client = app.test_client()
    with mock.patch("word_source.requests.get", side_effect=requests.ConnectionError("down")) as get:
        response = client.post("/api/letter", json={"letter": "a"})
        assert response.status_code == 503
        assert response.get_json()["error"] == "Word list unavailable"
        # the next request tries again
        client.get("/api/state")
    assert get.call_count == 2
    assert client.get("/health").get_json()["word_list_loaded"] is False
