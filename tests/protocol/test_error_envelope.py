from __future__ import annotations

import warnings

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from checkers_arena.engine.errors import InvalidStateError
from checkers_arena.protocol.http.app import create_app


def test_error_envelope_for_http_exception() -> None:
    app: FastAPI = create_app()

    @app.get("/boom")
    def boom():  # type: ignore[no-redef]
        raise HTTPException(status_code=400, detail="oops")

    client = TestClient(app)
    r = client.get("/boom")
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "bad_request"
    assert err["message"] == "oops"
    assert err["type"] == "client_error"
    assert err["request_id"]


def test_engine_errors_map_to_400() -> None:
    app: FastAPI = create_app()

    @app.get("/broken")
    def broken():  # type: ignore[no-redef]
        raise InvalidStateError("piece 3 is not on the board")

    r = TestClient(app).get("/broken")
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "invalid_state"
    assert "piece 3" in err["message"]


def test_validation_errors_list_fields() -> None:
    client = TestClient(create_app())
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/move", json={})
    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "unprocessable_entity"
    assert any(fe["field"].endswith("move") for fe in err["field_errors"])


def test_validation_error_names_game_without_deprecated_status() -> None:
    client = TestClient(create_app())
    game_id = client.post("/api/games").json()["game_id"]
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        r = client.post(f"/api/games/{game_id}/move", json={"move": 7})
    assert r.status_code == 422
    assert r.json()["error"]["game_id"] == game_id
    assert not [w for w in caught if "HTTP_422" in str(w.message)]


def test_missing_game_error_carries_game_id() -> None:
    r = TestClient(create_app()).get("/api/games/nope/state")
    assert r.status_code == 404
    err = r.json()["error"]
    assert err["code"] == "not_found"
    assert err["game_id"] == "nope"
    assert "field_errors" not in err
