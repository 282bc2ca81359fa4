# frontend/api.py

import logging

from flask import Blueprint, current_app, jsonify, request

from backend.game import GameSession
from backend.replay import GameNotFoundError, load_replay
from backend.storage import StorageError
from backend.utils import recommended_mines

logger = logging.getLogger(__name__)

api_blueprint = Blueprint("api", __name__)

game = None


def _store():
    return current_app.config["GAME_STORE"]


def _settings():
    return current_app.config["MINESWEEPER"]


def _save_finished_game():
    # A StorageError leaves record_id unset so the caller can try again.
    game.record_id = _store().store(game.create_record())
    return game.record_id


@api_blueprint.errorhandler(StorageError)
def storage_failed(exc):
    return jsonify({"error": exc.reason}), 500


@api_blueprint.errorhandler(GameNotFoundError)
def game_not_found(exc):
    return jsonify({"error": str(exc)}), 404


@api_blueprint.route("/new_game", methods=["POST"])
def new_game():
    global game
    data = request.get_json(silent=True) or {}
    settings = _settings()
    try:
        size = int(data.get("size", settings["board"]["default_size"]))
        num_mines = data.get("num_mines")
        num_mines = int(num_mines) if num_mines is not None else recommended_mines(size, settings["board"]["mine_ratio"])
    except (TypeError, ValueError):
        return jsonify({"error": "Invalid input"}), 400
    player = str(data.get("player", ""))

    # Global session (one active game per server)
    game = GameSession(
        size=size,
        num_mines=num_mines,
        player=player,
        log_noop_opens=settings["game"]["log_noop_opens"],
    )
    return jsonify(game.get_state())


@api_blueprint.route("/step", methods=["POST"])
def step():
    if game is None:
        return jsonify({"error": "No game in progress"}), 409

    data = request.get_json(silent=True) or {}
    action = data.get("action")
    row = data.get("row")
    col = data.get("col")

    if action not in {"reveal", "flag"} or row is None or col is None:
        return jsonify({"error": "Invalid input"}), 400

    try:
        result = game.step(action, row, col)
    except ValueError:
        return jsonify({"error": "Invalid input"}), 400

    if game.game_over and game.record_id is None:
        result["game_id"] = _save_finished_game()
        result["solution"] = game.reveal_full_board()
    return jsonify(result)


@api_blueprint.route("/save", methods=["POST"])
def save():
    """Store the finished game if an earlier attempt failed; returns its id."""
    if game is None or not game.game_over:
        return jsonify({"error": "No finished game to save"}), 409
    if game.record_id is None:
        _save_finished_game()
    return jsonify({"game_id": game.record_id})


@api_blueprint.route("/state", methods=["GET"])
def get_state():
    if game is None:
        return jsonify({"error": "No game in progress"}), 409
    return jsonify(game.get_state())


@api_blueprint.route("/games", methods=["GET"])
def list_games():
    return jsonify([summary.to_dict() for summary in _store().list()])


@api_blueprint.route("/games/<int:game_id>", methods=["GET"])
def get_game(game_id):
    record = _store().fetch(game_id)
    if record is None:
        raise GameNotFoundError(game_id)
    return jsonify(record.to_dict())


@api_blueprint.route("/games/<int:game_id>", methods=["DELETE"])
def delete_game(game_id):
    if not _store().delete(game_id):
        raise GameNotFoundError(game_id)
    return jsonify({"deleted": True})


@api_blueprint.route("/games/<int:game_id>/replay", methods=["GET"])
def replay_game(game_id):
    replay = load_replay(_store(), game_id)
    frames = []

    for move, board, remaining in replay.frames():
        frames.append({
            "move": move.to_dict(),
            "state": {
                "board": board,
                "remaining_mines": int(remaining),
            },
        })

    return jsonify({
        "game": replay.record.summary().to_dict(),
        "frames": frames,
        "final": replay.board.visible_state(),
    })
