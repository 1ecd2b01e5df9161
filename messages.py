"""
PocketPong
Copyright (C) 2024 thiccaxe

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published
by the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

import json
from typing import Optional, Union

from voluptuous import Schema, Required, Optional as OptionalKey, In, ALLOW_EXTRA
import voluptuous.error

DIRECTIONS = ("left", "right", "stop")
ROLES = ("player1", "player2")


class MalformedMessage(Exception): pass


def _message(message_type: str, fields: Optional[dict] = None) -> Schema:
    schema = {Required("type"): message_type}
    schema.update(fields or {})
    return Schema(schema, extra=ALLOW_EXTRA)


# controller / screen -> server
CLIENT_SCHEMAS = {
    "register_screen": _message("register_screen", {OptionalKey("origin"): str}),
    "register_player": _message("register_player"),
    "move": _message("move", {Required("direction"): In(DIRECTIONS)}),
    "start_vs_ai": _message("start_vs_ai"),
    "restart_game": _message("restart_game"),
    "game_ended": _message("game_ended", {Required("winner"): In(ROLES)}),
    "wait_for_players": _message("wait_for_players"),
}

# server -> screen
SCREEN_SCHEMAS = {
    "qr_code": _message("qr_code", {Required("qrCode"): str, Required("url"): str}),
    "hide_qr": _message("hide_qr"),
    "show_qr": _message("show_qr"),
    "start_game": _message("start_game"),
    "enable_ai": _message("enable_ai"),
    "player_move": _message("player_move", {
        Required("player"): In(ROLES),
        Required("direction"): In(DIRECTIONS),
    }),
    "player_disconnected": _message("player_disconnected", {Required("player"): In(ROLES)}),
    "all_players_disconnected": _message("all_players_disconnected"),
    "restart_game": _message("restart_game", {OptionalKey("aiMode", default=False): bool}),
    "player1_connected": _message("player1_connected"),
}

# server -> controller
PLAYER_SCHEMAS = {
    "assigned": _message("assigned", {Required("player"): In(ROLES)}),
    "error": _message("error", {Required("message"): str}),
    "game_ended": _message("game_ended", {Required("winner"): In(ROLES)}),
    "game_restarted": _message("game_restarted"),
    "game_start": _message("game_start"),
}


def decode(raw: Union[str, bytes], schemas: dict) -> dict:
    try:
        packet = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedMessage("Message is not JSON") from e
    except RecursionError as e:
        raise MalformedMessage("Message is nested too deeply") from e

    if not isinstance(packet, dict) or not isinstance(packet.get("type"), str):
        raise MalformedMessage("Message has no type")

    schema = schemas.get(packet["type"])
    if schema is None:
        raise MalformedMessage(f"Unknown message type {packet['type']!r}")

    try:
        return schema(packet)
    except voluptuous.error.Invalid as e:
        raise MalformedMessage(f"Invalid {packet['type']} message: {e}") from e


def encode(packet: dict) -> str:
    return json.dumps(packet)


def qr_code(qr_code_data: str, url: str) -> dict:
    return {"type": "qr_code", "qrCode": qr_code_data, "url": url}


def player_move(player: str, direction: str) -> dict:
    return {"type": "player_move", "player": player, "direction": direction}


def player_disconnected(player: str) -> dict:
    return {"type": "player_disconnected", "player": player}


def restart_game(ai_mode: bool) -> dict:
    return {"type": "restart_game", "aiMode": ai_mode}


def assigned(player: str) -> dict:
    return {"type": "assigned", "player": player}


def error(message: str) -> dict:
    return {"type": "error", "message": message}


def game_ended(winner: str) -> dict:
    return {"type": "game_ended", "winner": winner}


def simple(message_type: str) -> dict:
    """hide_qr, show_qr, start_game, enable_ai, all_players_disconnected, ..."""
    return {"type": message_type}
