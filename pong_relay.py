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

import dataclasses
import logging
from typing import Callable, Optional, Union

import messages
from join_code import JoinCodeError
from messages import MalformedMessage, CLIENT_SCHEMAS
from pong_core.state import Side
from server_data import Session, SessionPhase

"""
Everything the server decides happens here. The relay never touches the network: it
takes the session and one transport event, updates the session, and returns the
packets the transport should deliver.
"""

GAME_FULL = "Game is full"


@dataclasses.dataclass(frozen=True)
class Connected:
    connection_id: str


@dataclasses.dataclass(frozen=True)
class MessageReceived:
    connection_id: str
    raw: Union[str, bytes]


@dataclasses.dataclass(frozen=True)
class Disconnected:
    connection_id: str


Event = Union[Connected, MessageReceived, Disconnected]


@dataclasses.dataclass(frozen=True)
class Outbound:
    connection_id: str
    packet: dict


class SessionRelay:

    def __init__(self, join_url: Callable[[Optional[str]], str], qr_encoder: Callable[[str], str]):
        self._join_url = join_url
        self._qr_encoder = qr_encoder
        self._packet_handlers = {
            "register_screen": self._register_screen,
            "register_player": self._register_player,
            "start_vs_ai": self._start_vs_ai,
            "move": self._move,
            "game_ended": self._game_ended,
            "restart_game": self._restart_game,
            "wait_for_players": self._wait_for_players,
        }

    def handle(self, session: Session, event: Event) -> list[Outbound]:
        if isinstance(event, Connected):
            logging.debug(f"Connection {event.connection_id} opened")
            return []
        if isinstance(event, Disconnected):
            return self._disconnected(session, event.connection_id)
        if isinstance(event, MessageReceived):
            try:
                packet = messages.decode(event.raw, CLIENT_SCHEMAS)
            except MalformedMessage as e:
                logging.warning(f"Dropping message from {event.connection_id}: {e}")
                return []
            logging.debug(f"Received message from {event.connection_id}: {packet}")
            return self._packet_handlers[packet["type"]](session, event.connection_id, packet)

        logging.warning(f"Unknown transport event {event!r}")
        return []

    @staticmethod
    def _to_screen(session: Session, packet: dict) -> list[Outbound]:
        if session.screen is None:
            return []
        return [Outbound(session.screen, packet)]

    @staticmethod
    def _to_players(session: Session, packet: dict) -> list[Outbound]:
        return [Outbound(player, dict(packet)) for player in session.players()]

    @staticmethod
    def _is_participant(session: Session, connection_id: str) -> bool:
        return connection_id == session.screen or session.role_of(connection_id) is not None

    def _register_screen(self, session: Session, connection_id: str, packet: dict) -> list[Outbound]:
        if session.screen is not None and session.screen != connection_id:
            logging.info(f"Screen {connection_id} replaces screen {session.screen}")
        session.screen = connection_id

        url = self._join_url(packet.get("origin"))
        try:
            qr_code_data = self._qr_encoder(url)
        except JoinCodeError as e:
            logging.warning(f"Could not create a QR code for {url}: {e}")
            qr_code_data = ""

        logging.info(f"Screen registered, controllers join at {url}")
        return [Outbound(connection_id, messages.qr_code(qr_code_data, url))]

    def _register_player(self, session: Session, connection_id: str, packet: dict) -> list[Outbound]:
        current_role = session.role_of(connection_id)
        if current_role is not None:
            return [Outbound(connection_id, messages.assigned(current_role.value))]

        if connection_id == session.screen:
            logging.debug(f"Screen {connection_id} tried to register as a player")
            return []

        side = session.open_slot()
        if side is None:
            logging.info(f"Rejected player {connection_id}: game is full")
            return [Outbound(connection_id, messages.error(GAME_FULL))]

        session.slots[side] = connection_id
        logging.info(f"{connection_id} assigned to {side.value}")
        out = [Outbound(connection_id, messages.assigned(side.value))]

        opponent = session.slots[side.other]
        if opponent is not None:
            session.phase = SessionPhase.ACTIVE
            out += self._to_screen(session, messages.simple("hide_qr"))
            out += self._to_screen(session, messages.simple("start_game"))
            out.append(Outbound(opponent, messages.simple("game_start")))
        elif side is Side.PLAYER1:
            session.phase = SessionPhase.MODE_SELECTION
            out += self._to_screen(session, messages.simple("player1_connected"))

        return out

    def _start_vs_ai(self, session: Session, connection_id: str, packet: dict) -> list[Outbound]:
        human = session.slots[Side.PLAYER1]
        if session.role_of(connection_id) is None or human is None:
            logging.debug(f"Ignoring start_vs_ai from {connection_id}: no player1")
            return []
        if session.slots[Side.PLAYER2] is not None:
            logging.debug(f"Ignoring start_vs_ai from {connection_id}: player2 is human")
            return []
        if session.ai_mode:
            logging.debug(f"Ignoring start_vs_ai from {connection_id}: already playing the computer")
            return []

        session.ai_mode = True
        session.phase = SessionPhase.ACTIVE
        logging.info("Starting a game against the computer")
        out = self._to_screen(session, messages.simple("enable_ai"))
        out += self._to_screen(session, messages.simple("hide_qr"))
        out += self._to_screen(session, messages.simple("start_game"))
        out.append(Outbound(human, messages.simple("game_start")))
        return out

    def _move(self, session: Session, connection_id: str, packet: dict) -> list[Outbound]:
        role = session.role_of(connection_id)
        if role is None:
            logging.debug(f"Ignoring move from unassigned connection {connection_id}")
            return []
        return self._to_screen(session, messages.player_move(role.value, packet["direction"]))

    def _game_ended(self, session: Session, connection_id: str, packet: dict) -> list[Outbound]:
        if connection_id != session.screen:
            logging.debug(f"Ignoring game_ended from non-screen connection {connection_id}")
            return []
        session.phase = SessionPhase.ENDED
        logging.info(f"Game over, {packet['winner']} wins")
        return self._to_players(session, messages.game_ended(packet["winner"]))

    def _restart_game(self, session: Session, connection_id: str, packet: dict) -> list[Outbound]:
        if not self._is_participant(session, connection_id):
            logging.debug(f"Ignoring restart_game from {connection_id}")
            return []
        if not session.ai_mode and len(session.players()) < 2:
            logging.debug("Ignoring restart_game: not enough players")
            return []

        session.phase = SessionPhase.ACTIVE
        out = self._to_screen(session, messages.restart_game(session.ai_mode))
        out += self._to_players(session, messages.simple("game_restarted"))
        return out

    def _wait_for_players(self, session: Session, connection_id: str, packet: dict) -> list[Outbound]:
        if not self._is_participant(session, connection_id):
            logging.debug(f"Ignoring wait_for_players from {connection_id}")
            return []

        session.ai_mode = False
        session.phase = SessionPhase.WAITING
        out = self._to_screen(session, messages.simple("show_qr"))
        out += self._to_players(session, messages.simple("game_restarted"))
        return out

    def _disconnected(self, session: Session, connection_id: str) -> list[Outbound]:
        out = []

        role = session.role_of(connection_id)
        if role is not None:
            session.slots[role] = None
            logging.info(f"{role.value} ({connection_id}) disconnected")
            out += self._to_screen(session, messages.player_disconnected(role.value))

            if session.all_slots_empty():
                session.ai_mode = False
                session.phase = SessionPhase.WAITING
                out += self._to_screen(session, messages.simple("all_players_disconnected"))
            else:
                session.phase = SessionPhase.MODE_SELECTION

        if connection_id == session.screen:
            logging.info(f"Screen ({connection_id}) disconnected")
            session.screen = None
            session.ai_mode = False
            session.phase = SessionPhase.MODE_SELECTION if session.players() else SessionPhase.WAITING

        return out
