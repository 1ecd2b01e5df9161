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

import asyncio
import logging
import os
import random
from typing import Callable, Optional, Protocol, Union

import websockets.exceptions
from rich.live import Live
from websockets.asyncio.client import connect

import messages
from config import Config, ConfigurationLoadError
from logger import console, setup_logging
from messages import MalformedMessage, SCREEN_SCHEMAS
from pong_core.ai import init_ai
from pong_core.loop import GameLoop, Scheduler, Renderer, AsyncioFrameScheduler, LoopPhase
from pong_core.physics import apply_player_move, reset_game_state
from pong_core.state import create_initial_state, Side, Score
from screen_render import TerminalDisplay

WAITING_STATUS = "Waiting for players..."
PLAYER1_STATUS = "Player 1 connected. Waiting for player 2..."
PLAYER2_STATUS = "Player 2 connected. Waiting for player 1..."

# who is still at the table once a role leaves
STATUS_AFTER_DISCONNECT = {
    "player1": PLAYER2_STATUS,
    "player2": PLAYER1_STATUS,
}


class Display(Protocol):
    def table_renderer(self) -> Renderer: ...

    def show_lobby(self, status: str, url: str, show_qr: bool) -> None: ...


class Screen:
    """
    The shared display. Owns the GameState; the server only ever talks to it through
    screen-bound messages, and it only answers with game_ended.
    """

    def __init__(self,
                 send: Callable[[dict], None],
                 scheduler: Scheduler,
                 display: Optional[Display] = None,
                 start_delay: float = 0.1,
                 rng: random.Random = random):
        self.game = create_initial_state()
        self.status = WAITING_STATUS
        self.join_url = ""
        self.qr_code = ""
        self.show_qr = True
        self._send = send
        self._display = display
        self._start_delay = start_delay
        self._rng = rng
        self._loop = GameLoop(
            self.game,
            scheduler,
            self._table_renderer,
            on_score=self._on_score,
            on_winner=self._on_winner,
            rng=rng,
        )
        self._packet_handlers = {
            "qr_code": self._handle_qr_code,
            "hide_qr": self._handle_hide_qr,
            "show_qr": self._handle_reset,
            "player1_connected": self._handle_player1_connected,
            "start_game": self._handle_start_game,
            "enable_ai": self._handle_enable_ai,
            "player_move": self._handle_player_move,
            "player_disconnected": self._handle_player_disconnected,
            "all_players_disconnected": self._handle_reset,
            "restart_game": self._handle_restart_game,
        }

    @property
    def loop_phase(self) -> LoopPhase:
        return self._loop.phase

    def handle_raw(self, raw: Union[str, bytes]) -> None:
        try:
            packet = messages.decode(raw, SCREEN_SCHEMAS)
        except MalformedMessage as e:
            logging.warning(f"Dropping message from server: {e}")
            return
        self.handle(packet)

    def handle(self, packet: dict) -> None:
        logging.debug(f"Screen received {packet}")
        self._packet_handlers[packet["type"]](packet)

    def stop(self) -> None:
        self._loop.stop()

    def _table_renderer(self) -> Optional[Renderer]:
        if self._display is None:
            return None
        return self._display.table_renderer()

    def _refresh_lobby(self) -> None:
        if self._display is not None and self._loop.phase is LoopPhase.IDLE:
            self._display.show_lobby(self.status, self.join_url, self.show_qr)

    def _on_score(self, score: Score) -> None:
        logging.info(f"Score {score.player1} - {score.player2}")

    def _on_winner(self, winner: Side) -> None:
        self.status = f"{winner.value} wins!"
        self._send(messages.game_ended(winner.value))

    def _handle_qr_code(self, packet: dict) -> None:
        self.qr_code = packet["qrCode"]
        self.join_url = packet["url"]
        self._refresh_lobby()

    def _handle_hide_qr(self, packet: dict) -> None:
        self.show_qr = False
        self._refresh_lobby()

    def _handle_player1_connected(self, packet: dict) -> None:
        self.status = PLAYER1_STATUS
        self._refresh_lobby()

    def _handle_enable_ai(self, packet: dict) -> None:
        self.game.ai_enabled = True
        init_ai(self.game, self._rng)

    def _begin_round(self, ai_enabled: bool) -> None:
        reset_game_state(self.game)
        self.game.running = True
        self.game.ai_enabled = ai_enabled
        if ai_enabled:
            init_ai(self.game, self._rng)
        self.status = ""
        self.show_qr = False

    def _handle_start_game(self, packet: dict) -> None:
        self._begin_round(self.game.ai_enabled)
        # give the display a moment to swap from the lobby to the table
        self._loop.start(delay=self._start_delay)

    def _handle_restart_game(self, packet: dict) -> None:
        self._begin_round(packet["aiMode"])
        self._loop.start()

    def _handle_player_move(self, packet: dict) -> None:
        side = Side(packet["player"])
        if apply_player_move(self.game, side, packet["direction"], self._rng):
            logging.debug(f"{side.value} served")

    def _handle_player_disconnected(self, packet: dict) -> None:
        self._return_to_lobby(STATUS_AFTER_DISCONNECT[packet["player"]])

    def _handle_reset(self, packet: dict) -> None:
        self._return_to_lobby(WAITING_STATUS)

    def _return_to_lobby(self, status: str) -> None:
        self._loop.stop()
        reset_game_state(self.game)
        self.game.running = False
        self.game.ai_enabled = False
        self.status = status
        self.show_qr = True
        self._refresh_lobby()


class ScreenClient:

    def __init__(self, config):
        self._config = config
        self._outgoing: asyncio.Queue[dict] = asyncio.Queue()

    async def _write(self, websocket):
        while True:
            packet = await self._outgoing.get()
            try:
                await websocket.send(messages.encode(packet))
            except websockets.exceptions.ConnectionClosed:
                logging.debug(f"Could not deliver {packet['type']}, server is gone")
                return

    async def run(self):
        screen_config = self._config["screen"]
        loop = asyncio.get_running_loop()
        scheduler = AsyncioFrameScheduler(loop, screen_config["frame_rate"])

        with Live(console=console, refresh_per_second=screen_config["frame_rate"]) as live:
            screen = Screen(
                self._outgoing.put_nowait,
                scheduler,
                TerminalDisplay(live),
                start_delay=screen_config["start_delay"],
            )
            screen.handle(messages.simple("show_qr"))

            logging.info(f"Connecting to {screen_config['server_url']}")
            async with connect(screen_config["server_url"]) as websocket:
                await websocket.send(messages.encode(messages.simple("register_screen")))
                writer = asyncio.create_task(self._write(websocket))
                try:
                    async for raw in websocket:
                        screen.handle_raw(raw)
                except websockets.exceptions.ConnectionClosed:
                    logging.warning("Lost connection to the server")
                finally:
                    writer.cancel()
                    screen.stop()


async def main():
    config = Config(os.environ.get("PONG_CONFIG", "./config.toml"))

    try:
        await config.initialize()
    except ConfigurationLoadError:
        logging.error("Could not load configuration. Exiting")
        return

    try:
        await ScreenClient(config.config).run()
    except OSError as e:
        logging.error(f"Could not reach the server: {e}")


def run():
    setup_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.info("Bye")


if __name__ == "__main__":
    run()
