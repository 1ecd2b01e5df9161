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
import enum
import logging
import random
from typing import Callable, Optional, Protocol

from pong_core.ai import update_ai
from pong_core.physics import (
    advance_paddle,
    advance_ball,
    wall_bounce,
    paddle_collision,
    check_out_of_bounds,
    apply_score,
)
from pong_core.state import GameState, Side, Score


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule(self, callback: Callable[[], None], delay: Optional[float] = None) -> Cancellable:
        """Run `callback` once after `delay` seconds, or on the next frame when delay is None."""
        ...


class Renderer(Protocol):
    def draw(self, game: GameState) -> None: ...


class AsyncioFrameScheduler:
    """Fixed frame rate stand-in for a display refresh signal."""

    def __init__(self, loop: asyncio.AbstractEventLoop, frame_rate: int = 60):
        self._loop = loop
        self.frame_interval = 1 / frame_rate

    def schedule(self, callback: Callable[[], None], delay: Optional[float] = None) -> asyncio.TimerHandle:
        return self._loop.call_later(self.frame_interval if delay is None else delay, callback)


class LoopPhase(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


class GameLoop:
    """
    Drives one GameState frame by frame.

    Exactly one tick is ever pending: the next tick is only scheduled at the end of
    the previous one, and stop() cancels whatever is pending.
    """

    def __init__(self,
                 game: GameState,
                 scheduler: Scheduler,
                 renderer_factory: Callable[[], Optional[Renderer]],
                 on_score: Optional[Callable[[Score], None]] = None,
                 on_winner: Optional[Callable[[Side], None]] = None,
                 rng: random.Random = random):
        self._game = game
        self._scheduler = scheduler
        self._renderer_factory = renderer_factory
        self._renderer: Optional[Renderer] = None
        self._on_score = on_score
        self._on_winner = on_winner
        self._rng = rng
        self._pending: Optional[Cancellable] = None
        self.phase = LoopPhase.IDLE

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def start(self, delay: Optional[float] = None) -> None:
        self.stop()
        # the drawing surface may have been swapped while we were stopped
        self._renderer = self._renderer_factory()
        self.phase = LoopPhase.RUNNING
        self._pending = self._scheduler.schedule(self._run_tick, delay)
        logging.debug(f"Game loop started ({delay=})")

    def stop(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
            logging.debug("Game loop stopped")
        self.phase = LoopPhase.IDLE

    def _run_tick(self) -> None:
        self._pending = None
        self.tick()

    def tick(self) -> None:
        game = self._game
        if not game.running:
            self.phase = LoopPhase.ENDED if game.winner is not None else LoopPhase.IDLE
            return

        if game.ai_enabled:
            update_ai(game, self._rng)

        advance_paddle(game.paddle1)
        advance_paddle(game.paddle2)

        if game.ball_started:
            advance_ball(game.ball, game.ball_started)
            wall_bounce(game.ball)
            paddle_collision(game.ball, game.paddle1, Side.PLAYER1)
            paddle_collision(game.ball, game.paddle2, Side.PLAYER2)

            scorer = check_out_of_bounds(game.ball)
            if scorer is not None:
                apply_score(game, scorer)
                logging.debug(f"Point for {scorer.value}: {game.score.as_dict()}")
                if self._on_score is not None:
                    self._on_score(game.score)

        if self._renderer is not None:
            self._renderer.draw(game)

        if game.winner is not None:
            self.phase = LoopPhase.ENDED
            logging.info(f"{game.winner.value} wins {game.score.player1}-{game.score.player2}")
            if self._on_winner is not None:
                self._on_winner(game.winner)
            return

        self._pending = self._scheduler.schedule(self._run_tick)
