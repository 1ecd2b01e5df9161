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
import enum
from typing import Optional

from pong_core.constants import (
    TABLE_WIDTH,
    TABLE_HEIGHT,
    BALL_RADIUS,
    PADDLE_WIDTH,
    PADDLE_HEIGHT,
    PADDLE_Y_TOP,
    PADDLE_Y_BOTTOM,
)


class Side(str, enum.Enum):
    """
    role identifier of a player slot, also used as the wire value
    player1 defends the top edge, player2 the bottom edge
    """
    PLAYER1 = "player1"
    PLAYER2 = "player2"

    @property
    def other(self) -> "Side":
        return Side.PLAYER2 if self is Side.PLAYER1 else Side.PLAYER1


@dataclasses.dataclass
class Ball:
    x: float
    y: float
    dx: float
    dy: float
    radius: float = BALL_RADIUS

    def __post_init__(self):
        if self.radius <= 0:
            raise ValueError(f"Ball radius must be positive, got {self.radius}")


@dataclasses.dataclass
class Paddle:
    x: float
    y: float
    width: float = PADDLE_WIDTH
    height: float = PADDLE_HEIGHT
    speed: float = 0


@dataclasses.dataclass
class Score:
    player1: int = 0
    player2: int = 0

    def get(self, side: Side) -> int:
        return getattr(self, side.value)

    def increment(self, side: Side) -> int:
        value = self.get(side) + 1
        setattr(self, side.value, value)
        return value

    def as_dict(self) -> dict:
        return {"player1": self.player1, "player2": self.player2}


@dataclasses.dataclass
class GameState:
    ball: Ball
    paddle1: Paddle
    paddle2: Paddle
    score: Score
    running: bool = False
    ball_started: bool = False
    ai_enabled: bool = False
    ai_miss_counter: int = 0
    ai_miss_threshold: int = 0
    winner: Optional[Side] = None
    # vertical component of the next serve; 0 means any side may serve in a random direction
    serve_dy: float = 0

    def paddle_for(self, side: Side) -> Paddle:
        return self.paddle1 if side is Side.PLAYER1 else self.paddle2


def centered_paddle_x() -> float:
    return (TABLE_WIDTH - PADDLE_WIDTH) / 2


def create_initial_state() -> GameState:
    return GameState(
        ball=Ball(x=TABLE_WIDTH / 2, y=TABLE_HEIGHT / 2, dx=0, dy=0),
        paddle1=Paddle(x=centered_paddle_x(), y=PADDLE_Y_TOP),
        paddle2=Paddle(x=centered_paddle_x(), y=PADDLE_Y_BOTTOM),
        score=Score(),
    )
