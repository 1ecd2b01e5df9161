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

import random

from pong_core.constants import (
    TABLE_HEIGHT,
    PADDLE_AI_SPEED,
    PADDLE_AI_DEAD_ZONE,
    AI_MISS_MIN,
    AI_MISS_RANGE,
)
from pong_core.physics import can_launch, launch_ball
from pong_core.state import GameState, Side

"""
The computer always plays player2 (bottom paddle).

It tracks the ball for a few ticks, then stalls until the ball is back on its own
half, which is what makes it beatable.
"""

AI_SIDE = Side.PLAYER2


def draw_miss_threshold(rng: random.Random = random) -> int:
    return rng.randrange(AI_MISS_RANGE) + AI_MISS_MIN


def init_ai(game: GameState, rng: random.Random = random) -> None:
    game.ai_miss_counter = 0
    game.ai_miss_threshold = draw_miss_threshold(rng)


def steer(game: GameState) -> float:
    paddle = game.paddle_for(AI_SIDE)
    diff = game.ball.x - (paddle.x + paddle.width / 2)
    if abs(diff) <= PADDLE_AI_DEAD_ZONE:
        return 0
    return PADDLE_AI_SPEED if diff > 0 else -PADDLE_AI_SPEED


def update_ai(game: GameState, rng: random.Random = random) -> None:
    paddle = game.paddle_for(AI_SIDE)
    game.ai_miss_counter += 1

    if game.ai_miss_counter >= game.ai_miss_threshold:
        paddle.speed = 0
        if game.ball.y > TABLE_HEIGHT / 2:
            init_ai(game, rng)
    else:
        paddle.speed = steer(game)

    # serves when it conceded the last point, like a human player2 would
    if game.serve_dy != 0 and can_launch(game, AI_SIDE):
        launch_ball(game, rng)
