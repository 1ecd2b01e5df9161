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

"""
Table physics. Every function here only touches the objects passed to it.

The table is horizontal: paddles slide along x, the ball scores along y.
player1 guards the top edge (y = 0), player2 guards the bottom edge (y = TABLE_HEIGHT).
"""

import random
from typing import Optional

from pong_core.constants import (
    TABLE_WIDTH,
    TABLE_HEIGHT,
    BALL_INITIAL_SPEED,
    BALL_ACCELERATION,
    PADDLE_PLAYER_SPEED,
    WINNING_SCORE,
)
from pong_core.state import Ball, Paddle, GameState, Side, centered_paddle_x

DIRECTION_SPEEDS = {
    "left": -PADDLE_PLAYER_SPEED,
    "right": PADDLE_PLAYER_SPEED,
    "stop": 0,
}


def clamp_paddle(paddle: Paddle, table_width: float = TABLE_WIDTH) -> None:
    paddle.x = max(0, min(table_width - paddle.width, paddle.x))


def advance_paddle(paddle: Paddle, table_width: float = TABLE_WIDTH) -> None:
    paddle.x += paddle.speed
    clamp_paddle(paddle, table_width)


def advance_ball(ball: Ball, started: bool) -> None:
    if not started:
        return  # frozen at the centre until served
    ball.x += ball.dx
    ball.y += ball.dy


def wall_bounce(ball: Ball, table_width: float = TABLE_WIDTH) -> bool:
    if ball.x - ball.radius < 0:
        ball.x = ball.radius
        ball.dx = abs(ball.dx)
        return True
    if ball.x + ball.radius > table_width:
        ball.x = table_width - ball.radius
        ball.dx = -abs(ball.dx)
        return True
    return False


def paddle_collision(ball: Ball, paddle: Paddle, side: Side) -> bool:
    """
    Bounce the ball off the paddle guarding `side`.

    A hit only counts while the ball is travelling towards that paddle, so a ball that
    has already been reflected cannot bounce twice on the same contact. On a hit the
    ball is placed flush against the paddle face and both velocity components are
    scaled by BALL_ACCELERATION.
    """
    if not (ball.x + ball.radius > paddle.x and ball.x - ball.radius < paddle.x + paddle.width):
        return False

    if side is Side.PLAYER1:
        hit = (ball.dy < 0
               and ball.y - ball.radius < paddle.y + paddle.height
               and ball.y > paddle.y)
        if hit:
            ball.y = paddle.y + paddle.height + ball.radius
            ball.dy = abs(ball.dy) * BALL_ACCELERATION
    else:
        hit = (ball.dy > 0
               and ball.y + ball.radius > paddle.y
               and ball.y < paddle.y + paddle.height)
        if hit:
            ball.y = paddle.y - ball.radius
            ball.dy = -abs(ball.dy) * BALL_ACCELERATION

    if hit:
        ball.dx *= BALL_ACCELERATION
    return hit


def check_out_of_bounds(ball: Ball, table_height: float = TABLE_HEIGHT) -> Optional[Side]:
    """Return the side that scores once the ball has completely left the table, else None."""
    if ball.y + ball.radius < 0:
        return Side.PLAYER2
    if ball.y - ball.radius > table_height:
        return Side.PLAYER1
    return None


def random_launch_component(rng: random.Random = random) -> float:
    return rng.choice((1, -1)) * BALL_INITIAL_SPEED


def reset_ball(game: GameState) -> None:
    """Centre the ball, stop it and clear any pending serve."""
    game.ball.x = TABLE_WIDTH / 2
    game.ball.y = TABLE_HEIGHT / 2
    game.ball.dx = 0
    game.ball.dy = 0
    game.ball_started = False
    game.serve_dy = 0


def apply_score(game: GameState, scorer: Side) -> None:
    if game.winner is not None:
        return

    if game.score.increment(scorer) >= WINNING_SCORE:
        game.winner = scorer
        game.running = False
        game.ball_started = False
        return

    reset_ball(game)
    # serve travels towards the scorer, away from the side that conceded
    game.serve_dy = -BALL_INITIAL_SPEED if scorer is Side.PLAYER1 else BALL_INITIAL_SPEED


def can_launch(game: GameState, side: Side) -> bool:
    if not game.running or game.winner is not None or game.ball_started:
        return False
    if game.serve_dy == 0:
        return True
    if side is Side.PLAYER1:
        return game.serve_dy > 0
    return game.serve_dy < 0


def launch_ball(game: GameState, rng: random.Random = random) -> None:
    game.ball.dx = random_launch_component(rng)
    game.ball.dy = game.serve_dy if game.serve_dy != 0 else random_launch_component(rng)
    game.serve_dy = 0
    game.ball_started = True


def apply_player_move(game: GameState, side: Side, direction: str, rng: random.Random = random) -> bool:
    """Set the paddle velocity for a controller input. Returns True if the input served the ball."""
    game.paddle_for(side).speed = DIRECTION_SPEEDS[direction]
    if direction != "stop" and can_launch(game, side):
        launch_ball(game, rng)
        return True
    return False


def reset_game_state(game: GameState) -> None:
    """Zero the scores and put ball and paddles back to their starting positions."""
    game.score.player1 = 0
    game.score.player2 = 0
    game.winner = None
    game.ball_started = False
    game.ai_miss_counter = 0
    for paddle in (game.paddle1, game.paddle2):
        paddle.x = centered_paddle_x()
        paddle.speed = 0
    reset_ball(game)
