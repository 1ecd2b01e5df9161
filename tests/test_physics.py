"""Tests for ball and paddle physics."""

import pytest

from pong_core.constants import (
    TABLE_WIDTH,
    TABLE_HEIGHT,
    BALL_RADIUS,
    BALL_INITIAL_SPEED,
    BALL_ACCELERATION,
    PADDLE_WIDTH,
    PADDLE_HEIGHT,
    PADDLE_Y_TOP,
    PADDLE_Y_BOTTOM,
    PADDLE_PLAYER_SPEED,
    WINNING_SCORE,
)
from pong_core.physics import (
    advance_paddle,
    advance_ball,
    wall_bounce,
    paddle_collision,
    check_out_of_bounds,
    random_launch_component,
    reset_ball,
    apply_score,
    can_launch,
    launch_ball,
    apply_player_move,
    reset_game_state,
)
from pong_core.state import Ball, Paddle, Side, create_initial_state


def test_initial_state():
    game = create_initial_state()

    assert (game.ball.x, game.ball.y) == (TABLE_WIDTH / 2, TABLE_HEIGHT / 2)
    assert (game.ball.dx, game.ball.dy) == (0, 0)
    assert game.ball.radius == BALL_RADIUS
    assert game.paddle1.y == PADDLE_Y_TOP
    assert game.paddle2.y == PADDLE_Y_BOTTOM
    assert game.paddle1.x == game.paddle2.x == (TABLE_WIDTH - PADDLE_WIDTH) / 2
    assert game.score.as_dict() == {"player1": 0, "player2": 0}
    assert not game.running
    assert not game.ball_started
    assert not game.ai_enabled
    assert game.winner is None


def test_ball_radius_must_be_positive():
    with pytest.raises(ValueError):
        Ball(x=0, y=0, dx=0, dy=0, radius=0)


# =============================================================================
# Paddles
# =============================================================================

@pytest.mark.parametrize("x", [-500, -1, 0, 350, TABLE_WIDTH - PADDLE_WIDTH, TABLE_WIDTH, 5000])
@pytest.mark.parametrize("speed", [-PADDLE_PLAYER_SPEED, 0, PADDLE_PLAYER_SPEED, 1000])
def test_advance_paddle_stays_on_table(x, speed):
    paddle = Paddle(x=x, y=PADDLE_Y_TOP, speed=speed)

    advance_paddle(paddle)

    assert 0 <= paddle.x <= TABLE_WIDTH - PADDLE_WIDTH


def test_advance_paddle_moves_by_speed():
    paddle = Paddle(x=100, y=PADDLE_Y_TOP, speed=PADDLE_PLAYER_SPEED)
    advance_paddle(paddle)
    assert paddle.x == 100 + PADDLE_PLAYER_SPEED


def test_advance_paddle_clamps_instead_of_reflecting():
    paddle = Paddle(x=2, y=PADDLE_Y_TOP, speed=-PADDLE_PLAYER_SPEED)
    advance_paddle(paddle)
    assert paddle.x == 0
    assert paddle.speed == -PADDLE_PLAYER_SPEED


# =============================================================================
# Ball movement and walls
# =============================================================================

def test_advance_ball_only_when_started():
    ball = Ball(x=400, y=300, dx=3, dy=-3)

    advance_ball(ball, started=False)
    assert (ball.x, ball.y) == (400, 300)

    advance_ball(ball, started=True)
    assert (ball.x, ball.y) == (403, 297)


def test_wall_bounce_left():
    ball = Ball(x=5, y=300, dx=-3, dy=2)

    assert wall_bounce(ball)

    assert ball.x == BALL_RADIUS
    assert ball.dx == 3
    assert ball.dy == 2


def test_wall_bounce_right():
    ball = Ball(x=TABLE_WIDTH - 2, y=300, dx=4, dy=-2)

    assert wall_bounce(ball)

    assert ball.x == TABLE_WIDTH - BALL_RADIUS
    assert ball.dx == -4
    assert ball.dy == -2


def test_wall_bounce_inside_table_changes_nothing():
    ball = Ball(x=400, y=300, dx=-3, dy=3)

    for _ in range(3):
        assert not wall_bounce(ball)

    assert (ball.x, ball.y, ball.dx, ball.dy) == (400, 300, -3, 3)


# =============================================================================
# Paddle collisions
# =============================================================================

def test_bottom_paddle_reflects_and_accelerates():
    paddle = Paddle(x=350, y=PADDLE_Y_BOTTOM)
    ball = Ball(x=400, y=PADDLE_Y_BOTTOM - 4, dx=2, dy=3)

    assert paddle_collision(ball, paddle, Side.PLAYER2)

    assert ball.y == PADDLE_Y_BOTTOM - BALL_RADIUS
    assert ball.dy == pytest.approx(-3 * BALL_ACCELERATION)
    assert ball.dx == pytest.approx(2 * BALL_ACCELERATION)


def test_top_paddle_reflects_and_accelerates():
    paddle = Paddle(x=350, y=PADDLE_Y_TOP)
    ball = Ball(x=400, y=PADDLE_Y_TOP + PADDLE_HEIGHT + 4, dx=-2, dy=-3)

    assert paddle_collision(ball, paddle, Side.PLAYER1)

    assert ball.y == PADDLE_Y_TOP + PADDLE_HEIGHT + BALL_RADIUS
    assert ball.dy == pytest.approx(3 * BALL_ACCELERATION)
    assert ball.dx == pytest.approx(-2 * BALL_ACCELERATION)


def test_collision_ignored_when_ball_moves_away():
    paddle = Paddle(x=350, y=PADDLE_Y_BOTTOM)
    ball = Ball(x=400, y=PADDLE_Y_BOTTOM - 4, dx=2, dy=-3)

    assert not paddle_collision(ball, paddle, Side.PLAYER2)

    assert (ball.y, ball.dx, ball.dy) == (PADDLE_Y_BOTTOM - 4, 2, -3)


def test_collision_does_not_retrigger_on_next_frame():
    paddle = Paddle(x=350, y=PADDLE_Y_BOTTOM)
    ball = Ball(x=400, y=PADDLE_Y_BOTTOM - 4, dx=0, dy=3)

    assert paddle_collision(ball, paddle, Side.PLAYER2)
    dy_after_hit = ball.dy

    advance_ball(ball, started=True)
    assert not paddle_collision(ball, paddle, Side.PLAYER2)
    assert ball.dy == dy_after_hit


def test_collision_needs_horizontal_overlap():
    paddle = Paddle(x=0, y=PADDLE_Y_BOTTOM)
    ball = Ball(x=600, y=PADDLE_Y_BOTTOM - 4, dx=0, dy=3)

    assert not paddle_collision(ball, paddle, Side.PLAYER2)


def test_speed_never_decreases_across_hits():
    paddle = Paddle(x=350, y=PADDLE_Y_BOTTOM)
    ball = Ball(x=400, y=PADDLE_Y_BOTTOM - 4, dx=3, dy=3)
    previous = abs(ball.dx) + abs(ball.dy)

    for _ in range(5):
        ball.y = PADDLE_Y_BOTTOM - 4
        ball.dy = abs(ball.dy)
        paddle_collision(ball, paddle, Side.PLAYER2)
        speed = abs(ball.dx) + abs(ball.dy)
        assert speed > previous
        previous = speed


# =============================================================================
# Out of bounds and scoring
# =============================================================================

def test_out_of_bounds_top_scores_for_player2():
    assert check_out_of_bounds(Ball(x=400, y=-BALL_RADIUS - 1, dx=0, dy=-3)) is Side.PLAYER2


def test_out_of_bounds_bottom_scores_for_player1():
    assert check_out_of_bounds(Ball(x=400, y=TABLE_HEIGHT + BALL_RADIUS + 1, dx=0, dy=3)) is Side.PLAYER1


def test_partially_out_is_still_in_play():
    assert check_out_of_bounds(Ball(x=400, y=-2, dx=0, dy=-3)) is None
    assert check_out_of_bounds(Ball(x=400, y=TABLE_HEIGHT + 2, dx=0, dy=3)) is None
    assert check_out_of_bounds(Ball(x=-50, y=300, dx=-3, dy=0)) is None


def test_reset_ball_from_any_state(game):
    game.ball.x, game.ball.y, game.ball.dx, game.ball.dy = 12, 590, -7.5, 4.2
    game.ball_started = True
    game.serve_dy = 3

    reset_ball(game)

    assert (game.ball.x, game.ball.y) == (TABLE_WIDTH / 2, TABLE_HEIGHT / 2)
    assert (game.ball.dx, game.ball.dy) == (0, 0)
    assert not game.ball_started
    assert game.serve_dy == 0


def test_apply_score_increments_and_recenters(game):
    game.ball_started = True
    game.ball.y = TABLE_HEIGHT + 20

    apply_score(game, Side.PLAYER1)

    assert game.score.as_dict() == {"player1": 1, "player2": 0}
    assert (game.ball.x, game.ball.y) == (TABLE_WIDTH / 2, TABLE_HEIGHT / 2)
    assert (game.ball.dx, game.ball.dy) == (0, 0)
    assert not game.ball_started
    assert game.running
    assert game.winner is None


def test_serve_after_point_heads_towards_scorer(game):
    apply_score(game, Side.PLAYER1)
    assert game.serve_dy == -BALL_INITIAL_SPEED

    apply_score(game, Side.PLAYER2)
    assert game.serve_dy == BALL_INITIAL_SPEED


def test_reaching_winning_score_ends_round(game):
    game.score.player2 = WINNING_SCORE - 1
    game.ball_started = True

    apply_score(game, Side.PLAYER2)

    assert game.score.player2 == WINNING_SCORE
    assert game.winner is Side.PLAYER2
    assert not game.running
    assert not game.ball_started
    assert not can_launch(game, Side.PLAYER1)


def test_score_never_exceeds_winning_score(game):
    game.score.player1 = WINNING_SCORE - 1
    apply_score(game, Side.PLAYER1)

    apply_score(game, Side.PLAYER1)
    apply_score(game, Side.PLAYER2)

    assert game.score.as_dict() == {"player1": WINNING_SCORE, "player2": 0}
    assert game.winner is Side.PLAYER1
    assert not game.running


def test_winner_is_first_side_to_reach_threshold(game):
    for _ in range(WINNING_SCORE - 1):
        apply_score(game, Side.PLAYER2)
    for _ in range(WINNING_SCORE - 1):
        apply_score(game, Side.PLAYER1)
        assert game.winner is None

    apply_score(game, Side.PLAYER1)

    assert game.winner is Side.PLAYER1
    assert game.score.as_dict() == {"player1": WINNING_SCORE, "player2": WINNING_SCORE - 1}


# =============================================================================
# Serving
# =============================================================================

def test_random_launch_component(rng):
    values = {random_launch_component(rng) for _ in range(100)}
    assert values == {BALL_INITIAL_SPEED, -BALL_INITIAL_SPEED}


def test_first_serve_can_come_from_either_side(game):
    assert can_launch(game, Side.PLAYER1)
    assert can_launch(game, Side.PLAYER2)


def test_only_conceding_side_serves_after_a_point(game):
    apply_score(game, Side.PLAYER1)

    assert not can_launch(game, Side.PLAYER1)
    assert can_launch(game, Side.PLAYER2)


def test_launch_uses_pending_serve(game, rng):
    apply_score(game, Side.PLAYER2)

    launch_ball(game, rng)

    assert game.ball_started
    assert game.ball.dy == BALL_INITIAL_SPEED
    assert abs(game.ball.dx) == BALL_INITIAL_SPEED
    assert game.serve_dy == 0


def test_no_launch_while_round_not_running():
    game = create_initial_state()
    assert not can_launch(game, Side.PLAYER1)


def test_player_move_sets_speed(game, rng):
    game.ball_started = True

    apply_player_move(game, Side.PLAYER1, "left", rng)
    assert game.paddle1.speed == -PADDLE_PLAYER_SPEED

    apply_player_move(game, Side.PLAYER2, "right", rng)
    assert game.paddle2.speed == PADDLE_PLAYER_SPEED

    apply_player_move(game, Side.PLAYER1, "stop", rng)
    assert game.paddle1.speed == 0


def test_stop_does_not_serve(game, rng):
    assert not apply_player_move(game, Side.PLAYER1, "stop", rng)
    assert not game.ball_started


def test_move_serves_frozen_ball(game, rng):
    assert apply_player_move(game, Side.PLAYER2, "left", rng)

    assert game.ball_started
    assert abs(game.ball.dx) == BALL_INITIAL_SPEED
    assert abs(game.ball.dy) == BALL_INITIAL_SPEED


def test_wrong_side_cannot_serve(game, rng):
    apply_score(game, Side.PLAYER2)

    assert not apply_player_move(game, Side.PLAYER2, "left", rng)
    assert not game.ball_started
    assert apply_player_move(game, Side.PLAYER1, "right", rng)


def test_reset_game_state(game):
    game.score.player1 = 4
    game.score.player2 = 7
    game.winner = Side.PLAYER2
    game.paddle1.x, game.paddle1.speed = 0, 8
    game.paddle2.x, game.paddle2.speed = 700, -8
    game.ai_miss_counter = 3
    game.ball_started = True

    reset_game_state(game)

    assert game.score.as_dict() == {"player1": 0, "player2": 0}
    assert game.winner is None
    assert game.paddle1.x == game.paddle2.x == (TABLE_WIDTH - PADDLE_WIDTH) / 2
    assert game.paddle1.speed == game.paddle2.speed == 0
    assert game.ai_miss_counter == 0
    assert not game.ball_started
