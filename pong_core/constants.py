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

TABLE_WIDTH = 800
TABLE_HEIGHT = 600
WINNING_SCORE = 11

BALL_RADIUS = 8
BALL_INITIAL_SPEED = 3
BALL_ACCELERATION = 1.01

PADDLE_WIDTH = 100
PADDLE_HEIGHT = 15
PADDLE_Y_TOP = 20
PADDLE_Y_BOTTOM = TABLE_HEIGHT - 20 - PADDLE_HEIGHT
PADDLE_PLAYER_SPEED = 8
PADDLE_AI_SPEED = 6
PADDLE_AI_DEAD_ZONE = 10

# miss threshold is drawn from [AI_MISS_MIN, AI_MISS_MIN + AI_MISS_RANGE)
AI_MISS_MIN = 3
AI_MISS_RANGE = 3
