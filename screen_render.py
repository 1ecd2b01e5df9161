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

import qrcode
from rich.console import Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from pong_core.constants import TABLE_WIDTH, TABLE_HEIGHT
from pong_core.state import GameState, Paddle

COLUMNS = 80
ROWS = 30

STYLES = {
    "line": "green dim",
    "player1": "bold red",
    "player2": "bold blue",
    "ball": "bold white",
}


def _column(x: float) -> int:
    return max(0, min(COLUMNS - 1, int(x * COLUMNS / TABLE_WIDTH)))


def _row(y: float) -> int:
    return max(0, min(ROWS - 1, int(y * ROWS / TABLE_HEIGHT)))


def _paint_paddle(grid: list, paddle: Paddle, style: str) -> None:
    row = _row(paddle.y + paddle.height / 2)
    for column in range(_column(paddle.x), _column(paddle.x + paddle.width) + 1):
        grid[row][column] = ("█", style)


def render_table(game: GameState) -> Panel:
    grid = [[(" ", None)] * COLUMNS for _ in range(ROWS)]
    grid[ROWS // 2] = [("╌", STYLES["line"])] * COLUMNS

    _paint_paddle(grid, game.paddle1, STYLES["player1"])
    _paint_paddle(grid, game.paddle2, STYLES["player2"])
    grid[_row(game.ball.y)][_column(game.ball.x)] = ("●", STYLES["ball"])

    text = Text()
    for index, row in enumerate(grid):
        for char, style in row:
            text.append(char, style=style)
        if index < ROWS - 1:
            text.append("\n")

    opponent = "computer" if game.ai_enabled else "player2"
    title = f"[red]player1 {game.score.player1}[/red] : [blue]{game.score.player2} {opponent}[/blue]"
    subtitle = None
    if game.winner is not None:
        subtitle = f"{game.winner.value} wins!"
    elif not game.ball_started:
        subtitle = "move to serve"
    return Panel(text, title=title, subtitle=subtitle, expand=False)


def qr_text(url: str) -> Text:
    """Two QR modules per character cell using half blocks."""
    qr = qrcode.QRCode(border=2)
    qr.add_data(url)
    qr.make(fit=True)
    matrix = qr.get_matrix()

    lines = []
    for y in range(0, len(matrix), 2):
        top = matrix[y]
        bottom = matrix[y + 1] if y + 1 < len(matrix) else [False] * len(top)
        lines.append("".join(
            "█" if t and b else "▀" if t else "▄" if b else " "
            for t, b in zip(top, bottom)
        ))
    return Text("\n".join(lines), style="black on white")


def render_lobby(status: str, url: str, show_qr: bool) -> Panel:
    parts = [Text(status, style="bold")]
    if show_qr and url:
        parts += [Text(""), qr_text(url), Text(""), Text(f"Open {url} on your phone", style="cyan")]
    return Panel(Group(*parts), title="PocketPong", expand=False)


class TableRenderer:

    def __init__(self, live: Live):
        self._live = live

    def draw(self, game: GameState) -> None:
        self._live.update(render_table(game))


class TerminalDisplay:

    def __init__(self, live: Live):
        self._live = live

    def table_renderer(self) -> TableRenderer:
        return TableRenderer(self._live)

    def show_lobby(self, status: str, url: str, show_qr: bool) -> None:
        self._live.update(render_lobby(status, url, show_qr))
