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
import dataclasses
import enum
from typing import Optional

from websockets.asyncio.server import ServerConnection

from pong_core.state import Side


class SessionPhase(enum.Enum):
    WAITING = "waiting"
    MODE_SELECTION = "mode_selection"
    ACTIVE = "active"
    ENDED = "ended"


@dataclasses.dataclass
class Session:
    """
    Who is bound to what. Connections are referred to by the id the transport gave them.
    Nothing here outlives the process.
    """
    screen: Optional[str] = None
    slots: dict[Side, Optional[str]] = dataclasses.field(
        default_factory=lambda: {Side.PLAYER1: None, Side.PLAYER2: None})
    ai_mode: bool = False
    phase: SessionPhase = SessionPhase.WAITING

    def role_of(self, connection_id: str) -> Optional[Side]:
        for side, occupant in self.slots.items():
            if occupant == connection_id:
                return side
        return None

    def open_slot(self) -> Optional[Side]:
        if self.slots[Side.PLAYER1] is None:
            return Side.PLAYER1
        if self.slots[Side.PLAYER2] is None and not self.ai_mode:
            return Side.PLAYER2
        return None

    def players(self) -> list[str]:
        return [occupant for occupant in self.slots.values() if occupant is not None]

    def all_slots_empty(self) -> bool:
        return not self.players()


class ServerData:

    def __init__(self):
        self.connections: dict[str, ServerConnection] = dict()
        self.session = Session()

        self.shutdown_event = asyncio.Event()
