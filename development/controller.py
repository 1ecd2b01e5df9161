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
Stand-in for the phone controller page, for poking at the relay from a terminal.

    python development/controller.py ws://192.168.1.35:3000
"""

import asyncio
import json
import sys

from rich import print
from websockets.asyncio.client import connect
import websockets.exceptions

COMMANDS = {
    "a": {"type": "move", "direction": "left"},
    "d": {"type": "move", "direction": "right"},
    "s": {"type": "move", "direction": "stop"},
    "ai": {"type": "start_vs_ai"},
    "r": {"type": "restart_game"},
    "w": {"type": "wait_for_players"},
}

HELP = "a/d/s = left/right/stop, ai = play the computer, r = restart, w = wait for players, q = quit"


async def print_messages(websocket):
    try:
        async for raw in websocket:
            print(f"[green]<[/green] {raw}")
    except websockets.exceptions.ConnectionClosed:
        print("[red]server closed the connection[/red]")


async def main(url: str):
    async with connect(url) as websocket:
        reader = asyncio.create_task(print_messages(websocket))
        await websocket.send(json.dumps({"type": "register_player"}))
        print(HELP)
        while not reader.done():
            line = (await asyncio.to_thread(input)).strip().lower()
            if line == "q":
                break
            packet = COMMANDS.get(line)
            if packet is None:
                print(HELP)
                continue
            await websocket.send(json.dumps(packet))
        reader.cancel()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "ws://localhost:3000"))
