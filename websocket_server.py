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
import uuid
from typing import Optional

import websockets.exceptions
from websockets.asyncio.server import serve, Server, ServerConnection

import messages
from pong_relay import SessionRelay, Connected, MessageReceived, Disconnected, Outbound, Event
from server_data import ServerData

MAX_MESSAGE_SIZE = 2 ** 16


class WebsocketServer:
    """
    One handler task per connection turns socket activity into relay events. A single
    dispatcher task consumes them in order, so the session is only ever touched by one
    piece of code at a time.
    """

    _server: Optional[Server] = None
    _dispatcher: Optional[asyncio.Task] = None

    def __init__(self, config, data: ServerData, relay: SessionRelay):
        self._config = config
        self._data = data
        self._relay = relay
        self._events: asyncio.Queue[Event] = asyncio.Queue()

    @property
    def port(self) -> int:
        return self._server.sockets[0].getsockname()[1]

    async def handler(self, websocket: ServerConnection):
        connection_id = uuid.uuid4().hex[:12]
        self._data.connections[connection_id] = websocket
        logging.debug(f"Websocket {connection_id} connected from {websocket.remote_address}")
        await self._events.put(Connected(connection_id))

        shutdown_wait_task = asyncio.create_task(self._data.shutdown_event.wait())
        try:
            while True:
                recv_task = asyncio.create_task(websocket.recv())
                await asyncio.wait(
                    [recv_task, shutdown_wait_task],
                    return_when=asyncio.FIRST_COMPLETED
                )

                # shutdown case
                if self._data.shutdown_event.is_set():
                    recv_task.cancel()
                    await websocket.close()
                    break

                await self._events.put(MessageReceived(connection_id, recv_task.result()))
        except websockets.exceptions.ConnectionClosed:
            logging.debug(f"Websocket {connection_id} connection closed")
        finally:
            shutdown_wait_task.cancel()
            await self._events.put(Disconnected(connection_id))

    async def dispatch(self):
        while True:
            event = await self._events.get()
            try:
                try:
                    outbound = self._relay.handle(self._data.session, event)
                except Exception as e:
                    logging.exception(e)
                    logging.warning(f"Dropped {type(event).__name__} from {event.connection_id}")
                    outbound = []
                if isinstance(event, Disconnected):
                    self._data.connections.pop(event.connection_id, None)
                for item in outbound:
                    await self._send(item)
            finally:
                self._events.task_done()

    async def _send(self, outbound: Outbound):
        websocket = self._data.connections.get(outbound.connection_id)
        if websocket is None:
            logging.debug(f"Wanted to send {outbound.packet['type']} to {outbound.connection_id}, already gone")
            return
        try:
            await websocket.send(messages.encode(outbound.packet))
        except websockets.exceptions.ConnectionClosed:
            logging.debug(f"Could not deliver {outbound.packet['type']} to {outbound.connection_id}")

    async def __aenter__(self):
        logging.debug(f"Starting websocket server")
        self._dispatcher = asyncio.create_task(self.dispatch())
        self._server = await serve(
            self.handler,
            self._config["server"]["host"] or None,
            int(self._config["server"]["websocket_port"]),
            max_size=MAX_MESSAGE_SIZE,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        logging.debug(f"Stopping websocket server")
        self._data.shutdown_event.set()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
        if self._dispatcher is not None:
            self._dispatcher.cancel()
            try:
                await self._dispatcher
            except asyncio.CancelledError:
                pass
