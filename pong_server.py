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
import os

from config import Config, ConfigurationLoadError
from join_code import JoinCodeGenerator
from logger import setup_logging
from mdns_registration import PongZeroconf
from pong_relay import SessionRelay
from server_data import ServerData
from websocket_server import WebsocketServer


class PongServer:

    def __init__(self, config):
        self._config = config
        self._data = ServerData()
        self._join_code = JoinCodeGenerator(self._config["server"])
        self._relay = SessionRelay(self._join_code.url, self._join_code.qr_data_url)
        self._mdns = PongZeroconf(self._config, self._join_code.url())
        self._websocket_server = WebsocketServer(self._config, self._data, self._relay)

    async def begin(self):
        logging.info("Starting PocketPong Server")
        logging.info("Starting MDNS")
        async with self._mdns:
            logging.info("Starting PocketPong Websocket Server")
            async with self._websocket_server:
                logging.info(f"Relay listening on port {self._websocket_server.port}")
                try:
                    logging.info("Ctrl^C to quit")
                    await self._data.shutdown_event.wait()
                except asyncio.CancelledError:
                    logging.info("Cancelled ...")
                finally:
                    logging.info("Stopping Server ...")


async def main():
    logging.info("Starting PocketPong ...")

    config = Config(os.environ.get("PONG_CONFIG", "./config.toml"))

    try:
        await config.initialize()
    except ConfigurationLoadError:
        logging.error("Could not load configuration. Exiting")
        return

    server = PongServer(config.config)
    await server.begin()


def run():
    setup_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.info("Bye")


if __name__ == "__main__":
    run()
