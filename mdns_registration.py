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

import logging
import socket
from typing import Optional

import zeroconf
from zeroconf import IPVersion
from zeroconf.asyncio import AsyncZeroconf, AsyncServiceInfo

from join_code import local_ip


class PongZeroconf:
    """
    Advertises the relay so screens on the local network can find it without typing
    an address. Disabled with [mdns] enabled = false.
    """
    _service: Optional[AsyncServiceInfo] = None
    _zeroconf: Optional[AsyncZeroconf] = None

    def __init__(self, config, controller_url: str):
        self._config = config
        self._controller_url = controller_url

    def build_service_info(self, address: str) -> AsyncServiceInfo:
        service_type = self._config['mdns']['service_type']
        name = self._config['server']['name']
        return AsyncServiceInfo(
            service_type,
            f"{name}.{service_type}",
            addresses=[socket.inet_aton(address)],
            port=int(self._config['server']['websocket_port']),
            properties={
                "path": "/",
                "controller": self._controller_url,
            },
            server=f"{socket.gethostname()}.local.",
        )

    async def start(self):
        if not self._config['mdns']['enabled']:
            logging.debug("mDNS advertisement disabled")
            return

        address = local_ip()
        if address == "localhost":
            logging.warning("Not advertising over mDNS without a network address")
            return

        try:
            self._zeroconf = AsyncZeroconf(ip_version=IPVersion.V4Only)
            self._service = self.build_service_info(address)
            await self._zeroconf.async_register_service(self._service)
            logging.debug(f"Registered {self._service.name} at {address}")
        except (zeroconf.Error, OSError) as e:
            logging.exception(e)
            logging.warning("mDNS advertisement failed, continuing without it")
            await self.stop()

    async def stop(self):
        if self._zeroconf is None:
            return
        await self._zeroconf.async_unregister_all_services()
        await self._zeroconf.async_close()
        self._zeroconf = None
        logging.debug(f"Unregistered services.")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
