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

import base64
import ipaddress
import logging
import urllib.parse
from typing import Optional

import ifaddr
import qrcode
import qrcode.exceptions
import qrcode.image.svg


class JoinCodeError(Exception): pass


def local_ip() -> str:
    """First non-internal IPv4 address of this machine, or localhost."""
    for adapter in ifaddr.get_adapters():
        for ip in adapter.ips:
            if ip.is_IPv4 and not ipaddress.ip_address(ip.ip).is_loopback:
                return ip.ip
    logging.warning("No external IPv4 address found, join URL will use localhost")
    return "localhost"


def is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


class JoinCodeGenerator:

    def __init__(self, server_config: dict):
        self._config = server_config

    def url(self, origin: Optional[str] = None) -> str:
        if self._config["controller_url"]:
            return self._config["controller_url"]

        path = self._config["controller_path"]
        if origin:
            try:
                parsed = urllib.parse.urlsplit(origin)
                hostname = parsed.hostname
            except ValueError as e:
                logging.warning(f"Ignoring unparsable screen origin {origin!r}: {e}")
                hostname = None
            # a phone cannot reach the screen's localhost
            if hostname and parsed.scheme in ("http", "https") and not is_loopback_host(hostname):
                return f"{parsed.scheme}://{parsed.netloc}{path}"

        return f"http://{local_ip()}:{self._config['controller_port']}{path}"

    @staticmethod
    def qr_data_url(url: str) -> str:
        try:
            qr = qrcode.QRCode(box_size=10, border=2, image_factory=qrcode.image.svg.SvgPathImage)
            qr.add_data(url)
            qr.make(fit=True)
            svg = qr.make_image().to_string()
        except (qrcode.exceptions.DataOverflowError, ValueError) as e:
            raise JoinCodeError(str(e)) from e
        return "data:image/svg+xml;base64," + base64.b64encode(svg).decode("ascii")
