# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
"""
Network transport for datagrams

One datagram per UDP packet, fire-and-forget. Write failures are logged and
dropped, they are never raised to the code emitting metrics.

"""
import logging
import socket
import threading
from typing import Optional, Tuple

from statsdinstrument.datagram import Datagram
from statsdinstrument.errors import InvalidConfigurationError

from .base import Sink

LOG = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8125


def parse_address(addr: str) -> Tuple[str, int]:
    """Split "host:port" into its parts, "[::1]:8125" style IPv6 addresses are accepted"""
    host, separator, port = addr.rpartition(":")
    if not separator or not host:
        raise InvalidConfigurationError("StatsD address {!r} is not in host:port format".format(addr))
    try:
        port_number = int(port)
    except ValueError:
        raise InvalidConfigurationError("StatsD address {!r} has an invalid port".format(addr)) from None
    return host.strip("[]"), port_number


class UDPWriter:
    def __init__(self, host: Optional[str] = DEFAULT_HOST, port: Optional[int] = DEFAULT_PORT):
        self._dest_addr = (host, port)
        self._socket: Optional[socket.socket] = None
        self._lock = threading.Lock()

    @property
    def host(self):
        return self._dest_addr[0]

    @property
    def port(self):
        return self._dest_addr[1]

    def _get_socket(self) -> socket.socket:
        with self._lock:
            if self._socket is None:
                family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
                self._socket = socket.socket(family, socket.SOCK_DGRAM)
            return self._socket

    def write(self, data: bytes) -> None:
        if None in self._dest_addr:
            # stats sending is disabled
            return
        sock = self._get_socket()
        try:
            sock.sendto(data, self._dest_addr)
        except OSError:
            # drop the socket, the next write opens a new one
            self.close()
            raise

    def close(self) -> None:
        with self._lock:
            if self._socket is not None:
                self._socket.close()
                self._socket = None

    def __repr__(self):
        return "UDPWriter(host={!r}, port={!r})".format(self.host, self.port)


class TransportSink(Sink):
    def __init__(self, writer=None):
        self.writer = writer if writer is not None else UDPWriter()

    @classmethod
    def for_address(cls, addr: str) -> "TransportSink":
        host, port = parse_address(addr)
        return cls(UDPWriter(host, port))

    def accept(self, datagram: Datagram) -> None:
        try:
            self.writer.write(datagram.source.encode("utf-8"))
        except Exception as ex:  # pylint: disable=broad-except
            LOG.warning("Failed to send metric %r: %s: %s", datagram.name, ex.__class__.__name__, ex)

    def close(self) -> None:
        close = getattr(self.writer, "close", None)
        if close is not None:
            close()

    def __repr__(self):
        return "TransportSink(writer={!r})".format(self.writer)
