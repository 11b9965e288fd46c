# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
import threading
from typing import List, Optional

from statsdinstrument.datagram import Datagram

from .base import Sink


class CaptureSink(Sink):
    """Records datagrams in emission order and forwards them to an optional parent sink

    The parent is not owned by the capture sink: closing a capture sink does
    not close its parent.
    """
    def __init__(self, parent: Optional[Sink] = None):
        self.parent = parent
        self._datagrams: List[Datagram] = []
        self._lock = threading.Lock()

    def accept(self, datagram: Datagram) -> None:
        with self._lock:
            self._datagrams.append(datagram)
        if self.parent is not None:
            self.parent.accept(datagram)

    def datagrams(self) -> List[Datagram]:
        with self._lock:
            return list(self._datagrams)

    def clear(self) -> None:
        with self._lock:
            self._datagrams.clear()

    def __repr__(self):
        return "CaptureSink(parent={!r})".format(self.parent)
