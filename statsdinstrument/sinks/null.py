# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
from statsdinstrument.datagram import Datagram

from .base import Sink


class NullSink(Sink):
    def accept(self, datagram: Datagram) -> None:
        pass

    def __repr__(self):
        return "NullSink()"
