# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
from statsdinstrument.datagram import Datagram


class Sink:
    """Destination for encoded datagrams

    accept() must never raise because of delivery problems: metrics are best
    effort and must not break the application emitting them.
    """
    def accept(self, datagram: Datagram) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass
