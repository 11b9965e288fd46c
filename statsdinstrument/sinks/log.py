# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
import logging
from typing import Optional

from statsdinstrument.datagram import Datagram

from .base import Sink

LOG = logging.getLogger("statsdinstrument.sinks.log")


class LogSink(Sink):
    """Writes every datagram to a logger, for local development"""
    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.logger = logger or LOG
        self.level = level

    def accept(self, datagram: Datagram) -> None:
        self.logger.log(self.level, "[StatsD] %s", datagram.source)

    def __repr__(self):
        return "LogSink(logger={!r}, level={})".format(self.logger.name, logging.getLevelName(self.level))
