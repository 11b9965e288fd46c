# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
from .base import Sink
from .capture import CaptureSink
from .log import LogSink
from .null import NullSink
from .transport import TransportSink, UDPWriter
