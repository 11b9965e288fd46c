# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
"""
statsdinstrument - StatsD and DogStatsD metrics client

"""
from .builder import DogStatsdDatagramBuilder, ProtocolVariant, StatsdDatagramBuilder
from .client import Client, should_sample
from .datagram import Datagram, MetricType, parse_datagram
from .errors import (
    DatagramParseError, Error, InvalidConfigurationError, InvalidMetricValueError, UnsupportedMetricTypeError
)
from .sinks import CaptureSink, LogSink, NullSink, Sink, TransportSink, UDPWriter
from .version import __version__
