# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
"""
statsdinstrument - configuration

The configuration is read once at process start, either from a JSON file or
from the STATSD_* environment variables, and turned into a Client. Nothing in
the client itself looks at the environment.

"""
import enum
import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .builder import ProtocolVariant
from .client import Client
from .datagram import StrEnum
from .errors import InvalidConfigurationError
from .sinks import LogSink, NullSink, Sink, TransportSink, UDPWriter
from .sinks.transport import DEFAULT_HOST, DEFAULT_PORT, parse_address

LOG = logging.getLogger(__name__)


@enum.unique
class SinkKind(StrEnum):
    null = "null"
    udp = "udp"
    log = "log"


# sink used for each STATSD_ENV value, anything not listed discards metrics
ENVIRONMENT_SINKS = {
    "production": SinkKind.udp,
    "staging": SinkKind.udp,
    "development": SinkKind.log,
}


class ClientConfig(BaseModel):
    # Unknown keys are most likely typos, so fail on them
    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    implementation: ProtocolVariant = ProtocolVariant.datadog
    sink: SinkKind = SinkKind.null
    host: Optional[str] = DEFAULT_HOST
    port: Optional[int] = DEFAULT_PORT
    prefix: Optional[str] = None
    default_tags: Optional[Union[Dict[str, Any], List[str]]] = None
    default_sample_rate: float = Field(default=1, gt=0, le=1)
    log_level: str = "DEBUG"

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError("unknown log level {!r}".format(value))
        return value


def load_config(config: Mapping[str, Any]) -> ClientConfig:
    try:
        return ClientConfig(**config)
    except (TypeError, ValidationError) as ex:
        raise InvalidConfigurationError("Invalid StatsD configuration: {}".format(ex)) from ex


def read_json_config_file(filename: str) -> ClientConfig:
    try:
        with open(filename, "r") as fp:
            config = json.load(fp)
    except FileNotFoundError:
        raise InvalidConfigurationError("Configuration file {!r} does not exist".format(filename))
    except ValueError as ex:
        raise InvalidConfigurationError("Configuration file {!r} does not contain valid JSON: {}".format(filename, str(ex)))
    except OSError as ex:
        raise InvalidConfigurationError(
            "Configuration file {!r} can't be opened: {}".format(filename, ex.__class__.__name__)
        )
    if not isinstance(config, dict):
        raise InvalidConfigurationError("Configuration file {!r} does not contain a JSON object".format(filename))
    return load_config(config)


def config_from_environ(environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
    """Build a configuration from STATSD_* variables

    STATSD_ENV defaults to "development" which logs metrics instead of
    sending them; an explicit STATSD_SINK overrides the environment's choice.
    """
    if environ is None:
        environ = os.environ

    config: Dict[str, Any] = {}
    if environ.get("STATSD_ADDR"):
        config["host"], config["port"] = parse_address(environ["STATSD_ADDR"])
    if environ.get("STATSD_IMPLEMENTATION"):
        config["implementation"] = environ["STATSD_IMPLEMENTATION"]
    if environ.get("STATSD_PREFIX"):
        config["prefix"] = environ["STATSD_PREFIX"]
    if environ.get("STATSD_DEFAULT_TAGS"):
        config["default_tags"] = [tag.strip() for tag in environ["STATSD_DEFAULT_TAGS"].split(",") if tag.strip()]
    if environ.get("STATSD_SAMPLE_RATE"):
        config["default_sample_rate"] = environ["STATSD_SAMPLE_RATE"]

    if environ.get("STATSD_SINK"):
        config["sink"] = environ["STATSD_SINK"]
    else:
        config["sink"] = ENVIRONMENT_SINKS.get(environ.get("STATSD_ENV", "development"), SinkKind.null)

    return load_config(config)


def create_sink(config: ClientConfig) -> Sink:
    if config.sink == SinkKind.udp:
        LOG.info("Sending metrics to %s:%s using the %s protocol", config.host, config.port, config.implementation)
        return TransportSink(UDPWriter(config.host, config.port))
    if config.sink == SinkKind.log:
        return LogSink(level=logging.getLevelName(config.log_level))
    LOG.debug("Metrics are discarded")
    return NullSink()


def create_client(config: ClientConfig, sink: Optional[Sink] = None) -> Client:
    return Client(
        sink=sink if sink is not None else create_sink(config),
        prefix=config.prefix,
        default_sample_rate=config.default_sample_rate,
        default_tags=config.default_tags,
        implementation=config.implementation,
    )
