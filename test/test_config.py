# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
import json
import logging

import pytest

from statsdinstrument import config
from statsdinstrument.builder import ProtocolVariant
from statsdinstrument.config import ClientConfig, SinkKind
from statsdinstrument.errors import InvalidConfigurationError
from statsdinstrument.sinks import CaptureSink, LogSink, NullSink, TransportSink


def test_defaults() -> None:
    client_config = config.load_config({})
    assert client_config.implementation is ProtocolVariant.datadog
    assert client_config.sink is SinkKind.null
    assert client_config.host == "127.0.0.1"
    assert client_config.port == 8125
    assert client_config.prefix is None
    assert client_config.default_tags is None
    assert client_config.default_sample_rate == 1
    assert client_config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "settings", [
        {"default_sample_rate": 0},
        {"default_sample_rate": 1.5},
        {"implementation": "telegraf"},
        {"sink": "tcp"},
        {"log_level": "LOUD"},
        {"unknown_key": True},
    ]
)
def test_invalid_config(settings) -> None:
    with pytest.raises(InvalidConfigurationError):
        config.load_config(settings)


def test_config_is_frozen() -> None:
    client_config = config.load_config({})
    with pytest.raises(Exception):
        client_config.prefix = "changed"  # type: ignore


def test_read_json_config_file(tmpdir) -> None:
    config_file = tmpdir.join("statsd.json").strpath
    with open(config_file, "w") as fp:
        json.dump({
            "implementation": "statsd",
            "sink": "udp",
            "host": "metrics.local",
            "port": 9125,
            "prefix": "myapp",
            "default_tags": {"env": "prod"},
            "default_sample_rate": 0.5,
        }, fp)
    client_config = config.read_json_config_file(config_file)
    assert client_config.implementation is ProtocolVariant.statsd
    assert client_config.sink is SinkKind.udp
    assert client_config.host == "metrics.local"
    assert client_config.port == 9125
    assert client_config.default_tags == {"env": "prod"}
    assert client_config.default_sample_rate == 0.5


def test_read_json_config_file_errors(tmpdir) -> None:
    with pytest.raises(InvalidConfigurationError) as excinfo:
        config.read_json_config_file(tmpdir.join("missing.json").strpath)
    assert "does not exist" in str(excinfo.value)

    broken_file = tmpdir.join("broken.json")
    broken_file.write("{not json")
    with pytest.raises(InvalidConfigurationError) as excinfo:
        config.read_json_config_file(broken_file.strpath)
    assert "valid JSON" in str(excinfo.value)

    list_file = tmpdir.join("list.json")
    list_file.write("[]")
    with pytest.raises(InvalidConfigurationError):
        config.read_json_config_file(list_file.strpath)


def test_config_from_environ() -> None:
    client_config = config.config_from_environ({
        "STATSD_ADDR": "statsd.local:9125",
        "STATSD_IMPLEMENTATION": "statsd",
        "STATSD_PREFIX": "myapp",
        "STATSD_DEFAULT_TAGS": "env:prod, region:eu,,",
        "STATSD_SAMPLE_RATE": "0.1",
        "STATSD_ENV": "production",
    })
    assert client_config == ClientConfig(
        implementation=ProtocolVariant.statsd,
        sink=SinkKind.udp,
        host="statsd.local",
        port=9125,
        prefix="myapp",
        default_tags=["env:prod", "region:eu"],
        default_sample_rate=0.1,
    )


@pytest.mark.parametrize(
    "environ,expected", [
        ({}, SinkKind.log),
        ({"STATSD_ENV": "development"}, SinkKind.log),
        ({"STATSD_ENV": "staging"}, SinkKind.udp),
        ({"STATSD_ENV": "test"}, SinkKind.null),
        ({"STATSD_ENV": "production", "STATSD_SINK": "null"}, SinkKind.null),
    ]
)
def test_config_from_environ_sink(environ, expected: SinkKind) -> None:
    assert config.config_from_environ(environ).sink is expected


def test_config_from_environ_invalid() -> None:
    with pytest.raises(InvalidConfigurationError):
        config.config_from_environ({"STATSD_ADDR": "no-port"})
    with pytest.raises(InvalidConfigurationError):
        config.config_from_environ({"STATSD_SAMPLE_RATE": "2"})


def test_create_sink() -> None:
    assert isinstance(config.create_sink(config.load_config({})), NullSink)

    transport = config.create_sink(config.load_config({"sink": "udp", "host": "localhost", "port": 9125}))
    assert isinstance(transport, TransportSink)
    assert (transport.writer.host, transport.writer.port) == ("localhost", 9125)

    log_sink = config.create_sink(config.load_config({"sink": "log", "log_level": "info"}))
    assert isinstance(log_sink, LogSink)
    assert log_sink.level == logging.INFO


def test_create_client() -> None:
    sink = CaptureSink()
    client_config = config.load_config({"prefix": "myapp", "default_tags": ["env:prod"], "default_sample_rate": 1})
    client = config.create_client(client_config, sink=sink)
    client.increment("foo")
    assert [datagram.source for datagram in sink.datagrams()] == ["myapp.foo:1|c|#env:prod"]
