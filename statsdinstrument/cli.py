# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
"""
statsdinstrument - send a single metric from the command line

"""
import argparse
import logging
import os
import sys

from . import config, logutil, version
from .datagram import parse_value
from .errors import InvalidConfigurationError, InvalidMetricValueError, UnsupportedMetricTypeError

METRIC_METHODS = ["increment", "measure", "gauge", "set", "distribution", "histogram"]


def send_metric(client, metric_type, name, value, sample_rate=None, tags=None):
    emit = getattr(client, metric_type)
    with client.capture() as capture_sink:
        emit(name, parse_value(value), sample_rate=sample_rate, tags=tags or None)
    return capture_sink.datagrams()


def main(args=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("-D", "--debug", help="Enable debug logging", action="store_true")
    parser.add_argument("--version", action="version", help="show program version", version=version.__version__)
    parser.add_argument(
        "--config",
        help="configuration file, STATSD_* environment variables are used if not given",
        default=os.environ.get("STATSDINSTRUMENT_CONFIG")
    )
    parser.add_argument("--type", help="metric type, default %(default)s", choices=METRIC_METHODS, default="increment")
    parser.add_argument("--sample-rate", help="sample rate for this metric", type=float)
    parser.add_argument("--tag", help="tag in key:value or key form, can be repeated", action="append", default=[])
    parser.add_argument("-v", "--verbose", help="print the sent datagrams", action="store_true")
    parser.add_argument("name", help="metric name")
    parser.add_argument("value", help="metric value", nargs="?", default="1")

    args = parser.parse_args(args)
    logutil.configure_logging(level=logging.DEBUG if args.debug else logging.INFO, short_log=True)

    try:
        if args.config:
            client_config = config.read_json_config_file(args.config)
        else:
            client_config = config.config_from_environ()
        client = config.create_client(client_config)
        try:
            datagrams = send_metric(client, args.type, args.name, args.value, args.sample_rate, args.tag)
        finally:
            client.close()
    except (InvalidConfigurationError, InvalidMetricValueError, UnsupportedMetricTypeError) as ex:
        print("FATAL: {}".format(ex))
        return 1

    if args.verbose:
        for datagram in datagrams:
            print(datagram.source)
    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
