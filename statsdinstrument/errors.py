# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
"""
statsdinstrument - exception classes

"""


class Error(Exception):
    """Generic statsdinstrument exception"""


class InvalidConfigurationError(Error):
    """Invalid configuration"""


class UnsupportedMetricTypeError(Error):
    """Metric type can't be expressed in the selected protocol"""


class DatagramParseError(Error):
    """String is not a valid StatsD datagram"""


class InvalidMetricValueError(Error):
    """Metric value can't be encoded"""
