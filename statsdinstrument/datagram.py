# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
"""
statsdinstrument - datagram value type

A datagram is one fully encoded metric event. Next to the wire string it
keeps the structured fields it was built from so that captured metrics can be
inspected without re-parsing.

  format: "<name>:<value>|<type>[|@<sample_rate>][|#<tag>,<tag>]"

"""
import enum
import re
from dataclasses import dataclass
from typing import Tuple, Union

from .errors import DatagramParseError


class StrEnum(str, enum.Enum):
    def __str__(self):
        return str(self.value)


@enum.unique
class MetricType(StrEnum):
    counter = "c"
    timing = "ms"
    gauge = "g"
    set = "s"
    distribution = "d"
    histogram = "h"


MetricValue = Union[int, float, str]

DATAGRAM_RE = re.compile(
    r"^(?P<name>[^:|@]+):(?P<value>[^|]+)\|(?P<type>c|ms|g|s|d|h)"
    r"(?:\|@(?P<sample_rate>[0-9.eE+-]+))?"
    r"(?:\|#(?P<tags>[^|]*))?$"
)


@dataclass(frozen=True)
class Datagram:
    source: str
    name: str
    type: MetricType
    value: MetricValue
    sample_rate: float = 1
    tags: Tuple[str, ...] = ()

    def __str__(self):
        return self.source


def parse_value(raw_value: str) -> MetricValue:
    for convert in (int, float):
        try:
            return convert(raw_value)
        except ValueError:
            pass
    return raw_value


def parse_datagram(source: str) -> Datagram:
    """Parse a wire-format string back into a Datagram"""
    source = source.rstrip("\n")
    match = DATAGRAM_RE.match(source)
    if not match:
        raise DatagramParseError("Not a valid StatsD datagram: {!r}".format(source))

    sample_rate = match.group("sample_rate")
    try:
        sample_rate = float(sample_rate) if sample_rate is not None else 1
    except ValueError as ex:
        raise DatagramParseError("Invalid sample rate in {!r}".format(source)) from ex

    tags = match.group("tags")
    return Datagram(
        source=source,
        name=match.group("name"),
        type=MetricType(match.group("type")),
        value=parse_value(match.group("value")),
        sample_rate=sample_rate,
        tags=tuple(tags.split(",")) if tags else (),
    )
