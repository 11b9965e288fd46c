# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
"""
statsdinstrument - datagram builders

Encodes metrics into the plain StatsD protocol or into the DogStatsD dialect
which adds tags and the distribution and histogram metric types:

  statsd format:  metric.name:value|type|@sample_rate
  datadog format: metric.name:value|type|@sample_rate|#tag1:value,tag2
                  http://docs.datadoghq.com/guides/dogstatsd/#datagram-format

"""
import enum
import math
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Type, Union

from .datagram import Datagram, MetricType, MetricValue, StrEnum
from .errors import InvalidConfigurationError, InvalidMetricValueError, UnsupportedMetricTypeError

Tags = Union[Mapping[str, Any], Sequence[str]]

NAME_TRANSLATION = str.maketrans("|@:", "___")
TAG_TRANSLATION = str.maketrans("", "", ",|")


@enum.unique
class ProtocolVariant(StrEnum):
    statsd = "statsd"
    datadog = "datadog"


def format_value(value: MetricValue) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidMetricValueError("Metric value {!r} can't be sent over StatsD".format(value))
        return repr(value)
    return str(value)


def copy_tags(tags: Optional[Tags]) -> Optional[Tags]:
    """Snapshot tags so later changes to the caller's object have no effect"""
    if tags is None:
        return None
    if isinstance(tags, Mapping):
        return dict(tags)
    if isinstance(tags, str):
        return (tags, )
    return tuple(tags)


def tag_pairs(tags: Optional[Tags]) -> List[Tuple[str, Optional[str]]]:
    """Split a tag mapping or a list of "key:value" / "key" strings into (key, value) pairs

    List entries are kept as given, including repeated keys.
    """
    if not tags:
        return []
    if isinstance(tags, Mapping):
        return [(str(key), None if value is None else str(value)) for key, value in tags.items()]
    if isinstance(tags, str):
        tags = [tags]
    pairs = []
    for tag in tags:
        key, separator, value = str(tag).partition(":")
        pairs.append((key, value if separator else None))
    return pairs


def merge_tags(default_pairs, pairs):
    """Call-site tags replace every default tag with the same key"""
    override_keys = {key for key, _ in pairs}
    return [pair for pair in default_pairs if pair[0] not in override_keys] + list(pairs)


def render_tag(key: str, value: Optional[str]) -> str:
    tag = key if value is None else "{}:{}".format(key, value)
    return tag.translate(TAG_TRANSLATION)


class DatagramBuilder:
    variant: ProtocolVariant
    supported_types: FrozenSet[MetricType] = frozenset(MetricType)

    def __init__(self, prefix: Optional[str] = None, default_tags: Optional[Tags] = None):
        self.prefix = prefix
        self.default_tags = copy_tags(default_tags)

    def build(
        self,
        metric_type: MetricType,
        name: str,
        value: MetricValue,
        sample_rate: float = 1,
        tags: Optional[Tags] = None,
    ) -> Datagram:
        if metric_type not in self.supported_types:
            raise UnsupportedMetricTypeError(
                "Metric type {!r} is not supported by the {} protocol".format(metric_type.name, self.variant)
            )

        name = self.normalize_name(name)
        rendered_tags = self.render_tags(tags)
        parts = [name, ":", format_value(value), "|", metric_type.value]
        if sample_rate != 1:
            parts.extend(["|@", str(sample_rate)])
        if rendered_tags:
            parts.extend(["|#", ",".join(rendered_tags)])

        return Datagram(
            source="".join(parts),
            name=name,
            type=metric_type,
            value=value,
            sample_rate=sample_rate,
            tags=rendered_tags,
        )

    def normalize_name(self, name: str) -> str:
        if self.prefix:
            name = "{}.{}".format(self.prefix, name)
        return name.translate(NAME_TRANSLATION)

    def render_tags(self, tags: Optional[Tags]) -> Tuple[str, ...]:
        raise NotImplementedError

    def c(self, name, value, sample_rate=1, tags=None):
        return self.build(MetricType.counter, name, value, sample_rate, tags)

    def ms(self, name, value, sample_rate=1, tags=None):
        return self.build(MetricType.timing, name, value, sample_rate, tags)

    def g(self, name, value, sample_rate=1, tags=None):
        return self.build(MetricType.gauge, name, value, sample_rate, tags)

    def s(self, name, value, sample_rate=1, tags=None):
        return self.build(MetricType.set, name, value, sample_rate, tags)

    def d(self, name, value, sample_rate=1, tags=None):
        return self.build(MetricType.distribution, name, value, sample_rate, tags)

    def h(self, name, value, sample_rate=1, tags=None):
        return self.build(MetricType.histogram, name, value, sample_rate, tags)


class StatsdDatagramBuilder(DatagramBuilder):
    """Plain StatsD, which has no notion of tags: any given tags are dropped"""
    variant = ProtocolVariant.statsd
    supported_types = frozenset([MetricType.counter, MetricType.timing, MetricType.gauge, MetricType.set])

    def render_tags(self, tags: Optional[Tags]) -> Tuple[str, ...]:
        return ()


class DogStatsdDatagramBuilder(DatagramBuilder):
    variant = ProtocolVariant.datadog

    def __init__(self, prefix: Optional[str] = None, default_tags: Optional[Tags] = None):
        super().__init__(prefix=prefix, default_tags=default_tags)
        self._default_tag_pairs = tag_pairs(default_tags)

    def render_tags(self, tags: Optional[Tags]) -> Tuple[str, ...]:
        rendered = (render_tag(key, value) for key, value in merge_tags(self._default_tag_pairs, tag_pairs(tags)))
        return tuple(tag for tag in rendered if tag)


BUILDER_CLASSES: Dict[ProtocolVariant, Type[DatagramBuilder]] = {
    ProtocolVariant.statsd: StatsdDatagramBuilder,
    ProtocolVariant.datadog: DogStatsdDatagramBuilder,
}


def get_builder_class(variant: Union[ProtocolVariant, str]) -> Type[DatagramBuilder]:
    try:
        return BUILDER_CLASSES[ProtocolVariant(variant)]
    except ValueError:
        raise InvalidConfigurationError("Unsupported StatsD implementation: {!r}".format(variant)) from None
