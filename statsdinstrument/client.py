# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
"""
statsdinstrument - StatsD client

"""
import contextlib
import logging
import random
import time
from typing import Any, Callable, Iterator, List, Optional, Union

from .builder import DatagramBuilder, ProtocolVariant, Tags, copy_tags, get_builder_class, render_tag, tag_pairs
from .datagram import Datagram, MetricType, MetricValue
from .errors import InvalidConfigurationError
from .sinks import CaptureSink, NullSink, Sink

LOG = logging.getLogger(__name__)


def should_sample(sample_rate: float, random_source: Callable[[], float] = random.random) -> bool:
    # rate 1 must not consume the random source
    return sample_rate == 1 or random_source() < sample_rate


class Client:
    """Emits metrics through a datagram builder into a sink

    The client configuration is fixed at construction time, use
    with_options() or clone_with_options() to get a client with different
    settings. The only attribute changed in place is `sink`, and only for
    the extent of a capture scope. Capture scopes swap that shared slot and
    are therefore not safe to run concurrently on one client from several
    threads; use clone_with_capture() for that.
    """
    def __init__(
        self,
        sink: Optional[Sink] = None,
        prefix: Optional[str] = None,
        default_sample_rate: float = 1,
        default_tags: Optional[Tags] = None,
        implementation: Union[ProtocolVariant, str] = ProtocolVariant.datadog,
        random_source: Optional[Callable[[], float]] = None,
    ):
        if not 0 < default_sample_rate <= 1:
            raise InvalidConfigurationError(
                "default_sample_rate must be within (0, 1], got {!r}".format(default_sample_rate)
            )
        self.sink = sink if sink is not None else NullSink()
        self.prefix = prefix
        self.default_sample_rate = default_sample_rate
        self.default_tags = copy_tags(default_tags)
        builder_class = get_builder_class(implementation)
        self.implementation = builder_class.variant
        self.random_source = random_source or random.random
        self.datagram_builder: DatagramBuilder = builder_class(prefix=prefix, default_tags=default_tags)

    def __repr__(self):
        return "Client(sink={!r}, prefix={!r}, implementation={})".format(self.sink, self.prefix, self.implementation)

    def increment(self, name: str, value: int = 1, *, sample_rate: Optional[float] = None, tags: Optional[Tags] = None):
        """Count how often something happens

        Don't compensate for the sample rate in `value`, the rate is sent along
        with the datagram and the server scales the counter.
        """
        self._emit(MetricType.counter, name, value, sample_rate, tags)

    def measure(self, name: str, value: float, *, sample_rate: Optional[float] = None, tags: Optional[Tags] = None):
        """Record a duration in milliseconds"""
        self._emit(MetricType.timing, name, value, sample_rate, tags)

    def gauge(self, name: str, value: float, *, sample_rate: Optional[float] = None, tags: Optional[Tags] = None):
        self._emit(MetricType.gauge, name, value, sample_rate, tags)

    def set(self, name: str, value: MetricValue, *, sample_rate: Optional[float] = None, tags: Optional[Tags] = None):
        """Count distinct values of `value`"""
        self._emit(MetricType.set, name, value, sample_rate, tags)

    def distribution(
        self, name: str, value: float, *, sample_rate: Optional[float] = None, tags: Optional[Tags] = None
    ):
        """Record a value into a server side distribution, not available with plain StatsD"""
        self._emit(MetricType.distribution, name, value, sample_rate, tags)

    def histogram(self, name: str, value: float, *, sample_rate: Optional[float] = None, tags: Optional[Tags] = None):
        """Record a value into a histogram, not available with plain StatsD"""
        self._emit(MetricType.histogram, name, value, sample_rate, tags)

    @contextlib.contextmanager
    def timeit(self, name: str, *, sample_rate: Optional[float] = None, tags: Optional[Tags] = None) -> Iterator[None]:
        start_time = time.monotonic()
        try:
            yield
        finally:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            self.measure(name, elapsed_ms, sample_rate=sample_rate, tags=tags)

    def unexpected_exception(self, ex: Exception, where: str, tags: Optional[Tags] = None) -> None:
        all_tags = [
            render_tag("exception", ex.__class__.__name__),
            render_tag("where", where),
        ]
        all_tags.extend(render_tag(key, value) for key, value in tag_pairs(tags))
        self.increment("exception", tags=all_tags)

    def _emit(
        self, metric_type: MetricType, name: str, value: MetricValue, sample_rate: Optional[float], tags: Optional[Tags]
    ) -> None:
        if sample_rate is None:
            sample_rate = self.default_sample_rate
        if not should_sample(sample_rate, self.random_source):
            return
        datagram = self.datagram_builder.build(metric_type, name, value, sample_rate, tags)
        self.sink.accept(datagram)

    def clone_with_options(
        self,
        *,
        sink: Optional[Sink] = None,
        prefix: Optional[str] = None,
        default_sample_rate: Optional[float] = None,
        default_tags: Optional[Tags] = None,
        implementation: Optional[Union[ProtocolVariant, str]] = None,
    ) -> "Client":
        return self.__class__(
            sink=sink if sink is not None else self.sink,
            prefix=prefix if prefix is not None else self.prefix,
            default_sample_rate=default_sample_rate if default_sample_rate is not None else self.default_sample_rate,
            default_tags=default_tags if default_tags is not None else self.default_tags,
            implementation=implementation if implementation is not None else self.implementation,
            random_source=self.random_source,
        )

    @contextlib.contextmanager
    def with_options(self, **options) -> Iterator["Client"]:
        """Yield a client using this client's settings except for the given overrides

        The receiver is left untouched whatever happens inside the block.
        """
        yield self.clone_with_options(**options)

    def capture_sink(self) -> CaptureSink:
        return CaptureSink(parent=self.sink)

    @contextlib.contextmanager
    def with_capture_sink(self, capture_sink: CaptureSink) -> Iterator[CaptureSink]:
        self.sink = capture_sink
        try:
            yield capture_sink
        finally:
            self.sink = capture_sink.parent

    @contextlib.contextmanager
    def capture(self) -> Iterator[CaptureSink]:
        """Record the metrics emitted inside the block

        Usage:

            with client.capture() as captured:
                do_work()
            assert [datagram.name for datagram in captured.datagrams()] == ["work.done"]
        """
        with self.with_capture_sink(self.capture_sink()) as capture_sink:
            yield capture_sink

    def capture_datagrams(self, func: Callable[..., Any], *args, **kwargs) -> List[Datagram]:
        """Run func and return the datagrams it emitted, in emission order"""
        with self.capture() as capture_sink:
            func(*args, **kwargs)
        return capture_sink.datagrams()

    def clone_with_capture(self) -> "Client":
        """Return a new client recording into a capture sink stacked on this client's sink

        The capture sink is available as the new client's `sink`. Nothing on
        the receiver changes, so this can be used from concurrent threads.
        """
        return self.clone_with_options(sink=self.capture_sink())

    def close(self) -> None:
        LOG.debug("Closing %r", self.sink)
        self.sink.close()
