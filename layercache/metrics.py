"""Metrics providers that publish codec statistics as labelled gauges."""

from __future__ import annotations

import abc
import logging
import queue
import threading
from collections.abc import Iterable
from typing import Optional

from layercache.codec import CodecInterface

DEFAULT_NAMESPACE = "cache"

_QUEUE_SIZE = 10000

_RECORDED_STATS = (
    ("hit_count", "hits"),
    ("miss_count", "miss"),
    ("set_success", "set_success"),
    ("set_error", "set_error"),
    ("delete_success", "delete_success"),
    ("delete_error", "delete_error"),
    ("invalidate_success", "invalidate_success"),
    ("invalidate_error", "invalidate_error"),
)

_log = logging.getLogger(__name__)


class MetricsInterface(abc.ABC):
    """Contract of a metrics provider."""

    @abc.abstractmethod
    def record_from_codec(self, codec: CodecInterface) -> None:
        """Record the statistics held by a codec."""


class Gauge:
    """A single value that can go up and down."""

    def __init__(self) -> None:
        self._value = 0.0
        self._lock = threading.Lock()

    def set(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    @property
    def value(self) -> float:
        with self._lock:
            return self._value


class GaugeVec:
    """A family of gauges told apart by label values."""

    def __init__(
        self,
        name: str,
        label_names: Iterable[str],
        *,
        namespace: str = "",
        help_text: str = "",
    ) -> None:
        self.name = f"{namespace}_{name}" if namespace else name
        self.help_text = help_text
        self.label_names = tuple(label_names)
        self._gauges: dict[tuple[str, ...], Gauge] = {}
        self._lock = threading.Lock()

    def with_label_values(self, *args: str) -> Gauge:
        """Return the gauge for the given label values, creating it if needed."""
        if len(args) != len(self.label_names):
            raise ValueError(
                f"inconsistent label cardinality: expected {len(self.label_names)} "
                f"label values but got {len(args)}"
            )
        key = tuple(str(value) for value in args)
        with self._lock:
            gauge = self._gauges.get(key)
            if gauge is None:
                gauge = self._gauges[key] = Gauge()
            return gauge


class Registry:
    """Holds collectors by their fully qualified name."""

    def __init__(self) -> None:
        self._collectors: dict[str, GaugeVec] = {}
        self._lock = threading.Lock()

    def register(self, collector: GaugeVec) -> None:
        """Add a collector; a second collector with the same name is refused."""
        with self._lock:
            if collector.name in self._collectors:
                raise ValueError(
                    f"duplicate metrics collector registration attempted: {collector.name}"
                )
            self._collectors[collector.name] = collector

    @property
    def collectors(self) -> dict[str, GaugeVec]:
        with self._lock:
            return dict(self._collectors)


DEFAULT_REGISTRY = Registry()


class Prometheus(MetricsInterface):
    """Publishes codec statistics into a gauge vector in the background."""

    def __init__(
        self,
        service: str,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        registerer: Optional[Registry] = None,
        codec_queue: Optional[queue.Queue] = None,
    ) -> None:
        self.service = service
        self.namespace = namespace
        self.registerer = registerer if registerer is not None else DEFAULT_REGISTRY
        self.codec_queue = (
            codec_queue if codec_queue is not None else queue.Queue(maxsize=_QUEUE_SIZE)
        )
        self.collector = GaugeVec(
            "collector",
            ("service", "store", "metric"),
            namespace=namespace,
            help_text="This represent the number of items in cache",
        )
        self.registerer.register(self.collector)
        self._closed = False
        self._worker = threading.Thread(
            target=self._recorder, name="metrics-recorder", daemon=True
        )
        self._worker.start()

    def _record(self, store: str, metric: str, value: float) -> None:
        self.collector.with_label_values(self.service, store, metric).set(value)

    def _record_codec(self, codec: CodecInterface) -> None:
        stats = codec.stats()
        store_type = codec.store.get_type()
        for metric, attribute in _RECORDED_STATS:
            self._record(store_type, metric, getattr(stats, attribute))

    def _recorder(self) -> None:
        while True:
            codec = self.codec_queue.get()
            try:
                if codec is None:
                    return
                self._record_codec(codec)
            except Exception:
                _log.exception("unable to record metrics from codec")
            finally:
                self.codec_queue.task_done()

    def record_from_codec(self, codec: CodecInterface) -> None:
        """Queue a codec for the background recorder."""
        self.codec_queue.put(codec)

    def flush(self) -> None:
        """Wait until every queued codec has been recorded."""
        self.codec_queue.join()

    def close(self) -> None:
        """Stop the background recorder after it drains the queue."""
        if self._closed:
            return
        self._closed = True
        self.codec_queue.put(None)
        self._worker.join()