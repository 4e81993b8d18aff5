"""
Metric emission for resolved LUNs.

MetricEmitter converts raw port counters into exported values and hands three
samples per LUN to a sink. Sinks are the boundary to the metrics transport:

- FamilySink collects samples into prometheus_client metric families for the
  current scrape
- QueueSink hands samples to a queue drained by another thread
"""

import logging
import queue
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import LioConstants
from .descriptors import LioMetricDescriptors, MetricDescriptor, ValueKind
from .exceptions import SinkError
from .models import BackstoreIdentity, CorrelationKey, RawCounters


@dataclass(frozen=True)
class Sample:
    descriptor: MetricDescriptor
    value_kind: ValueKind
    value: float
    label_values: Tuple[str, ...]


class FamilySink:
    """Accumulates samples into one prometheus_client family per descriptor."""

    def __init__(self, descriptors: LioMetricDescriptors):
        self._families: Dict[str, object] = {}
        for descriptor in descriptors:
            self._families[descriptor.name] = descriptor.new_family()

    def send(self, descriptor: MetricDescriptor, value_kind: ValueKind,
             value: float, label_values: Sequence[str]) -> None:
        if descriptor.name not in self._families:
            raise KeyError(f"Unknown metric descriptor {descriptor.name}")
        if value_kind is not descriptor.kind:
            raise ValueError(f"{descriptor.name} is a {descriptor.kind.value}, got {value_kind.value}")
        if len(label_values) != len(descriptor.label_names):
            raise ValueError(f"{descriptor.name} expects {len(descriptor.label_names)} label values, "
                             f"got {len(label_values)}")
        self._families[descriptor.name].add_metric(list(label_values), value)

    def families(self) -> List[object]:
        return list(self._families.values())


class QueueSink:
    """Hands samples to a queue.Queue consumed elsewhere.

    Args:
        sample_queue: Destination queue; bounded queues apply back-pressure
        timeout: Seconds to wait on a full queue, None to block indefinitely
    """

    def __init__(self, sample_queue: queue.Queue, timeout: Optional[float] = None):
        self.queue = sample_queue
        self.timeout = timeout

    def send(self, descriptor: MetricDescriptor, value_kind: ValueKind,
             value: float, label_values: Sequence[str]) -> None:
        self.queue.put(Sample(descriptor, value_kind, value, tuple(label_values)),
                       timeout=self.timeout)


def units_to_bytes(units: int) -> float:
    """Convert a MiB count to bytes: 1 -> 1048576.0, exactly."""
    return float(units << LioConstants.UNIT_SHIFT)


class MetricEmitter:
    """Sends the read, write and iops samples of resolved LUNs to a sink."""

    def __init__(self, sink):
        self.sink = sink
        self.logger = logging.getLogger(__name__)

    def emit(self, descriptors: LioMetricDescriptors, identity: BackstoreIdentity,
             key: CorrelationKey, counters: RawCounters) -> None:
        """Emit three counter samples for one LUN.

        Raises:
            SinkError: If the sink rejects any sample
        """
        triple = descriptors.for_type(identity.backstore_type)
        labels = key.export_labels() + identity.label_values()

        read_bytes = units_to_bytes(counters.read_units)
        write_bytes = units_to_bytes(counters.write_units)
        ops = float(counters.ops)
        self.logger.debug("lio: %s read=%f write=%f ops=%f labels=%s",
                          identity.backstore_type.value, read_bytes, write_bytes, ops, labels)

        for descriptor, value in ((triple.read, read_bytes),
                                  (triple.write, write_bytes),
                                  (triple.iops, ops)):
            try:
                self.sink.send(descriptor, ValueKind.COUNTER, value, labels)
            except Exception as e:
                raise SinkError(f"Failed to send {descriptor.name}: {e}")
