"""
Metric descriptors for LIO backstore statistics.

The twelve descriptors (four backstore types x iops/read/write) are built once
when the collector is constructed and shared read-only afterwards. A
descriptor only describes a metric; per-cycle sample storage is created from
it with new_family().
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Tuple

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily

from .constants import LioConstants
from .models import BackstoreType


class ValueKind(Enum):
    COUNTER = "counter"
    GAUGE = "gauge"


EXPORT_LABELS = ("iqn", "tpgt", "lun")

BACKSTORE_LABELS = {
    BackstoreType.FILEIO: ("fileio", "object", "filename"),
    BackstoreType.IBLOCK: ("iblock", "object", "blockname"),
    BackstoreType.RBD: ("rbd", "pool", "image"),
    BackstoreType.RDMCP: ("rdmcp", "object"),
}

# (subsystem, human readable backstore name)
BACKSTORE_SUBSYSTEMS = {
    BackstoreType.FILEIO: ("lio_fileio", "FileIO"),
    BackstoreType.IBLOCK: ("lio_iblock", "IBlock"),
    BackstoreType.RBD: ("lio_rbd", "RBD"),
    BackstoreType.RDMCP: ("lio_rdmcp", "Memory Copy RAMDisk"),
}


@dataclass(frozen=True)
class MetricDescriptor:
    """Immutable description of one exported metric.

    Attributes:
        name: Fully qualified metric name, e.g. 'node_lio_fileio_read_total'
        documentation: HELP text
        label_names: Ordered label names; sample label values must match
        kind: Counter or gauge semantics
    """

    name: str
    documentation: str
    label_names: Tuple[str, ...]
    kind: ValueKind = ValueKind.COUNTER

    def new_family(self):
        """Create an empty prometheus_client metric family for one cycle."""
        if self.kind is ValueKind.COUNTER:
            return CounterMetricFamily(self.name, self.documentation, labels=list(self.label_names))
        return GaugeMetricFamily(self.name, self.documentation, labels=list(self.label_names))


@dataclass(frozen=True)
class BackstoreDescriptors:
    """The iops/read/write descriptor triple of one backstore type."""

    iops: MetricDescriptor
    read: MetricDescriptor
    write: MetricDescriptor

    def __iter__(self) -> Iterator[MetricDescriptor]:
        return iter((self.iops, self.read, self.write))


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join non-empty name parts with underscores."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


class LioMetricDescriptors:
    """The complete, immutable descriptor set, indexed by backstore type."""

    def __init__(self, namespace: str = LioConstants.NAMESPACE):
        by_type = {}
        for backstore_type, (subsystem, title) in BACKSTORE_SUBSYSTEMS.items():
            labels = EXPORT_LABELS + BACKSTORE_LABELS[backstore_type]
            by_type[backstore_type] = BackstoreDescriptors(
                iops=MetricDescriptor(
                    build_fq_name(namespace, subsystem, "iops_total"),
                    f"iSCSI {title} backstore transport operations.",
                    labels,
                ),
                read=MetricDescriptor(
                    build_fq_name(namespace, subsystem, "read_total"),
                    f"iSCSI {title} backstore Read in byte.",
                    labels,
                ),
                write=MetricDescriptor(
                    build_fq_name(namespace, subsystem, "write_total"),
                    f"iSCSI {title} backstore Write in byte.",
                    labels,
                ),
            )
        self._by_type: Dict[BackstoreType, BackstoreDescriptors] = by_type

    def for_type(self, backstore_type: BackstoreType) -> BackstoreDescriptors:
        return self._by_type[backstore_type]

    def __iter__(self) -> Iterator[MetricDescriptor]:
        for descriptors in self._by_type.values():
            yield from descriptors

    def __len__(self) -> int:
        return 3 * len(self._by_type)
