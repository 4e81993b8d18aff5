"""
prometheus_client collector for LIO backstore statistics.

LioCollector wires the readers, backstore adapters and descriptor set together
once, then runs a full topology walk on every scrape. Register it with a
prometheus_client CollectorRegistry:

    REGISTRY.register(LioCollector())
"""

import logging

from .backstores import build_adapters
from .constants import LioConstants
from .descriptors import LioMetricDescriptors
from .emitter import FamilySink, MetricEmitter
from .readers import BackstoreReader, StatsReader, TargetReader
from .sysfs import LioSysfs
from .walker import TopologyWalker


class LioCollector:
    """Collector exposing per-LUN iops, read and write counters.

    Args:
        sysfs_path: sysfs mount point (RBD device enumeration)
        configfs_path: configfs mount point (LIO target configuration)
        namespace: Metric name prefix
    """

    def __init__(self, sysfs_path: str = LioConstants.DEFAULT_SYSFS_PATH,
                 configfs_path: str = LioConstants.DEFAULT_CONFIGFS_PATH,
                 namespace: str = LioConstants.NAMESPACE):
        self.sysfs = LioSysfs(sysfs_path, configfs_path)
        self.descriptors = LioMetricDescriptors(namespace)
        self.walker = TopologyWalker(
            TargetReader(self.sysfs),
            StatsReader(self.sysfs),
            build_adapters(BackstoreReader(self.sysfs)),
            self.descriptors,
        )
        self.logger = logging.getLogger(__name__)

    def describe(self):
        """Yield empty families so registration does not scan the filesystem."""
        for descriptor in self.descriptors:
            yield descriptor.new_family()

    def collect(self):
        self.logger.debug("lio: Update lioCollector")
        sink = FamilySink(self.descriptors)
        emitted = self.walker.run_cycle(MetricEmitter(sink))
        self.logger.debug("lio: collected %d LUNs", emitted)
        yield from sink.families()
