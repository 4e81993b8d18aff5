"""
LIO iSCSI Statistics Exporter

This package discovers the LIO (Linux-IO) iSCSI export topology through
configfs, correlates every exported LUN with its backing storage object and
exposes per-LUN read/write/iops counters through prometheus_client.

Main Classes:
    LioCollector: prometheus_client collector, one topology walk per scrape
    TopologyWalker: Collection cycle orchestrator
    LioSysfs: Read-only sysfs/configfs interface

Exceptions:
    LioError: Base exception for exporter failures
"""

import logging

from .constants import LioConstants
from .exceptions import (
    LioError,
    SysfsNotFound,
    SubsystemAbsent,
    BackstoreLookupError,
    StatsUnavailable,
    SinkError
)
from .models import BackstoreType, CorrelationKey, RawCounters
from .sysfs import LioSysfs
from .descriptors import LioMetricDescriptors, MetricDescriptor, ValueKind
from .emitter import MetricEmitter, FamilySink, QueueSink, Sample
from .walker import TopologyWalker
from .collector import LioCollector

# Library logger stays silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'LioCollector',
    'TopologyWalker',
    'LioSysfs',
    'LioMetricDescriptors',
    'MetricDescriptor',
    'ValueKind',
    'MetricEmitter',
    'FamilySink',
    'QueueSink',
    'Sample',
    'BackstoreType',
    'CorrelationKey',
    'RawCounters',
    'LioConstants',
    'LioError',
    'SysfsNotFound',
    'SubsystemAbsent',
    'BackstoreLookupError',
    'StatsUnavailable',
    'SinkError'
]
