"""
LIO Topology Walker - Collection Cycle Orchestrator

This module provides the TopologyWalker class, which joins the two halves of
LIO state for every exported LUN:

    /sys/kernel/config/target/iscsi/{iqn}/tpgt_*/lun/lun_*/{link}
        links to
    /sys/kernel/config/target/core/{backstoreType}_{number}/{objectName}/

For each LUN of an enabled portal group the walker builds a CorrelationKey,
resolves the backstore through the matching adapter, reads the LUN's port
counters and hands everything to the MetricEmitter.

Failure policy for one cycle:
- SubsystemAbsent: the iSCSI target is not loaded; the cycle emits nothing
  and reports no error
- BackstoreLookupError / StatsUnavailable: the rest of the cycle is skipped;
  samples already emitted are kept
- SinkError: propagated to the caller
- Unknown backstore type: the LUN is skipped, the walk continues
"""

import logging
from typing import Dict, Iterator, Tuple

from .backstores import BackstoreAdapter
from .descriptors import LioMetricDescriptors
from .emitter import MetricEmitter
from .exceptions import BackstoreLookupError, StatsUnavailable, SubsystemAbsent
from .models import BackstoreType, CorrelationKey, optional_identity
from .readers.stats_reader import StatsReader
from .readers.target_reader import TargetReader


class TopologyWalker:
    """Walks the LIO export tree and drives per-LUN correlation.

    Holds no state between cycles other than its collaborators and the
    read-only descriptor set.
    """

    def __init__(self, target_reader: TargetReader, stats_reader: StatsReader,
                 adapters: Dict[BackstoreType, BackstoreAdapter],
                 descriptors: LioMetricDescriptors):
        self.target_reader = target_reader
        self.stats_reader = stats_reader
        self.adapters = adapters
        self.descriptors = descriptors
        self.logger = logging.getLogger(__name__)

    def walk(self) -> Iterator[Tuple[CorrelationKey, BackstoreType]]:
        """Yield a correlation key for every LUN of every enabled portal group.

        LUNs whose backstore type is unknown are skipped.

        Raises:
            SubsystemAbsent: If the iSCSI export tree does not exist
        """
        for target in self.target_reader.read_targets():
            self.logger.debug("lio: walking iscsi %s", target.iqn)
            for group in target.port_groups:
                # No series for disabled groups
                if not group.enabled:
                    continue

                for lun in group.luns:
                    key = CorrelationKey.from_lun(target.iqn, group.tag, lun)
                    self.logger.debug("lio: iqn=%s, tpgt=%s, lun=%s, type=%s, object=%s, typeNumber=%s",
                                      key.iqn, key.tpgt, key.lun, key.store,
                                      key.object_name, key.type_number)

                    backstore_type = BackstoreType.from_token(key.store)
                    if backstore_type is BackstoreType.SKIP:
                        self.logger.debug("lio: skipping unsupported backstore type %s", key.store)
                        continue
                    yield key, backstore_type

    def update_lun(self, emitter: MetricEmitter, key: CorrelationKey,
                   backstore_type: BackstoreType) -> bool:
        """Resolve, read and emit one LUN.

        Returns:
            True if samples were emitted, False if the backstore has no match
        """
        identity = self.adapters[backstore_type].resolve(key)
        self.logger.debug("lio: %s/%s/%s resolved to %s",
                          key.iqn, key.tpgt, key.lun, optional_identity(identity))
        if identity is None:
            return False

        counters = self.stats_reader.read_ops(key.iqn, key.tpgt, key.lun)
        emitter.emit(self.descriptors, identity, key, counters)
        return True

    def run_cycle(self, emitter: MetricEmitter) -> int:
        """Run one collection cycle.

        Returns:
            Number of LUNs for which samples were emitted

        Raises:
            SinkError: If the emitter's sink fails
        """
        emitted = 0
        try:
            for key, backstore_type in self.walk():
                if self.update_lun(emitter, key, backstore_type):
                    emitted += 1
        except SubsystemAbsent as e:
            self.logger.debug("lio: kernel configfs may be not available: %s", e)
            return 0
        except (BackstoreLookupError, StatsUnavailable) as e:
            self.logger.warning("lio: collection cycle aborted after %d LUNs: %s", emitted, e)

        return emitted
