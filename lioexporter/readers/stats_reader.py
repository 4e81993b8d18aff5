"""
LIO Port Statistics Reader

Reads the cumulative SCSI target port counters of an exported LUN:

    {configfs}/target/iscsi/{iqn}/tpgt_{tag}/lun/lun_{n}/statistics/scsi_tgt_port/
        read_mbytes, write_mbytes, in_cmds

Values are returned exactly as the kernel reports them (MiB and commands);
conversion to bytes happens in the emitter.
"""

import logging
import os

from ..constants import LioConstants
from ..exceptions import StatsUnavailable, SysfsNotFound
from ..models import RawCounters
from ..sysfs import LioSysfs


class StatsReader:
    """Reads per-LUN port statistics from configfs."""

    def __init__(self, sysfs: LioSysfs):
        self.sysfs = sysfs
        self.logger = logging.getLogger(__name__)

    def stats_path(self, iqn: str, tpgt: str, lun: str) -> str:
        return os.path.join(self.sysfs.iscsi_path, iqn,
                            f"{LioConstants.TPGT_PREFIX}{tpgt}",
                            LioConstants.LUN_DIR,
                            f"{LioConstants.LUN_PREFIX}{lun}",
                            LioConstants.PORT_STATS_DIR)

    def read_ops(self, iqn: str, tpgt: str, lun: str) -> RawCounters:
        """Read (read MiB, write MiB, commands) for one LUN.

        Raises:
            StatsUnavailable: If any counter file is missing or not an integer
        """
        path = self.stats_path(iqn, tpgt, lun)
        try:
            read_units = self.sysfs.read_sysfs_uint(os.path.join(path, LioConstants.READ_MBYTES_ATTR))
            write_units = self.sysfs.read_sysfs_uint(os.path.join(path, LioConstants.WRITE_MBYTES_ATTR))
            ops = self.sysfs.read_sysfs_uint(os.path.join(path, LioConstants.IN_CMDS_ATTR))
        except (SysfsNotFound, ValueError) as e:
            raise StatsUnavailable(f"Port statistics unavailable for {iqn}/{tpgt}/{lun}: {e}")

        self.logger.debug("lio: %s/%s/%s read=%d write=%d ops=%d",
                          iqn, tpgt, lun, read_units, write_units, ops)
        return RawCounters(read_units, write_units, ops)
