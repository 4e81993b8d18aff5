"""
LIO Export Topology Reader

Handles discovery of iSCSI targets, their target portal groups and the LUNs
each group exports. This module reads only the configfs export tree; backstore
details live under the core tree and are handled by BackstoreReader.

Layout read by this module:

    {configfs}/target/iscsi/{iqn}/tpgt_{tag}/enable
    {configfs}/target/iscsi/{iqn}/tpgt_{tag}/lun/lun_{n}/{link}
        -> ../../../../../../target/core/{type}_{number}/{object}
"""

import logging
import os
from typing import List, Optional

from ..constants import LioConstants
from ..exceptions import SysfsNotFound, SubsystemAbsent
from ..models import ExportTarget, PortGroup, LunEntry
from ..sysfs import LioSysfs


class TargetReader:
    """Reads LIO iSCSI export topology from configfs."""

    def __init__(self, sysfs: LioSysfs):
        self.sysfs = sysfs
        self.logger = logging.getLogger(__name__)

    def read_targets(self) -> List[ExportTarget]:
        """Read all targets and their portal groups.

        LUNs are only enumerated for enabled portal groups; disabled groups are
        returned with an empty LUN list.

        Raises:
            SubsystemAbsent: If the iSCSI export tree does not exist
        """
        try:
            entries = self.sysfs.list_directory(self.sysfs.iscsi_path)
        except SysfsNotFound as e:
            raise SubsystemAbsent(f"LIO iSCSI tree not available: {e}")

        targets = []
        for iqn in entries:
            if not iqn.startswith(LioConstants.IQN_PREFIX):
                continue
            target_path = os.path.join(self.sysfs.iscsi_path, iqn)
            targets.append(ExportTarget(iqn, self.read_port_groups(target_path)))

        return targets

    def read_port_groups(self, target_path: str) -> List[PortGroup]:
        """Read the portal groups of a single target."""
        groups = []
        try:
            entries = self.sysfs.list_directory(target_path)
        except SysfsNotFound:
            # Target removed between listing and reading
            self.logger.debug("Target %s disappeared during scan", target_path)
            return groups

        for entry in entries:
            if not entry.startswith(LioConstants.TPGT_PREFIX):
                continue
            tpgt_path = os.path.join(target_path, entry)
            tag = entry[len(LioConstants.TPGT_PREFIX):]
            enabled = self._is_enabled(tpgt_path)
            self.logger.debug("lio: iscsi %s isEnable=%s", tpgt_path, enabled)

            group = PortGroup(tag, enabled)
            if enabled:
                group.luns = self.read_luns(tpgt_path)
            groups.append(group)

        return groups

    def read_luns(self, tpgt_path: str) -> List[LunEntry]:
        """Read all LUN entries of a portal group that link to a backstore."""
        luns = []
        lun_root = os.path.join(tpgt_path, LioConstants.LUN_DIR)
        try:
            entries = self.sysfs.list_directory(lun_root)
        except SysfsNotFound:
            return luns

        for entry in entries:
            if not entry.startswith(LioConstants.LUN_PREFIX):
                continue
            lun = self._read_lun(os.path.join(lun_root, entry))
            if lun is not None:
                luns.append(lun)

        return luns

    def _is_enabled(self, tpgt_path: str) -> bool:
        """A portal group is enabled when its 'enable' attribute reads 1"""
        try:
            value = self.sysfs.read_sysfs(os.path.join(tpgt_path, LioConstants.ENABLE_ATTR))
        except SysfsNotFound:
            return False
        return value == LioConstants.ENABLED_VALUE

    def _read_lun(self, lun_path: str) -> Optional[LunEntry]:
        """Build a LunEntry from the backstore symlink inside a LUN directory.

        The LUN directory holds attributes, a statistics directory and exactly
        one symbolic link to the storage object in the core tree. Returns None
        when no such link exists.
        """
        lun_name = os.path.basename(lun_path)[len(LioConstants.LUN_PREFIX):]
        try:
            entries = self.sysfs.list_directory(lun_path)
        except SysfsNotFound:
            return None

        for entry in entries:
            link_path = os.path.join(lun_path, entry)
            if not self.sysfs.is_link(link_path):
                continue
            try:
                link_target = self.sysfs.read_link(link_path)
            except SysfsNotFound:
                continue
            parsed = parse_backstore_link(link_target)
            if parsed is None:
                self.logger.debug("Unrecognised backstore link %s -> %s", link_path, link_target)
                continue
            backstore_type, type_number, object_name = parsed
            return LunEntry(lun_name, backstore_type, object_name, type_number)

        self.logger.debug("LUN %s has no backstore link", lun_path)
        return None


def parse_backstore_link(link_target: str):
    """Split a core-tree link target into (type, number, object).

    Example:
        '../../../../../../target/core/fileio_3/obj1' -> ('fileio', '3', 'obj1')
        '../../../../../../target/core/rd_mcp_0/ram0' -> ('rd_mcp', '0', 'ram0')

    Returns None if the parent directory name has no '_' separator.
    """
    target_dir, object_name = os.path.split(os.path.normpath(link_target))
    type_with_number = os.path.basename(target_dir)
    type_token, sep, type_number = type_with_number.rpartition('_')
    if not sep or not type_token or not object_name:
        return None
    return type_token, type_number, object_name
