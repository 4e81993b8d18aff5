"""
LIO Sysfs Interface Module

This module provides the low-level, read-only interface to the two kernel
pseudo-filesystems the exporter observes: configfs (LIO target configuration
under /sys/kernel/config/target) and sysfs (RBD device enumeration under
/sys/devices/rbd).

The LioSysfs class implements:
- Path construction relative to configurable sysfs/configfs roots
- Attribute reads with whitespace stripping and integer parsing
- Symbolic link resolution
- Directory listing

Every failure to find or read an entry surfaces as SysfsNotFound so that
higher layers can translate it into their own error category.
"""

import os
import logging
from typing import List

from .constants import LioConstants
from .exceptions import SysfsNotFound


class LioSysfs:
    """Read-only sysfs/configfs interface handler.

    Attributes:
        sysfs_path: Root of the sysfs mount (default /sys)
        configfs_path: Root of the configfs mount (default /sys/kernel/config)
        iscsi_path: LIO iSCSI export tree
        core_path: LIO backstore (core) tree
        rbd_devices_path: Kernel RBD device enumeration tree
    """

    def __init__(self, sysfs_path: str = LioConstants.DEFAULT_SYSFS_PATH,
                 configfs_path: str = LioConstants.DEFAULT_CONFIGFS_PATH):
        self.sysfs_path = sysfs_path
        self.configfs_path = configfs_path
        self.iscsi_path = os.path.join(configfs_path, LioConstants.TARGET_ISCSI)
        self.core_path = os.path.join(configfs_path, LioConstants.TARGET_CORE)
        self.rbd_devices_path = os.path.join(sysfs_path, LioConstants.RBD_DEVICES)
        self.logger = logging.getLogger(__name__)

    def valid_path(self, path: str) -> bool:
        """Check if a sysfs path is valid and accessible"""
        return os.path.exists(path) and os.access(path, os.R_OK)

    def read_sysfs(self, path: str) -> str:
        """Read data from a sysfs file.

        Args:
            path: Absolute sysfs path to read from

        Returns:
            File contents with whitespace stripped

        Raises:
            SysfsNotFound: If the file is missing, unreadable or not valid UTF-8
        """
        try:
            if not self.valid_path(path):
                raise SysfsNotFound(f"Cannot read from {path}")

            with open(path, 'r') as f:
                return f.read().strip()

        except (OSError, UnicodeDecodeError) as e:
            raise SysfsNotFound(f"Error reading from {path}: {e}")

    def read_sysfs_uint(self, path: str) -> int:
        """Read a non-negative integer attribute.

        Raises:
            SysfsNotFound: If the file is missing or unreadable
            ValueError: If the contents are not a non-negative integer
        """
        raw = self.read_sysfs(path)
        if not raw.isdigit():
            raise ValueError(f"Expected unsigned integer in {path}, got {raw!r}")
        return int(raw)

    def read_link(self, path: str) -> str:
        """Return the target of a symbolic link without resolving it."""
        try:
            return os.readlink(path)
        except OSError as e:
            raise SysfsNotFound(f"Error reading link {path}: {e}")

    def is_link(self, path: str) -> bool:
        """Check if a path is a symbolic link, without following it"""
        return os.path.islink(path)

    def is_directory(self, path: str) -> bool:
        """Check if a path is a directory, following symbolic links"""
        return os.path.isdir(path)

    def list_directory(self, path: str) -> List[str]:
        """List contents of a sysfs directory in sorted order.

        Raises:
            SysfsNotFound: If the directory is missing or unreadable
        """
        try:
            if not self.valid_path(path):
                raise SysfsNotFound(f"Cannot list {path}")
            return sorted(f for f in os.listdir(path) if not f.startswith('.'))
        except OSError as e:
            raise SysfsNotFound(f"Error listing {path}: {e}")
