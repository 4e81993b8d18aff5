"""
LIO Backstore Path Reader

Computes the on-disk locations of backstore storage objects and reads their
identity fields. Storage objects live in the configfs core tree:

    {configfs}/target/core/{prefix}_{number}/{object}/udev_path

RBD backed objects additionally need the kernel's RBD device list:

    {sysfs}/devices/rbd/{id}/pool
    {sysfs}/devices/rbd/{id}/name
"""

import logging
import os
from typing import List

from ..constants import LioConstants
from ..exceptions import BackstoreLookupError, SysfsNotFound
from ..models import RbdDevice
from ..sysfs import LioSysfs


class BackstoreReader:
    """Reads backstore storage object attributes from configfs and sysfs."""

    def __init__(self, sysfs: LioSysfs):
        self.sysfs = sysfs
        self.logger = logging.getLogger(__name__)

    def object_path(self, dir_prefix: str, type_number: str, object_name: str) -> str:
        """Return the core tree directory of a storage object.

        Example:
            object_path('fileio', '3', 'obj1') -> '/sys/kernel/config/target/core/fileio_3/obj1'
        """
        return os.path.join(self.sysfs.core_path, f"{dir_prefix}_{type_number}", object_name)

    def object_exists(self, dir_prefix: str, type_number: str, object_name: str) -> bool:
        return self.sysfs.is_directory(self.object_path(dir_prefix, type_number, object_name))

    def read_udev_path(self, dir_prefix: str, type_number: str, object_name: str) -> str:
        """Read the udev_path attribute of a storage object.

        Raises:
            BackstoreLookupError: If the attribute cannot be read
        """
        path = os.path.join(self.object_path(dir_prefix, type_number, object_name),
                            LioConstants.UDEV_PATH_ATTR)
        try:
            return self.sysfs.read_sysfs(path)
        except SysfsNotFound as e:
            raise BackstoreLookupError(
                f"{dir_prefix}_{type_number}/{object_name} is missing {LioConstants.UDEV_PATH_ATTR}: {e}")

    def read_rbd_devices(self) -> List[RbdDevice]:
        """Enumerate mapped RBD devices in ascending numeric ID order.

        A missing device tree means no RBD devices are mapped and yields an
        empty list.

        Raises:
            BackstoreLookupError: If a listed device's pool or name cannot be read
        """
        try:
            entries = self.sysfs.list_directory(self.sysfs.rbd_devices_path)
        except SysfsNotFound:
            self.logger.debug("No RBD device tree at %s", self.sysfs.rbd_devices_path)
            return []

        devices = []
        for device_id in sorted((e for e in entries if e.isdigit()), key=int):
            device_path = os.path.join(self.sysfs.rbd_devices_path, device_id)
            try:
                pool = self.sysfs.read_sysfs(os.path.join(device_path, LioConstants.RBD_POOL_ATTR))
                image = self.sysfs.read_sysfs(os.path.join(device_path, LioConstants.RBD_IMAGE_ATTR))
            except SysfsNotFound as e:
                raise BackstoreLookupError(f"Cannot read RBD device {device_id}: {e}")
            devices.append(RbdDevice(device_id, pool, image))

        return devices
