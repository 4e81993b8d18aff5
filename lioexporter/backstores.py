"""
Backstore adapters.

One adapter per supported backstore type. Each adapter turns a CorrelationKey
into the identity of the storage object behind the LUN, or None when the
backstore legitimately has no counterpart this cycle (an unmapped RBD image,
a removed RAM disk). Unreadable paths raise BackstoreLookupError.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, Optional

from .exceptions import BackstoreLookupError
from .models import (
    BackstoreIdentity,
    BackstoreType,
    CorrelationKey,
    FileioIdentity,
    IblockIdentity,
    RbdIdentity,
    RdmcpIdentity,
)
from .readers.backstore_reader import BackstoreReader


class BackstoreAdapter(ABC):
    """Abstract base class for backstore resolution strategies.

    Attributes:
        dir_prefix: Prefix of the core tree directory ('fileio' in fileio_3)
    """

    backstore_type: BackstoreType
    dir_prefix: str

    def __init__(self, reader: BackstoreReader):
        self.reader = reader
        self.logger = logging.getLogger(__name__)

    def identity_name(self, key: CorrelationKey) -> str:
        return f"{self.dir_prefix}_{key.type_number}"

    @abstractmethod
    def resolve(self, key: CorrelationKey) -> Optional[BackstoreIdentity]:
        """Resolve the storage object behind a LUN.

        Returns:
            The backstore identity, or None if no matching object exists

        Raises:
            BackstoreLookupError: If the backstore's paths cannot be read
        """
        pass


class FileioAdapter(BackstoreAdapter):
    """core/fileio_{N}/{object}/udev_path holds the backing file name"""

    backstore_type = BackstoreType.FILEIO
    dir_prefix = "fileio"

    def resolve(self, key: CorrelationKey) -> Optional[BackstoreIdentity]:
        filename = self.reader.read_udev_path(self.dir_prefix, key.type_number, key.object_name)
        return FileioIdentity(self.identity_name(key), key.object_name, filename)


class IblockAdapter(BackstoreAdapter):
    """core/iblock_{N}/{object}/udev_path holds the backing device path"""

    backstore_type = BackstoreType.IBLOCK
    dir_prefix = "iblock"

    def resolve(self, key: CorrelationKey) -> Optional[BackstoreIdentity]:
        udev_path = self.reader.read_udev_path(self.dir_prefix, key.type_number, key.object_name)
        return IblockIdentity(self.identity_name(key), key.object_name, os.path.basename(udev_path))


class RbdAdapter(BackstoreAdapter):
    """Match a LUN's '{pool}-{image}' object against the mapped RBD devices.

    The export link only carries the composite object name, which cannot be
    split reliably because pool and image names may contain '-'. The device
    tree under /sys/devices/rbd holds pool and image separately, so every
    mapped device is compared by its composite name and the first match wins.
    """

    backstore_type = BackstoreType.RBD
    dir_prefix = "rbd"

    def resolve(self, key: CorrelationKey) -> Optional[BackstoreIdentity]:
        for device in self.reader.read_rbd_devices():
            if device.object_name != key.object_name:
                continue

            self.logger.debug("lio: %s matches RBD device %s", key.object_name, device.device_id)
            if not self.reader.object_exists(self.dir_prefix, key.type_number, device.object_name):
                raise BackstoreLookupError(
                    f"RBD device {device.device_id} has no backstore "
                    f"{self.identity_name(key)}/{device.object_name}")
            return RbdIdentity(self.identity_name(key), device.pool, device.image)

        self.logger.debug("lio: no RBD device for %s", key.object_name)
        return None


class RdmcpAdapter(BackstoreAdapter):
    # no udev_path for RAM disks, so no file name either
    backstore_type = BackstoreType.RDMCP
    dir_prefix = "rd_mcp"

    def resolve(self, key: CorrelationKey) -> Optional[BackstoreIdentity]:
        if not self.reader.object_exists(self.dir_prefix, key.type_number, key.object_name):
            return None
        return RdmcpIdentity(self.identity_name(key), key.object_name)


ADAPTER_CLASSES = (FileioAdapter, IblockAdapter, RbdAdapter, RdmcpAdapter)


def build_adapters(reader: BackstoreReader) -> Dict[BackstoreType, BackstoreAdapter]:
    """Build the dispatch table from backstore type to adapter.

    BackstoreType.SKIP deliberately has no entry.
    """
    return {cls.backstore_type: cls(reader) for cls in ADAPTER_CLASSES}
