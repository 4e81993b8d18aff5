"""
Data structures for LIO topology and backstore identity.

This module defines the values produced by one topology scan: export targets,
their portal groups and LUN entries, the correlation key threaded through
backstore resolution, and the four backstore identity shapes.

None of these objects outlive a collection cycle.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
from abc import ABC, abstractmethod


class BackstoreType(Enum):
    """Backstore kinds the exporter knows how to correlate.

    SKIP stands for every type token the exporter does not recognise; LUNs of
    that kind are passed over so newer kernels with new backstores keep working.
    """

    FILEIO = "fileio"
    IBLOCK = "iblock"
    RBD = "rbd"
    RDMCP = "rdmcp"
    SKIP = "skip"

    @classmethod
    def from_token(cls, token: str) -> "BackstoreType":
        """Map a core directory type token (e.g. 'fileio', 'rd_mcp') to a variant."""
        return _TOKEN_MAP.get(token, cls.SKIP)


_TOKEN_MAP = {
    "fileio": BackstoreType.FILEIO,
    "iblock": BackstoreType.IBLOCK,
    "rbd": BackstoreType.RBD,
    "rdmcp": BackstoreType.RDMCP,
    # configfs names RAM disk directories rd_mcp_{N}
    "rd_mcp": BackstoreType.RDMCP,
}


@dataclass
class LunEntry:
    """A LUN exported by a portal group.

    Attributes:
        lun: LUN number as it appears after the 'lun_' prefix
        backstore_type: Type token parsed from the link target (e.g. 'fileio')
        object_name: Backstore object directory name the link points at
        type_number: Backstore instance ordinal (the N of fileio_N)
    """

    lun: str
    backstore_type: str
    object_name: str
    type_number: str


@dataclass
class PortGroup:
    """Target portal group. LUNs are only enumerated for enabled groups."""

    tag: str
    enabled: bool
    luns: List[LunEntry] = field(default_factory=list)


@dataclass
class ExportTarget:
    iqn: str
    port_groups: List[PortGroup] = field(default_factory=list)


@dataclass(frozen=True)
class CorrelationKey:
    """Export identity plus the hints needed to find the LUN's backstore.

    The core tree directory for a LUN is {store}_{type_number}/{object_name}.
    """

    iqn: str
    tpgt: str
    lun: str
    store: str
    object_name: str
    type_number: str

    @classmethod
    def from_lun(cls, iqn: str, tpgt: str, lun: LunEntry) -> "CorrelationKey":
        return cls(iqn, tpgt, lun.lun, lun.backstore_type, lun.object_name, lun.type_number)

    def export_labels(self) -> Tuple[str, str, str]:
        return (self.iqn, self.tpgt, self.lun)


@dataclass(frozen=True)
class RawCounters:
    """Cumulative port counters: read/write in MiB, ops in SCSI commands."""

    read_units: int
    write_units: int
    ops: int


@dataclass(frozen=True)
class BackstoreIdentity(ABC):
    """Abstract base class for a resolved backstore.

    Subclasses carry the identity fields of one backstore type and know which
    label values follow the export labels (iqn, tpgt, lun).
    """

    name: str

    @property
    @abstractmethod
    def backstore_type(self) -> BackstoreType:
        """Return the backstore variant this identity belongs to."""
        pass

    @abstractmethod
    def label_values(self) -> Tuple[str, ...]:
        """Return the backstore-specific label values in descriptor order."""
        pass


@dataclass(frozen=True)
class FileioIdentity(BackstoreIdentity):
    """File-backed storage object; filename is the backing file path."""

    object_name: str
    filename: str

    @property
    def backstore_type(self) -> BackstoreType:
        return BackstoreType.FILEIO

    def label_values(self) -> Tuple[str, ...]:
        return (self.name, self.object_name, self.filename)


@dataclass(frozen=True)
class IblockIdentity(BackstoreIdentity):
    """Block-device-backed storage object; block_device is e.g. 'sdb'."""

    object_name: str
    block_device: str

    @property
    def backstore_type(self) -> BackstoreType:
        return BackstoreType.IBLOCK

    def label_values(self) -> Tuple[str, ...]:
        return (self.name, self.object_name, self.block_device)


@dataclass(frozen=True)
class RbdIdentity(BackstoreIdentity):
    pool: str
    image: str

    @property
    def backstore_type(self) -> BackstoreType:
        return BackstoreType.RBD

    def label_values(self) -> Tuple[str, ...]:
        return (self.name, self.pool, self.image)


@dataclass(frozen=True)
class RdmcpIdentity(BackstoreIdentity):
    # RAM disks have no backing file
    object_name: str

    @property
    def backstore_type(self) -> BackstoreType:
        return BackstoreType.RDMCP

    def label_values(self) -> Tuple[str, ...]:
        return (self.name, self.object_name)


@dataclass(frozen=True)
class RbdDevice:
    """A mapped kernel RBD device as listed under /sys/devices/rbd."""

    device_id: str
    pool: str
    image: str

    @property
    def object_name(self) -> str:
        """Backstore directory name LIO uses for this device: '{pool}-{image}'."""
        return f"{self.pool}-{self.image}"


def optional_identity(identity: Optional[BackstoreIdentity]) -> str:
    """Render an identity (or its absence) for log messages."""
    if identity is None:
        return "<absent>"
    return "/".join(identity.label_values())
