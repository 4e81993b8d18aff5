"""
Pytest configuration and shared fixtures for LIO exporter tests.
"""

import os
import pytest
import sys
from pathlib import Path

# Add the package to Python path for testing
test_dir = Path(__file__).parent
package_root = test_dir.parent
sys.path.insert(0, str(package_root))

from lioexporter.sysfs import LioSysfs  # noqa: E402


class LioTree:
    """Builds a miniature configfs/sysfs layout the way the kernel exposes it.

    Export tree:   {configfs}/target/iscsi/{iqn}/tpgt_{tag}/lun/lun_{n}/{link}
    Core tree:     {configfs}/target/core/{type}_{number}/{object}/udev_path
    RBD devices:   {sysfs}/devices/rbd/{id}/{pool,name}
    """

    def __init__(self, root: Path):
        self.sysfs_path = root / "sys"
        self.configfs_path = root / "config"
        self.iscsi = self.configfs_path / "target" / "iscsi"
        self.core = self.configfs_path / "target" / "core"
        self.rbd = self.sysfs_path / "devices" / "rbd"

        self.iscsi.mkdir(parents=True)
        self.core.mkdir(parents=True)
        # Non-target entries that live next to the IQNs
        (self.iscsi / "lio_version").write_text("Datera Inc. iSCSI Target v4.1.0\n")
        (self.iscsi / "discovery_auth").mkdir()

    def sysfs(self) -> LioSysfs:
        return LioSysfs(str(self.sysfs_path), str(self.configfs_path))

    def add_group(self, iqn: str, tag: str, enabled: bool = True) -> Path:
        path = self.iscsi / iqn / f"tpgt_{tag}"
        (path / "lun").mkdir(parents=True, exist_ok=True)
        (path / "enable").write_text("1\n" if enabled else "0\n")
        return path

    def add_lun(self, iqn: str, tag: str, lun: str, store_dir: str, object_name: str,
                counters=(0, 0, 0), link_name: str = "5f3a1c2b9e") -> Path:
        lun_path = self.iscsi / iqn / f"tpgt_{tag}" / "lun" / f"lun_{lun}"
        (lun_path / "statistics" / "scsi_tgt_port").mkdir(parents=True, exist_ok=True)
        (lun_path / "alua_tg_pt_gp").write_text("default_tg_pt_gp\n")
        os.symlink(f"../../../../../../target/core/{store_dir}/{object_name}",
                   lun_path / link_name)
        self.set_counters(iqn, tag, lun, *counters)
        return lun_path

    def set_counters(self, iqn: str, tag: str, lun: str, read: int, write: int, ops: int):
        stats = self.iscsi / iqn / f"tpgt_{tag}" / "lun" / f"lun_{lun}" / "statistics" / "scsi_tgt_port"
        (stats / "read_mbytes").write_text(f"{read}\n")
        (stats / "write_mbytes").write_text(f"{write}\n")
        (stats / "in_cmds").write_text(f"{ops}\n")

    def add_fileio(self, number: str, object_name: str, filename: str) -> Path:
        path = self.core / f"fileio_{number}" / object_name
        path.mkdir(parents=True)
        (path / "udev_path").write_text(f"{filename}\n")
        return path

    def add_iblock(self, number: str, object_name: str, device: str) -> Path:
        path = self.core / f"iblock_{number}" / object_name
        path.mkdir(parents=True)
        (path / "udev_path").write_text(f"{device}\n")
        return path

    def add_rbd_backstore(self, number: str, object_name: str) -> Path:
        path = self.core / f"rbd_{number}" / object_name
        path.mkdir(parents=True)
        return path

    def add_rdmcp(self, number: str, object_name: str) -> Path:
        path = self.core / f"rd_mcp_{number}" / object_name
        path.mkdir(parents=True)
        return path

    def add_rbd_device(self, device_id: str, pool: str, image: str) -> Path:
        path = self.rbd / device_id
        path.mkdir(parents=True)
        (path / "pool").write_text(f"{pool}\n")
        (path / "name").write_text(f"{image}\n")
        return path


@pytest.fixture
def lio_tree(tmp_path):
    """An empty but loaded LIO target: export and core trees exist."""
    return LioTree(tmp_path)


@pytest.fixture
def fileio_tree(lio_tree):
    """One enabled target exporting a single fileio LUN.

    iqn.test:1 / tpgt_1 / lun_0 -> core/fileio_3/obj1 (/backing/file.img),
    counters read=2 MiB, write=1 MiB, ops=10.
    """
    lio_tree.add_group("iqn.test:1", "1")
    lio_tree.add_fileio("3", "obj1", "/backing/file.img")
    lio_tree.add_lun("iqn.test:1", "1", "0", "fileio_3", "obj1", counters=(2, 1, 10))
    return lio_tree
