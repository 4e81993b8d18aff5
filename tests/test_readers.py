#!/usr/bin/env python3
"""
Unit tests for the LIO readers.

Most tests build a real configfs/sysfs layout under tmp_path (see conftest.py)
so that directory listing, symlink parsing and attribute reads all run against
the filesystem. A few tests mock LioSysfs to pin down how readers translate
low-level failures into their own error categories.
"""

import os
import pytest
from unittest.mock import Mock

from lioexporter.exceptions import (
    BackstoreLookupError,
    StatsUnavailable,
    SubsystemAbsent,
    SysfsNotFound,
)
from lioexporter.models import RawCounters, RbdDevice
from lioexporter.readers import BackstoreReader, StatsReader, TargetReader, parse_backstore_link
from lioexporter.sysfs import LioSysfs


class TestParseBackstoreLink:
    """Link targets inside a LUN directory point into the core tree."""

    def test_fileio_link(self):
        assert parse_backstore_link("../../../../../../target/core/fileio_3/obj1") == ("fileio", "3", "obj1")

    def test_rd_mcp_splits_on_last_underscore(self):
        assert parse_backstore_link("../../../../../../target/core/rd_mcp_0/ram0") == ("rd_mcp", "0", "ram0")

    def test_absolute_link_with_trailing_slash(self):
        assert parse_backstore_link("/sys/kernel/config/target/core/iblock_12/disk_a/") == \
            ("iblock", "12", "disk_a")

    def test_directory_without_number(self):
        assert parse_backstore_link("../../core/fileio/obj1") is None


class TestTargetReader:
    """Test TargetReader against a real export tree."""

    def test_read_targets_basic(self, fileio_tree):
        reader = TargetReader(fileio_tree.sysfs())
        targets = reader.read_targets()

        assert [t.iqn for t in targets] == ["iqn.test:1"]
        groups = targets[0].port_groups
        assert len(groups) == 1
        assert groups[0].tag == "1"
        assert groups[0].enabled is True

        lun = groups[0].luns[0]
        assert lun.lun == "0"
        assert lun.backstore_type == "fileio"
        assert lun.type_number == "3"
        assert lun.object_name == "obj1"

    def test_non_target_entries_ignored(self, lio_tree):
        """lio_version and discovery_auth live next to the IQNs"""
        reader = TargetReader(lio_tree.sysfs())
        assert reader.read_targets() == []

    def test_disabled_group_has_no_luns(self, lio_tree):
        lio_tree.add_group("iqn.test:1", "1", enabled=False)
        lio_tree.add_fileio("0", "obj", "/f.img")
        lio_tree.add_lun("iqn.test:1", "1", "0", "fileio_0", "obj")

        groups = TargetReader(lio_tree.sysfs()).read_targets()[0].port_groups
        assert groups[0].enabled is False
        assert groups[0].luns == []

    def test_missing_enable_attribute_means_disabled(self, lio_tree):
        group_path = lio_tree.add_group("iqn.test:1", "1")
        os.remove(group_path / "enable")

        groups = TargetReader(lio_tree.sysfs()).read_targets()[0].port_groups
        assert groups[0].enabled is False

    def test_undecodable_enable_attribute_means_disabled(self, lio_tree):
        group_path = lio_tree.add_group("iqn.test:1", "1")
        (group_path / "enable").write_bytes(b"\xff\n")
        lio_tree.add_fileio("0", "obj", "/f.img")
        lio_tree.add_lun("iqn.test:1", "1", "0", "fileio_0", "obj")

        groups = TargetReader(lio_tree.sysfs()).read_targets()[0].port_groups
        assert groups[0].enabled is False
        assert groups[0].luns == []

    def test_lun_without_link_skipped(self, lio_tree):
        lio_tree.add_group("iqn.test:1", "1")
        lio_tree.add_lun("iqn.test:1", "1", "0", "fileio_0", "obj")
        orphan = lio_tree.iscsi / "iqn.test:1" / "tpgt_1" / "lun" / "lun_1"
        (orphan / "statistics").mkdir(parents=True)

        luns = TargetReader(lio_tree.sysfs()).read_targets()[0].port_groups[0].luns
        assert [lun.lun for lun in luns] == ["0"]

    def test_multiple_targets_and_groups_sorted(self, lio_tree):
        lio_tree.add_group("iqn.b", "2")
        lio_tree.add_group("iqn.b", "1")
        lio_tree.add_group("iqn.a", "1")

        targets = TargetReader(lio_tree.sysfs()).read_targets()
        assert [t.iqn for t in targets] == ["iqn.a", "iqn.b"]
        assert [g.tag for g in targets[1].port_groups] == ["1", "2"]

    def test_subsystem_absent(self, tmp_path):
        reader = TargetReader(LioSysfs(str(tmp_path / "sys"), str(tmp_path / "config")))
        with pytest.raises(SubsystemAbsent):
            reader.read_targets()

    def test_subsystem_absent_with_mock_sysfs(self):
        """Listing failures of the iSCSI root become SubsystemAbsent."""
        mock_sysfs = Mock(spec=LioSysfs)
        mock_sysfs.iscsi_path = "/sys/kernel/config/target/iscsi"
        mock_sysfs.list_directory.side_effect = SysfsNotFound("Cannot list")

        reader = TargetReader(mock_sysfs)
        with pytest.raises(SubsystemAbsent):
            reader.read_targets()
        mock_sysfs.list_directory.assert_called_once_with("/sys/kernel/config/target/iscsi")


class TestBackstoreReader:
    """Test storage object lookups in the core and RBD device trees."""

    def test_object_path(self, lio_tree):
        reader = BackstoreReader(lio_tree.sysfs())
        assert reader.object_path("fileio", "3", "obj1") == str(lio_tree.core / "fileio_3" / "obj1")

    def test_read_udev_path(self, lio_tree):
        lio_tree.add_fileio("3", "obj1", "/backing/file.img")
        reader = BackstoreReader(lio_tree.sysfs())
        assert reader.read_udev_path("fileio", "3", "obj1") == "/backing/file.img"

    def test_read_udev_path_missing(self, lio_tree):
        reader = BackstoreReader(lio_tree.sysfs())
        with pytest.raises(BackstoreLookupError):
            reader.read_udev_path("fileio", "3", "obj1")

    def test_read_udev_path_undecodable(self, lio_tree):
        path = lio_tree.add_fileio("3", "obj1", "/unused")
        (path / "udev_path").write_bytes(b"/backing/\xff\xfe.img\n")

        with pytest.raises(BackstoreLookupError):
            BackstoreReader(lio_tree.sysfs()).read_udev_path("fileio", "3", "obj1")

    def test_object_exists_uses_sysfs_interface(self):
        mock_sysfs = Mock(spec=LioSysfs)
        mock_sysfs.core_path = "/sys/kernel/config/target/core"
        mock_sysfs.is_directory.return_value = True

        reader = BackstoreReader(mock_sysfs)
        assert reader.object_exists("rd_mcp", "0", "ram0") is True
        mock_sysfs.is_directory.assert_called_once_with("/sys/kernel/config/target/core/rd_mcp_0/ram0")

    def test_object_exists(self, lio_tree):
        lio_tree.add_rdmcp("0", "ram0")
        reader = BackstoreReader(lio_tree.sysfs())
        assert reader.object_exists("rd_mcp", "0", "ram0") is True
        assert reader.object_exists("rd_mcp", "0", "ram1") is False

    def test_read_rbd_devices_numeric_order(self, lio_tree):
        lio_tree.add_rbd_device("10", "rbd", "img10")
        lio_tree.add_rbd_device("2", "rbd", "img2")
        (lio_tree.rbd / "bus").mkdir()

        devices = BackstoreReader(lio_tree.sysfs()).read_rbd_devices()
        assert devices == [RbdDevice("2", "rbd", "img2"), RbdDevice("10", "rbd", "img10")]
        assert devices[0].object_name == "rbd-img2"

    def test_read_rbd_devices_no_tree(self, lio_tree):
        assert BackstoreReader(lio_tree.sysfs()).read_rbd_devices() == []

    def test_read_rbd_devices_unreadable_pool(self, lio_tree):
        device = lio_tree.add_rbd_device("0", "rbd", "img")
        os.remove(device / "pool")

        with pytest.raises(BackstoreLookupError):
            BackstoreReader(lio_tree.sysfs()).read_rbd_devices()


class TestStatsReader:
    """Test per-LUN port counter reads."""

    def test_read_ops(self, fileio_tree):
        reader = StatsReader(fileio_tree.sysfs())
        assert reader.read_ops("iqn.test:1", "1", "0") == RawCounters(2, 1, 10)

    def test_read_ops_missing_lun(self, fileio_tree):
        reader = StatsReader(fileio_tree.sysfs())
        with pytest.raises(StatsUnavailable):
            reader.read_ops("iqn.test:1", "1", "7")

    def test_read_ops_unparsable(self, fileio_tree):
        stats = fileio_tree.iscsi / "iqn.test:1" / "tpgt_1" / "lun" / "lun_0" / "statistics" / "scsi_tgt_port"
        (stats / "in_cmds").write_text("garbage\n")

        with pytest.raises(StatsUnavailable):
            StatsReader(fileio_tree.sysfs()).read_ops("iqn.test:1", "1", "0")

    def test_stats_path(self):
        mock_sysfs = Mock(spec=LioSysfs)
        mock_sysfs.iscsi_path = "/sys/kernel/config/target/iscsi"

        reader = StatsReader(mock_sysfs)
        assert reader.stats_path("iqn.x", "1", "0") == \
            "/sys/kernel/config/target/iscsi/iqn.x/tpgt_1/lun/lun_0/statistics/scsi_tgt_port"

    def test_read_ops_uses_sysfs_uint(self):
        mock_sysfs = Mock(spec=LioSysfs)
        mock_sysfs.iscsi_path = "/cfg/target/iscsi"
        mock_sysfs.read_sysfs_uint.side_effect = [5, 6, 7]

        counters = StatsReader(mock_sysfs).read_ops("iqn.x", "1", "0")
        assert counters == RawCounters(5, 6, 7)
        paths = [c.args[0] for c in mock_sysfs.read_sysfs_uint.call_args_list]
        assert [os.path.basename(p) for p in paths] == ["read_mbytes", "write_mbytes", "in_cmds"]
