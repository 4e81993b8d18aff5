"""
Constants for LIO topology discovery and metric export.

This module contains the filesystem layout, attribute names and metric naming
constants used throughout the LIO exporter.
"""


class LioConstants:
    """Constants for LIO discovery and metric export."""

    # Default pseudo-filesystem mount points
    DEFAULT_SYSFS_PATH = "/sys"
    DEFAULT_CONFIGFS_PATH = "/sys/kernel/config"

    # configfs layout, relative to the configfs root
    TARGET_ISCSI = "target/iscsi"
    TARGET_CORE = "target/core"

    # sysfs layout, relative to the sysfs root
    RBD_DEVICES = "devices/rbd"

    # Export tree naming
    IQN_PREFIX = "iqn"
    TPGT_PREFIX = "tpgt_"
    LUN_DIR = "lun"
    LUN_PREFIX = "lun_"
    ENABLE_ATTR = "enable"
    ENABLED_VALUE = "1"

    # Per-LUN port statistics (values in megabytes / commands)
    PORT_STATS_DIR = "statistics/scsi_tgt_port"
    READ_MBYTES_ATTR = "read_mbytes"
    WRITE_MBYTES_ATTR = "write_mbytes"
    IN_CMDS_ATTR = "in_cmds"

    # Backstore attributes
    UDEV_PATH_ATTR = "udev_path"
    RBD_POOL_ATTR = "pool"
    RBD_IMAGE_ATTR = "name"

    # Counters are reported in MiB; shifting by 20 gives bytes
    UNIT_SHIFT = 20

    # Metric naming
    NAMESPACE = "node"
    DEFAULT_LISTEN_ADDRESS = ":9415"
