"""
LIO Configuration Readers

This package provides specialized readers for the two halves of LIO state:
- TargetReader: iSCSI targets, portal groups and LUN links (export tree)
- BackstoreReader: storage object identity (core tree, RBD device tree)
- StatsReader: per-LUN port counters
"""

from .target_reader import TargetReader, parse_backstore_link
from .backstore_reader import BackstoreReader
from .stats_reader import StatsReader

__all__ = [
    'TargetReader',
    'BackstoreReader',
    'StatsReader',
    'parse_backstore_link'
]
