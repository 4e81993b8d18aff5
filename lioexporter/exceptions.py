"""
Exception classes for LIO statistics collection.

This module defines the exception hierarchy used throughout the exporter.
Each class marks one failure category of a collection cycle so that the
walker can decide whether to degrade, abort the cycle, or propagate.
"""


class LioError(Exception):
    """Base exception class for all LIO exporter errors.

    Callers that only care about "the cycle failed" should catch LioError
    rather than the individual subclasses.
    """

    pass


class SysfsNotFound(LioError):
    """A sysfs or configfs entry does not exist or cannot be read."""

    pass


class SubsystemAbsent(LioError):
    """The iSCSI export tree is missing, usually because the target modules are not loaded."""

    pass


class BackstoreLookupError(LioError, LookupError):
    """A backstore's configfs or sysfs entries cannot be read.

    Distinct from "no match": adapters return None for a backstore that simply
    has no counterpart, and raise this when the path itself is unreadable.
    """

    pass


class StatsUnavailable(LioError):
    """Port statistics for a LUN are missing or not parseable."""

    pass


class SinkError(LioError):
    """The metrics sink refused a sample."""

    pass
