"""
Command line entry point for the LIO exporter.

Usage:
    lio-exporter                                         # WARNING (clean)
    lio-exporter -log INFO                               # Shows progress
    lio-exporter --path.configfs /mnt/configfs -log DEBUG
"""

import argparse
import logging
import sys
import time
from typing import List, Optional, Tuple

from prometheus_client import REGISTRY, start_http_server

from .collector import LioCollector
from .constants import LioConstants


def setup_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split 'host:port' (host optional) into its parts.

    Example:
        ':9415' -> ('0.0.0.0', 9415)
        '127.0.0.1:9100' -> ('127.0.0.1', 9100)
        '[::]:9415' -> ('::', 9415)
    """
    host, sep, port = address.rpartition(':')
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid listen address: {address!r}")
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    return host or "0.0.0.0", int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Export LIO iSCSI backstore statistics for Prometheus"
    )
    parser.add_argument(
        "--path.sysfs", dest="sysfs_path", default=LioConstants.DEFAULT_SYSFS_PATH,
        help="sysfs mountpoint (default: %(default)s)"
    )
    parser.add_argument(
        "--path.configfs", dest="configfs_path", default=LioConstants.DEFAULT_CONFIGFS_PATH,
        help="configfs mountpoint (default: %(default)s)"
    )
    parser.add_argument(
        "--web.listen-address", dest="listen_address", default=LioConstants.DEFAULT_LISTEN_ADDRESS,
        help="Address to expose metrics on (default: %(default)s)"
    )
    parser.add_argument(
        "-log", dest="log_level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: %(default)s)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger("lioexporter")

    try:
        host, port = parse_listen_address(args.listen_address)
    except ValueError as e:
        logger.error("%s", e)
        return 2

    REGISTRY.register(LioCollector(args.sysfs_path, args.configfs_path))
    start_http_server(port, addr=host)
    logger.info("Serving LIO metrics on %s:%d (configfs=%s, sysfs=%s)",
                host, port, args.configfs_path, args.sysfs_path)

    try:
        while True:
            time.sleep(60)
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
