from __future__ import annotations

import ipaddress
import logging
import socket

import psutil

LOG = logging.getLogger(__name__)

LOOPBACK = "127.0.0.1"


def _usable(addr: str) -> bool:
    try:
        ip = ipaddress.ip_address(addr)
    except ValueError:
        return False
    return ip.version == 4 and not ip.is_loopback and not ip.is_unspecified and not ip.is_link_local


def local_address() -> str:
    """
    Best-effort LAN IPv4 address of this host, for display only.

    Walks the local network interfaces, skipping those reported down, and
    returns the first non-loopback IPv4 address. Falls back to 127.0.0.1.
    """
    try:
        stats = psutil.net_if_stats()
        for iface, addrs in psutil.net_if_addrs().items():
            st = stats.get(iface)
            if st is not None and not st.isup:
                continue
            for addr in addrs:
                if addr.family == socket.AF_INET and _usable(addr.address):
                    return addr.address
    except Exception:
        LOG.debug("interface scan failed", exc_info=True)
    return LOOPBACK


def banner(scheme: str, port: int, address: str) -> str:
    return "%s://localhost:%d\n%s://%s:%d\nCtrl-C to exit" % (scheme, port, scheme, address, port)
