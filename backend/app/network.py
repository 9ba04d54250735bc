"""LAN address discovery so phones on the same network can reach the server."""
import ipaddress
import logging
import socket

import psutil

logger = logging.getLogger("lanshare.network")

FALLBACK_HOST = "localhost"


def get_local_ip() -> str:
    """First non-loopback IPv4 address across host interfaces, else localhost."""
    try:
        interfaces = psutil.net_if_addrs()
    except OSError as e:
        logger.warning("Could not enumerate network interfaces: %s", e)
        return FALLBACK_HOST
    for addrs in interfaces.values():
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            try:
                if ipaddress.IPv4Address(addr.address).is_loopback:
                    continue
            except ValueError:
                continue
            return addr.address
    return FALLBACK_HOST


def network_info(port: int) -> dict:
    ip = get_local_ip()
    return {
        "ip": ip,
        "port": port,
        "uploadUrl": f"http://{ip}:{port}/api/upload",
    }


def server_urls(port: int) -> dict:
    """Local and LAN base URLs for the startup banner."""
    return {
        "local": f"http://localhost:{port}",
        "network": f"http://{get_local_ip()}:{port}",
    }
