import logging
import socket

import httpx

from ..agent_core.registry import CommandSpec, ModuleDescriptor, PluginContext
from ..agent_core.schemas import Capability

logger = logging.getLogger(__name__)

CONNECTIVITY_URL = "https://www.google.com"
CONNECTIVITY_TIMEOUT = 3.0


async def check_connection() -> bool:
    """Return True if an HTTPS request to a well-known host answers 200."""
    try:
        async with httpx.AsyncClient(timeout=CONNECTIVITY_TIMEOUT) as client:
            response = await client.head(CONNECTIVITY_URL)
    except httpx.HTTPError as e:
        logger.debug(f"Connectivity check failed: {e}")
        return False
    return response.status_code == 200


def get_local_ip() -> str:
    """First non-loopback IPv4 address of this host, else ``127.0.0.1``."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # UDP connect only selects a route; no packet is sent.
        sock.connect(("192.0.2.1", 80))
        address = sock.getsockname()[0]
    except OSError:
        return "127.0.0.1"
    finally:
        sock.close()
    if address.startswith("127.") or address == "0.0.0.0":
        return "127.0.0.1"
    return address


def create_module(ctx: PluginContext) -> ModuleDescriptor:
    return ModuleDescriptor(
        id="network",
        name="Network Module",
        capabilities=[Capability.read],
        commands={
            "checkConnection": CommandSpec("Checks if internet connection is available", check_connection),
            "getLocalIP": CommandSpec("Gets local IP address", get_local_ip),
        },
    )
