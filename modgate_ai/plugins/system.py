import platform
import uuid

from ..agent_core.registry import CommandSpec, ModuleDescriptor, PluginContext
from ..agent_core.schemas import Capability


def get_device_id() -> str:
    """Stable identifier derived from the host name and hardware address."""
    return str(uuid.uuid5(uuid.NAMESPACE_DNS, f"{platform.node()}:{uuid.getnode():012x}"))


def create_module(ctx: PluginContext) -> ModuleDescriptor:
    return ModuleDescriptor(
        id="system",
        name="System Module",
        capabilities=[Capability.read],
        commands={
            "getDeviceId": CommandSpec("Returns the Device ID", get_device_id),
        },
    )
