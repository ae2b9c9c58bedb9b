import hashlib
import math
import secrets
import uuid

from pydantic import Field

from ..agent_core.registry import CommandSpec, ModuleDescriptor, PluginContext
from ..agent_core.schemas import BaseSchema, Capability


class HashArgs(BaseSchema):
    text: str


class TokenArgs(BaseSchema):
    length: int = Field(default=32, ge=0, le=4096)


def generate_uuid() -> str:
    return str(uuid.uuid4())


def hash_string(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def generate_random_token(length: int = 32) -> str:
    # token_hex(0) still returns "", so the slice handles every length.
    return secrets.token_hex(math.ceil(length / 2))[:length]


def create_module(ctx: PluginContext) -> ModuleDescriptor:
    return ModuleDescriptor(
        id="crypto",
        name="Crypto Module",
        capabilities=[Capability.read, Capability.write],
        commands={
            "generateUUID": CommandSpec("Generates a random UUID", generate_uuid),
            "hashString": CommandSpec("Hashes a string using SHA-256", hash_string, HashArgs),
            "generateRandomToken": CommandSpec(
                "Generates a random token of specified length", generate_random_token, TokenArgs
            ),
        },
    )
