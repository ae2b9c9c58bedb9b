"""Text helpers."""

import re
import secrets

from pydantic import Field

from ..agent_core.registry import CommandSpec, ModuleDescriptor, PluginContext
from ..agent_core.schemas import BaseSchema, Capability

PASSWORD_CHARSET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!@#$%^&*"

_CAMEL_BOUNDARY = re.compile(r"(?:^\w|[A-Z]|\b\w)")


class TextArgs(BaseSchema):
    text: str


class PasswordArgs(BaseSchema):
    length: int = Field(default=12, ge=1, le=1024)


def reverse_string(text: str) -> str:
    return text[::-1]


def to_camel_case(text: str) -> str:
    """``"hello big world"`` -> ``"helloBigWorld"``."""
    converted = _CAMEL_BOUNDARY.sub(lambda m: m.group(0).lower() if m.start() == 0 else m.group(0).upper(), text)
    return re.sub(r"\s+", "", converted)


def generate_password(length: int = 12) -> str:
    return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))


def word_count(text: str) -> int:
    return len(text.split())


def create_module(ctx: PluginContext) -> ModuleDescriptor:
    return ModuleDescriptor(
        id="string",
        name="String Module",
        capabilities=[Capability.read, Capability.write],
        commands={
            "reverseString": CommandSpec("Reverses a string", reverse_string, TextArgs),
            "toCamelCase": CommandSpec("Converts string to camelCase", to_camel_case, TextArgs),
            "generatePassword": CommandSpec("Generates a secure password", generate_password, PasswordArgs),
            "wordCount": CommandSpec("Counts words in a string", word_count, TextArgs),
        },
    )
