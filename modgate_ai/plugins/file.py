"""Filesystem access.

Commands report OS errors as ``{"error": <message>}`` values instead of
raising, so the model can read and react to them.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import Field

from ..agent_core.registry import CommandSpec, ModuleDescriptor, PluginContext
from ..agent_core.schemas import BaseSchema, Capability


class FilePathArgs(BaseSchema):
    file_path: str = Field(alias="filePath", min_length=1)


class WriteFileArgs(BaseSchema):
    file_path: str = Field(alias="filePath", min_length=1)
    content: str


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def get_file_stats(file_path: str) -> Dict[str, Any]:
    try:
        st = Path(file_path).stat()
    except OSError as e:
        return {"error": str(e)}
    path = Path(file_path)
    # st_birthtime only exists on some platforms.
    created = getattr(st, "st_birthtime", st.st_ctime)
    return {
        "size": st.st_size,
        "created": _iso(created),
        "modified": _iso(st.st_mtime),
        "isFile": path.is_file(),
        "isDirectory": path.is_dir(),
    }


def read_file(file_path: str) -> Union[str, Dict[str, str]]:
    try:
        return Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return {"error": str(e)}


def write_file(file_path: str, content: str) -> Dict[str, Any]:
    try:
        Path(file_path).write_text(content, encoding="utf-8")
    except OSError as e:
        return {"error": str(e)}
    return {"success": True, "message": "File written successfully"}


def create_module(ctx: PluginContext) -> ModuleDescriptor:
    return ModuleDescriptor(
        id="file",
        name="File Module",
        capabilities=[Capability.read, Capability.write],
        commands={
            "getFileStats": CommandSpec("Gets file statistics", get_file_stats, FilePathArgs),
            "readFile": CommandSpec("Reads file content", read_file, FilePathArgs),
            "writeFile": CommandSpec("Writes content to a file", write_file, WriteFileArgs),
        },
    )
