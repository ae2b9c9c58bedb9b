"""Invocation directive parser.

Model replies are free-form text. A reply asks for a module invocation by
containing a directive such as::

    /run module list listAllModules/
    (run module math fibonacci {"n": 10})
    run module `file` `readFile` {"filePath": "notes.txt"}

Only the first directive in the text is honoured; anything after it is
ignored. Module and command tokens are restricted to ``[A-Za-z0-9_]+``. An
optional JSON object directly after the command carries arguments; if that
object is malformed the directive is ambiguous and treated as absent.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from ..schemas.domain import InvocationIntent

logger = logging.getLogger(__name__)

_DIRECTIVE = re.compile(
    r"(?<![A-Za-z0-9_])run\s+module\s+"
    r"`?(?P<module>[A-Za-z0-9_]+)`?\s+"
    r"`?(?P<command>[A-Za-z0-9_]+)`?"
    r"(?=$|[\s/)`{,;:!?]|\.(?:\s|$))",
    re.IGNORECASE,
)

_DECODER = json.JSONDecoder()


class CommandParser:
    """Extract a single ``InvocationIntent`` from model text."""

    def parse(self, text: Optional[str]) -> Optional[InvocationIntent]:
        """
        Scan ``text`` for the first invocation directive.

        Args:
            text: Arbitrary model output.

        Returns:
            The parsed intent, or None when no well-formed directive is present.
        """
        if not text:
            return None

        match = _DIRECTIVE.search(text)
        if match is None:
            return None

        args = self._parse_args(text, match.end())
        if args is None:
            logger.debug(f"Ignoring ambiguous directive: {match.group(0)!r}")
            return None

        return InvocationIntent(module=match.group("module"), command=match.group("command"), args=args)

    @staticmethod
    def _parse_args(text: str, pos: int) -> Optional[Dict[str, Any]]:
        """Decode an optional JSON argument object starting at ``pos``.

        Returns an empty dict when no object follows, None when one follows but
        cannot be decoded into a mapping.
        """
        rest = text[pos:].lstrip(" \t`")
        if not rest.startswith("{"):
            return {}
        try:
            value, _ = _DECODER.raw_decode(rest)
        except json.JSONDecodeError:
            return None
        if not isinstance(value, dict):
            return None
        return value


def render_directive(intent: InvocationIntent) -> str:
    """Render ``intent`` back into the canonical directive text."""
    text = f"/run module {intent.module} {intent.command}"
    if intent.args:
        text += " " + json.dumps(intent.args, default=str)
    return text + "/"


_default_parser = CommandParser()


def parse(text: Optional[str]) -> Optional[InvocationIntent]:
    """Module-level convenience wrapper around ``CommandParser.parse``."""
    return _default_parser.parse(text)
