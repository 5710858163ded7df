"""Text cleanup for XML output.

Two filters:
- ``strip_ansi`` removes terminal styling (colors, cursor moves, OSC links)
  from test titles.
- ``remove_invalid_characters`` drops characters outside the XML 1.0
  character set that can show up in stack traces.
"""

from __future__ import annotations

import re

# CSI / OSC escape sequences introduced by ESC (U+001B) or the 8-bit CSI (U+009B).
_ANSI_RE = re.compile(
    r"[\u001b\u009b][\[\]()#;?]*"
    r"(?:"
    r"(?:(?:(?:;[-a-zA-Z\d/#&.:=?%@~_]+)*"
    r"|[a-zA-Z\d]+(?:;[-a-zA-Z\d/#&.:=?%@~_]*)*)?\u0007)"
    r"|(?:(?:\d{1,4}(?:;\d{0,4})*)?[\dA-PR-TZcf-nq-uy=><~])"
    r")"
)

# Control characters, surrogates and noncharacters that XML 1.0 rejects or discourages.
_INVALID_XML_RE = re.compile(
    r"[\x00-\x08\x0b\x0c\x0e-\x1f"
    r"\x7f-\x84\x86-\x9f"
    r"\ud800-\udfff"
    r"\ufdd0-\ufdff\ufffe\uffff]"
)


def strip_ansi(text: str | None) -> str:
    """Remove ANSI escape sequences. None becomes ''."""
    if not text:
        return ""
    return _ANSI_RE.sub("", text)


def remove_invalid_characters(text: str | None) -> str:
    """Remove characters that cannot appear in an XML document. None becomes ''.

    Idempotent: the output never contains a character the filter would remove.
    """
    if not text:
        return ""
    return _INVALID_XML_RE.sub("", text)
