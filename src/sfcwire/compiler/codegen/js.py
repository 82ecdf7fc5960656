"""Helpers for writing JavaScript source text."""

import json
import re
from typing import Iterable, List, Mapping, Tuple

IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")


def js_string(value: str, quote: str = '"') -> str:
    """Quote ``value`` as a JavaScript string literal."""
    if quote == '"':
        # json.dumps leaves U+2028/U+2029 alone, which older engines reject
        return (
            json.dumps(value, ensure_ascii=False)
            .replace("\u2028", "\\u2028")
            .replace("\u2029", "\\u2029")
        )
    escaped = value.replace("\\", "\\\\").replace(quote, "\\" + quote)
    escaped = escaped.replace("\n", "\\n").replace("\r", "\\r")
    return f"{quote}{escaped}{quote}"


def js_key(key: str) -> str:
    return key if IDENTIFIER_RE.match(key) else js_string(key)


def js_object(entries: Mapping[str, str]) -> str:
    """Object literal from key -> raw expression text, in mapping order."""
    return "{" + ",".join(f"{js_key(k)}:{v}" for k, v in entries.items()) + "}"


def js_object_pairs(pairs: Iterable[Tuple[str, str]]) -> str:
    """Object literal whose keys are already valid property names."""
    return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"


def js_array(items: List[str]) -> str:
    return "[" + ",".join(items) + "]"
