"""Well-formedness checks for opaque template expressions.

Expressions are never evaluated or rewritten here. The scanner only makes
sure brackets and quotes balance so the text can be spliced into generated
code without corrupting it.
"""

import re
from typing import List, Optional

from sfcwire.compiler.exceptions import TemplateSyntaxError

PAIRS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = set(PAIRS.values())

# Member path like `save`, `a.b`, `a['b']`, `a[0]`
SIMPLE_PATH_RE = re.compile(
    r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*|\['[^']*'\]|\[\"[^\"]*\"\]|\[\d+\]|\[[A-Za-z_$][\w$]*\])*$"
)
FUNCTION_EXPR_RE = re.compile(
    r"^(?:[\w$]+|\([^)]*?\))\s*=>|^function(?:\s+[\w$]+)?\s*\("
)


def scan(text: str, pos: int = 0, stop: Optional[str] = None, base: int = 0) -> int:
    """Scan ``text`` from ``pos`` keeping track of brackets and quotes.

    With ``stop`` set, returns the index where ``stop`` occurs at nesting
    depth zero. Without it, scans to the end and returns ``len(text)``.
    Offsets in raised errors are ``base + index``.
    """
    stack: List[str] = []
    i = pos
    n = len(text)
    while i < n:
        top = stack[-1] if stack else None
        c = text[i]

        if top == "`":
            if c == "\\":
                i += 2
            elif c == "`":
                stack.pop()
                i += 1
            elif text.startswith("${", i):
                stack.append("}")
                i += 2
            else:
                i += 1
            continue

        if stop is not None and not stack and text.startswith(stop, i):
            return i

        if c in ("'", '"'):
            i = _skip_quoted(text, i, base)
        elif c == "`":
            stack.append("`")
            i += 1
        elif c in PAIRS:
            stack.append(PAIRS[c])
            i += 1
        elif c in CLOSERS:
            if not stack or stack[-1] != c:
                raise TemplateSyntaxError(
                    f"Unbalanced '{c}' in expression", offset=base + i
                )
            stack.pop()
            i += 1
        else:
            i += 1

    if stop is not None:
        raise TemplateSyntaxError(f"Expected '{stop}'", offset=base + pos)
    if stack:
        expected = stack[-1]
        if expected == "`":
            raise TemplateSyntaxError("Unterminated template literal", offset=base + pos)
        raise TemplateSyntaxError(
            f"Unbalanced expression, expected '{expected}'", offset=base + pos
        )
    return n


def _skip_quoted(text: str, i: int, base: int) -> int:
    quote = text[i]
    j = i + 1
    while j < len(text):
        c = text[j]
        if c == "\\":
            j += 2
            continue
        if c == quote:
            return j + 1
        if c == "\n":
            break
        j += 1
    raise TemplateSyntaxError("Unterminated string in expression", offset=base + i)


def check_expression(expression: str, offset: int = 0) -> str:
    """Raise ``TemplateSyntaxError`` unless ``expression`` is balanced."""
    if not expression.strip():
        raise TemplateSyntaxError("Empty expression", offset=offset)
    scan(expression, base=offset)
    return expression


def is_simple_path(expression: str) -> bool:
    return bool(SIMPLE_PATH_RE.match(expression.strip()))


def is_function_expression(expression: str) -> bool:
    return bool(FUNCTION_EXPR_RE.match(expression.strip()))
