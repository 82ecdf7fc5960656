"""Human-readable rendering of compile errors."""

from typing import Any, Dict, List, Optional

from sfcwire.compiler.exceptions import SFCCompileError, offset_to_position
from sfcwire.renderer import render_template


def format_error(
    error: SFCCompileError, source: Optional[str] = None, context: int = 2
) -> str:
    """Render ``error`` with a code frame around the offending line.

    Without ``source`` (or without a known position) only the header is
    rendered.
    """
    line, column = error.line, error.column
    if source is not None and line is None and error.offset is not None:
        line, column = offset_to_position(source, error.offset)

    lines: List[Dict[str, Any]] = []
    if source is not None and line is not None:
        source_lines = source.splitlines()
        first = max(1, line - context)
        last = min(len(source_lines), line + context)
        for number in range(first, last + 1):
            lines.append(
                {
                    "number": number,
                    "text": source_lines[number - 1],
                    "current": number == line,
                }
            )

    location = error.file_path or "<unknown>"
    if line is not None:
        location += f":{line}:{column or 0}"

    return render_template(
        "error_frame.txt.j2",
        {
            "error_type": type(error).__name__,
            "message": error.message,
            "location": location,
            "lines": lines,
            "width": len(str(lines[-1]["number"])) if lines else 1,
            "column": column,
        },
    )
