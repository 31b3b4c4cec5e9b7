"""Diagnostic parsing for interpreter error output.

The interpreter reports problems as lines such as::

    foo.kts:3:5: error: unresolved reference: prinln

Lines that start with the script marker and carry a ``line:column`` pair are
turned into links. Activating a link maps the location back to an absolute
caret offset in the editor buffer.
"""

import html
import re
from dataclasses import dataclass

_LOCATION_RE = re.compile(r"(\d+):(\d+)")

LINK_SCHEME = "diag"


@dataclass(frozen=True)
class Location:
    """A 1-based line/column position in the script."""

    line: int
    column: int


@dataclass(frozen=True)
class OutputSegment:
    """One line of formatted error output, terminator included."""

    text: str
    location: Location | None = None

    @property
    def is_link(self) -> bool:
        return self.location is not None


def marker_for(script_name: str) -> str:
    """Prefix that identifies diagnostic lines for the given script file."""
    return f"{script_name}:"


def parse_location(line: str, marker: str) -> Location | None:
    """Extract the location that immediately follows ``marker``.

    Returns None when the line does not start with the marker, or when the
    marker is not followed by a ``digits:digits`` pair.
    """
    if not line.startswith(marker):
        return None
    match = _LOCATION_RE.match(line, len(marker))
    if match is None:
        return None
    return Location(line=int(match.group(1)), column=int(match.group(2)))


def format_error_output(stderr: str, marker: str) -> list[OutputSegment]:
    """Split stderr into segments, marking diagnostic lines with their location.

    Every line keeps its order and content and is followed by a newline.
    """
    segments = []
    for line in stderr.split("\n"):
        segments.append(OutputSegment(text=line + "\n", location=parse_location(line, marker)))
    return segments


def utf16_length(text: str) -> int:
    """Length of ``text`` in UTF-16 code units, the unit Qt positions and the interpreter's columns use."""
    return len(text.encode("utf-16-le")) // 2


def caret_offset(text: str, location: Location) -> int:
    """Absolute caret offset of ``location`` in ``text``, in UTF-16 code units.

    Sums the length of every line before ``location.line`` (plus one for each
    terminator) and adds ``location.column - 1``. Characters outside the BMP
    count as two units, matching QTextCursor positions. The result is clamped
    to the buffer, so stale locations from an edited buffer still land
    somewhere valid.
    """
    lines = text.split("\n")
    offset = sum(utf16_length(line) + 1 for line in lines[: max(location.line - 1, 0)])
    offset += location.column - 1
    return min(max(offset, 0), utf16_length(text))


def link_href(index: int) -> str:
    return f"{LINK_SCHEME}:{index}"


def parse_link_href(href: str) -> int | None:
    """Segment index encoded in a link href, or None for foreign links."""
    scheme, _, value = href.partition(":")
    if scheme != LINK_SCHEME or not value.isdigit():
        return None
    return int(value)


def segments_to_html(segments: list[OutputSegment], link_color: str = "#FF0000") -> str:
    """Render segments as preformatted HTML with one anchor per diagnostic line."""
    parts = []
    for index, segment in enumerate(segments):
        escaped = html.escape(segment.text)
        if segment.is_link:
            # Keep the newline outside the anchor so the link ends with the line
            body = escaped.rstrip("\n")
            tail = escaped[len(body):]
            parts.append(
                f'<a href="{link_href(index)}" style="color: {link_color};">{body}</a>{tail}'
            )
        else:
            parts.append(escaped)
    return f"<pre style=\"white-space: pre-wrap; margin: 0;\">{''.join(parts)}</pre>"
