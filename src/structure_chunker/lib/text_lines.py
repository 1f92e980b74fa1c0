"""Line splitting that only breaks on carriage returns and line feeds.

``str.splitlines`` also breaks on form feeds, file/group/record separators
and the Unicode line and paragraph separators. Text extracted from PDFs often
carries form feeds at page breaks, and those must stay inside the line they
belong to.
"""

import re

LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """Split text into lines, keeping each line's terminator.

    Joining the result reproduces ``text`` exactly, so running offsets can be
    computed by summing line lengths.

    Example:
        >>> split_lines("a\\r\\nb\\x0cc\\n")
        ['a\\r\\n', 'b\\x0cc\\n']
    """
    lines: list[str] = []
    start = 0
    for match in LINE_BREAK_PATTERN.finditer(text):
        lines.append(text[start : match.end()])
        start = match.end()
    if start < len(text):
        lines.append(text[start:])
    return lines
