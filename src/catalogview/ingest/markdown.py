from __future__ import annotations

import re
from dataclasses import dataclass


_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")

MARKDOWN_EXTS = {".md", ".markdown"}


@dataclass(frozen=True)
class MdSection:
    heading_path: str
    level: int  # 0 for text before the first heading
    start_line: int  # 1-based
    text: str


def split_sections(markdown_text: str) -> list[MdSection]:
    """Split a markdown document at its headings.

    Each section records the " > "-joined path of headings above it so a viewer
    can show an outline. Headings inside fenced code blocks are ignored.
    """
    lines = markdown_text.replace("\r\n", "\n").replace("\r", "\n").split("\n")

    heading_stack: list[str] = []
    current_lines: list[str] = []
    current_heading_path = ""
    current_level = 0
    current_start_line = 1
    in_fence = False

    out: list[MdSection] = []

    def flush(next_start: int) -> None:
        nonlocal current_lines, current_start_line
        text = "\n".join(current_lines).strip()
        if text or current_heading_path:
            out.append(
                MdSection(
                    heading_path=current_heading_path,
                    level=current_level,
                    start_line=current_start_line,
                    text=text,
                )
            )
        current_lines = []
        current_start_line = next_start

    for idx, line in enumerate(lines, start=1):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            current_lines.append(line)
            continue

        m = None if in_fence else _HEADING_RE.match(line)
        if m:
            flush(idx)
            level = len(m.group(1))
            title = m.group(2).strip()

            # Adjust heading stack
            if len(heading_stack) >= level:
                heading_stack = heading_stack[: level - 1]
            while len(heading_stack) < level - 1:
                heading_stack.append("")
            heading_stack.append(title)

            current_heading_path = " > ".join([h for h in heading_stack if h])
            current_level = level
            current_start_line = idx
            continue

        current_lines.append(line)

    flush(len(lines) + 1)
    return out
