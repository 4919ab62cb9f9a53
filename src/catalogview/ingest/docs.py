from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .discover import iter_files
from .markdown import MARKDOWN_EXTS, MdSection, split_sections


logger = logging.getLogger(__name__)

TECHDOCS_ANNOTATION = "backstage.io/techdocs-ref"


class DocsRefType(Enum):
    TECHDOCS = "TechDocs"
    ADR = "ADR"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class DocsRef:
    ref_type: DocsRefType
    path: Path


@dataclass(frozen=True)
class DocFile:
    path: Path
    name: str
    relative_path: str


@dataclass(frozen=True)
class DocContent:
    file: DocFile
    lines: list[str]

    def outline(self) -> list[MdSection]:
        return [s for s in split_sections("\n".join(self.lines)) if s.heading_path]


def parse_docs_refs(annotations: Mapping[str, str], source_file: str | Path) -> list[DocsRef]:
    """Documentation locations named by an entity's annotations.

    Relative paths resolve against the catalog file's directory; paths that do
    not exist on disk are dropped.
    """
    source_dir = Path(source_file).parent
    refs: list[DocsRef] = []

    for key, value in annotations.items():
        if key == TECHDOCS_ANNOTATION:
            path = _techdocs_path(value, source_dir)
            if path is not None:
                refs.append(DocsRef(DocsRefType.TECHDOCS, path))

        # Matches backstage.io/adr-location and vendor-specific variants.
        if "adr" in key:
            path = _resolve(value, source_dir)
            if path.exists():
                refs.append(DocsRef(DocsRefType.ADR, path))

    return refs


def discover_doc_files(docs_path: str | Path) -> list[DocFile]:
    p = Path(docs_path)
    if not p.exists():
        return []

    if p.is_file():
        if p.suffix.lower() in MARKDOWN_EXTS:
            return [DocFile(path=p, name=p.name, relative_path=p.name)]
        return []

    files = [
        DocFile(path=f, name=f.name, relative_path=f.relative_to(p).as_posix())
        for f in iter_files(p)
        if f.suffix.lower() in MARKDOWN_EXTS
    ]
    files.sort(key=lambda d: d.relative_path)
    return files


@dataclass
class DocsBrowser:
    """File list plus an optional open document with a scroll offset."""

    docs_ref: DocsRef
    files: list[DocFile] = field(default_factory=list)
    selected_index: int = 0
    viewing_content: DocContent | None = None
    scroll_offset: int = 0

    @classmethod
    def open(cls, docs_ref: DocsRef) -> DocsBrowser:
        return cls(docs_ref=docs_ref, files=discover_doc_files(docs_ref.path))

    def is_viewing_content(self) -> bool:
        return self.viewing_content is not None

    def selected_file(self) -> DocFile | None:
        if 0 <= self.selected_index < len(self.files):
            return self.files[self.selected_index]
        return None

    def move_up(self) -> None:
        if self.viewing_content is not None:
            self.scroll_offset = max(0, self.scroll_offset - 1)
        elif self.selected_index > 0:
            self.selected_index -= 1

    def move_down(self, visible_height: int) -> None:
        if self.viewing_content is not None:
            if self.scroll_offset < self._max_scroll(visible_height):
                self.scroll_offset += 1
        elif self.selected_index < len(self.files) - 1:
            self.selected_index += 1

    def page_up(self, page_size: int) -> None:
        if self.viewing_content is not None:
            self.scroll_offset = max(0, self.scroll_offset - page_size)

    def page_down(self, visible_height: int, page_size: int) -> None:
        if self.viewing_content is not None:
            self.scroll_offset = min(self.scroll_offset + page_size, self._max_scroll(visible_height))

    def open_selected(self) -> None:
        if self.viewing_content is not None:
            return
        f = self.selected_file()
        if f is None:
            return
        try:
            text = f.path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Cannot open %s: %s", f.path, e)
            return
        self.viewing_content = DocContent(file=f, lines=text.splitlines())
        self.scroll_offset = 0

    def close_content(self) -> None:
        self.viewing_content = None
        self.scroll_offset = 0

    def _max_scroll(self, visible_height: int) -> int:
        if self.viewing_content is None:
            return 0
        return max(0, len(self.viewing_content.lines) - visible_height)


def _techdocs_path(value: str, source_dir: Path) -> Path | None:
    # Formats: "dir:.", "dir:./docs", or a bare path. url: refs are not local.
    if value.startswith("dir:"):
        path = _resolve(value[len("dir:") :], source_dir)
        return path if path.exists() else None
    path = _resolve(value, source_dir)
    return path if path.exists() else None


def _resolve(path_str: str, base_dir: Path) -> Path:
    path = Path(path_str)
    return path if path.is_absolute() else base_dir / path
