from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable


CATALOG_FILENAMES = {"catalog-info.yaml", "catalog-info.yml"}

# Build outputs, dependency trees and caches that never hold catalog files.
EXCLUDED_DIRS = {
    "target",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    "build",
    ".gradle",
    "bin",
    "obj",
    "dist",
    "out",
    ".next",
    ".nuxt",
    ".svelte-kit",
    ".cache",
    ".parcel-cache",
    ".turbo",
    "coverage",
}

EXCLUDED_DIR_PREFIXES = ("bazel-",)


def should_exclude_dir(name: str) -> bool:
    return name.startswith(".") or name in EXCLUDED_DIRS or name.startswith(EXCLUDED_DIR_PREFIXES)


def iter_files(root: Path, *, follow_links: bool = True) -> Iterable[Path]:
    """Every file below ``root``, skipping excluded directories.

    With ``follow_links`` each physical directory is walked once, so a symlink
    back to an ancestor does not loop.
    """
    seen: set[tuple[int, int]] = set()
    for dirpath, dirnames, filenames in os.walk(root, followlinks=follow_links):
        if follow_links:
            st = os.stat(dirpath)
            if (st.st_dev, st.st_ino) in seen:
                dirnames[:] = []
                continue
            seen.add((st.st_dev, st.st_ino))
        # Prune in place so os.walk never descends into excluded dirs.
        dirnames[:] = sorted(d for d in dirnames if not should_exclude_dir(d))
        for name in sorted(filenames):
            yield Path(dirpath) / name


def discover_catalog_files(root: str | Path, *, follow_links: bool = True) -> list[Path]:
    return sorted(p for p in iter_files(Path(root), follow_links=follow_links) if p.name in CATALOG_FILENAMES)
