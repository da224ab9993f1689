"""Path helpers for upload batches."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Iterator, List

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp", ".tif", ".tiff"})

_UNSAFE_CHARS = re.compile(r"[^\w.-]", re.UNICODE)


def safe_stem(path: Path) -> str:
    """File stem usable as a directory name: anything but word chars, '.' and '-' becomes '_'."""
    return _UNSAFE_CHARS.sub("_", Path(path).stem)


def iter_images(folder: Path) -> Iterator[Path]:
    """Image files directly inside ``folder``, by name. A missing folder yields nothing."""
    folder = Path(folder)
    if not folder.is_dir():
        return
    yield from (
        entry for entry in sorted(folder.iterdir())
        if entry.is_file() and entry.suffix.lower() in IMAGE_EXTENSIONS
    )


def expand_image_inputs(inputs: Iterable[Path]) -> List[Path]:
    """Replace each directory by its images; plain paths are kept as given, in order."""
    expanded: List[Path] = []
    for item in map(Path, inputs):
        expanded.extend(iter_images(item) if item.is_dir() else [item])
    return expanded
