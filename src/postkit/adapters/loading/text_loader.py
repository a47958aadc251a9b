from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from postkit.utils.logging import get_logger

log = get_logger("reader")

# Skip reasons recorded in LoadReport.skip_reasons
TOO_LARGE = "too-large"
BINARY = "binary"
OS_ERROR = "os-error"

# A long post with embedded code stays well under this.
MAX_POST_BYTES = 1_000_000


def _looks_binary(sample: bytes) -> bool:
    """
    NUL bytes, or more than 2% control bytes. Tab, LF, CR and ESC are text: shell
    posts paste ANSI colour sequences verbatim.
    """
    if not sample:
        return False
    if b"\x00" in sample:
        return True
    control = sum(1 for b in sample if b < 32 and b not in (9, 10, 13, 27))
    return control / len(sample) > 0.02


@dataclass(frozen=True, slots=True)
class LoadedText:
    text: Optional[str] = None
    skip_reason: Optional[str] = None
    encoding: Optional[str] = None


@dataclass(frozen=True, slots=True)
class TextLoader:
    """
    Reads one post. Utf-8 first (with or without BOM), latin-1 as a last resort.
    """
    max_bytes: int = MAX_POST_BYTES
    sniff_bytes: int = 4096
    encodings: tuple[str, ...] = ("utf-8-sig", "latin-1")

    def read(self, path: Path) -> LoadedText:
        try:
            size = path.stat().st_size
            if size > self.max_bytes:
                return LoadedText(skip_reason=TOO_LARGE)
            data = path.read_bytes()
        except OSError as e:
            log.debug("cannot read %s: %s", path, e)
            return LoadedText(skip_reason=OS_ERROR)

        if _looks_binary(data[: self.sniff_bytes]):
            return LoadedText(skip_reason=BINARY)

        for encoding in self.encodings[:-1]:
            try:
                return LoadedText(text=data.decode(encoding), encoding=encoding)
            except UnicodeDecodeError:
                continue
        fallback = self.encodings[-1]
        log.warning("%s is not valid utf-8, decoded as %s", path, fallback)
        return LoadedText(text=data.decode(fallback, errors="replace"), encoding=fallback)

    def load(self, path: Path) -> Optional[str]:
        return self.read(path).text
