from __future__ import annotations

import codecs
from pathlib import Path
from typing import TYPE_CHECKING

from vibex.config import BINARY_EXTENSIONS, extension_of
from vibex.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable

    BinaryChecker = Callable[[Path], bool]

SNIFF_BYTES = 8192


def sniff_binary(path: Path, nbytes: int = SNIFF_BYTES) -> bool:
    """Check if a file looks binary from its first bytes.

    A NUL byte or bytes that cannot be decoded as UTF-8 mark the file as binary. A
    multi-byte sequence cut by the end of the chunk is not held against the file.

    Args:
        path (Path): the file to inspect
        nbytes (int, optional): number of bytes to read. Defaults to 8192.

    Raises:
        OSError: if the file cannot be opened or read.

    Returns:
        bool: True if the file is probably binary, False otherwise
    """
    with Path(path).open("rb") as f:
        chunk = f.read(nbytes)
    if b"\x00" in chunk:
        return True
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        decoder.decode(chunk, final=False)
    except UnicodeDecodeError:
        return True
    return False


def extension_is_binary(path: Path) -> bool:
    """Check the extension of `path` against the known binary extensions."""
    return extension_of(path) in BINARY_EXTENSIONS


class BinaryDetector:
    """Classify paths as binary or text.

    The content checker is chosen once, when the detector is built. When it is
    missing (``primary=None``) or breaks, the extension denylist answers instead
    and a degraded-mode warning is logged once. A file the checker cannot read is
    classified by extension alone, without degrading the detector.
    """

    def __init__(
        self,
        primary: BinaryChecker | None = sniff_binary,
        fallback: BinaryChecker = extension_is_binary,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._degraded = False
        if primary is None:
            self._warn_degraded("no content checker available")

    @property
    def degraded(self) -> bool:
        return self._degraded

    def _warn_degraded(self, reason: str) -> None:
        if not self._degraded:
            logger.warning("Binary detection falls back to file extensions: %s", reason)
            self._degraded = True

    def is_binary(self, path: Path) -> bool:
        """Tell whether `path` is binary. Never raises."""
        if self._primary is not None:
            try:
                return self._primary(path)
            except OSError as e:
                logger.warning("Could not read %s, classifying it by extension: %s", path, e)
            except Exception as e:  # noqa: BLE001
                self._warn_degraded(f"{type(e).__name__}: {e}")
        try:
            return self._fallback(path)
        except Exception as e:  # noqa: BLE001
            logger.warning("Could not classify %s, treating it as text: %s", path, e)
            return False
