"""Temporary and output directory bookkeeping for browser sessions."""

from __future__ import annotations

import logging
import shutil
import tempfile
import weakref
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_TMP_PREFIX = "headless-"


def _remove_tree(path: Path) -> bool:
    """Delete ``path`` recursively, logging instead of raising on failure."""

    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return True
    except OSError as exc:
        logger.warning("Failed to remove temporary directory %s: %s", path, exc)
        return False
    logger.debug("Removed temporary directory %s", path)
    return True


class ScopedTempDir:
    """A temporary directory removed on every exit path.

    Removal happens on ``cleanup()``, on context-manager exit, when the
    object is garbage collected, or at interpreter shutdown, whichever
    comes first.
    """

    def __init__(self, prefix: str = DEFAULT_TMP_PREFIX) -> None:
        self.path = Path(tempfile.mkdtemp(prefix=prefix))
        self._finalizer = weakref.finalize(self, _remove_tree, self.path)
        logger.debug("Created temporary directory %s", self.path)

    @property
    def active(self) -> bool:
        """Return True until the directory has been cleaned up."""

        return self._finalizer.alive

    def cleanup(self) -> bool:
        """Remove the directory; return False when removal failed."""

        if not self._finalizer.alive:
            return True
        return bool(self._finalizer())

    def __enter__(self) -> "ScopedTempDir":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()

    def __fspath__(self) -> str:
        return str(self.path)

    def __repr__(self) -> str:
        return f"ScopedTempDir({str(self.path)!r})"


def resolve_output_dir(output_dir: Optional[str | Path], fallback: Path) -> str:
    """Return ``output_dir`` as given when it is an existing directory.

    The caller's spelling is kept verbatim (a leading ``./`` or a trailing
    separator survives); otherwise the ``fallback`` directory is used.
    """

    if output_dir:
        if Path(output_dir).is_dir():
            return str(output_dir)
        logger.info(
            "Output directory %s does not exist; using %s", output_dir, fallback
        )
    return str(fallback)


def output_path(output_dir: str, filename: str) -> str:
    """Return the export location ``<output_dir>/<filename>``."""

    return f"{output_dir}/{filename}"


__all__ = [
    "DEFAULT_TMP_PREFIX",
    "ScopedTempDir",
    "output_path",
    "resolve_output_dir",
]
