"""
Deferred deletion of local files after upload.

Upload pipelines often stage a file locally, push it, and only then want it
gone. Rather than letting the store accumulate paths forever, the caller
opens a scope; uploads inside it register their source files, and the sweep
runs when the scope closes, even if the block raised.
"""

import logging
import threading
from pathlib import Path
from typing import Iterator, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class TempFileRegistry:
    """
    Ordered set of local paths awaiting deletion.

    Appends are guarded by a lock so several threads can upload through the
    same scope. Paths are kept in registration order and registered once.
    """

    def __init__(self) -> None:
        self._paths: list[Path] = []
        self._lock = threading.Lock()

    def register(self, path: PathLike) -> None:
        resolved = Path(path)
        with self._lock:
            if resolved not in self._paths:
                self._paths.append(resolved)

        logger.debug("Registered file for cleanup", extra={"path": str(resolved)})

    @property
    def paths(self) -> list[Path]:
        with self._lock:
            return list(self._paths)

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        with self._lock:
            return Path(path) in self._paths

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

    def sweep(self) -> list[Path]:
        """
        Delete every registered file that still exists.

        Files that cannot be removed are logged and skipped so one stuck
        file doesn't keep the rest around. The registry is empty afterwards.
        Returns the paths actually removed.
        """
        with self._lock:
            pending = self._paths
            self._paths = []

        removed = []
        for path in pending:
            try:
                path.unlink()
                removed.append(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(
                    "Failed to remove temp file",
                    extra={"path": str(path), "error": str(e)}
                )

        if removed:
            logger.info("Swept temp files", extra={"count": len(removed)})

        return removed

    def __enter__(self) -> "TempFileRegistry":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.sweep()
