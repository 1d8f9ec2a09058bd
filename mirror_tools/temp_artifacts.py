"""
Script: mirror_tools/temp_artifacts.py
What: Tracks run-owned temporary files and deletes them when the run ends.
Doing: Collects paths while the run works and removes all of them on `with` block exit.
Why: The certificate file must not stay on disk after a build, including failed builds.
Goal: Provide one cleanup scope that wraps the whole build command.
"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path
from types import TracebackType

from mirror_tools.common import CleanupError


class TempArtifacts:
    """Context manager that removes every registered file on exit."""

    def __init__(self) -> None:
        self._paths: list[Path] = []

    def __enter__(self) -> TempArtifacts:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.cleanup()
        except CleanupError as cleanup_exc:
            # The run's own error is the one to report; cleanup problems are only logged.
            if exc is None:
                raise
            print(f"Warning: {cleanup_exc}", file=sys.stderr)

    @property
    def paths(self) -> tuple[Path, ...]:
        return tuple(self._paths)

    def register(self, path: Path) -> Path:
        self._paths.append(path)
        return path

    def cleanup(self) -> None:
        """Remove every registered path, then raise once if any removal failed."""
        if not self._paths:
            return
        print("Cleaning up temporary files...")
        failures: list[str] = []
        for path in reversed(self._paths):
            try:
                if path.is_dir():
                    shutil.rmtree(path)
                else:
                    path.unlink(missing_ok=True)
            except OSError as exc:
                failures.append(f"{path}: {exc}")
        self._paths.clear()
        if failures:
            raise CleanupError("Failed to remove temporary files:\n" + "\n".join(failures))
