from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Iterable

from review_scanner.errors import ProviderError
from review_scanner.models import ChangedFile
from review_scanner.providers.base import ChangedFileProvider


logger = logging.getLogger(__name__)


class LocalDiffProvider(ChangedFileProvider):
    """Changed files from a working tree.

    Explicit paths win; otherwise git decides: ``<base>...HEAD`` when a base ref
    is given, or uncommitted plus untracked files when it is not.
    """

    def __init__(
        self,
        root: str | Path = ".",
        *,
        base_ref: str | None = None,
        paths: Iterable[str] = (),
        max_file_size_bytes: int = 500_000,
    ):
        self.root = Path(root).resolve()
        self.base_ref = base_ref
        self.paths = tuple(paths)
        self.max_file_size_bytes = max_file_size_bytes

    def list_changed_files(self) -> list[ChangedFile]:
        if not self.root.exists():
            raise ProviderError(f"Root directory does not exist: {self.root}")

        names = list(self.paths) if self.paths else self._git_changed_names()
        files: list[ChangedFile] = []
        seen: set[str] = set()
        for name in names:
            relative = self._relative_name(name)
            if relative in seen:
                continue
            seen.add(relative)
            files.append(self._read(relative))
        logger.info("Found %d changed files under %s", len(files), self.root)
        return files

    def _git_changed_names(self) -> list[str]:
        if self.base_ref:
            return _run_git(
                [
                    "git",
                    "-C",
                    str(self.root),
                    "diff",
                    "--name-only",
                    "--diff-filter=ACMR",
                    f"{self.base_ref}...HEAD",
                ]
            )
        tracked = _run_git(["git", "-C", str(self.root), "diff", "--name-only", "--diff-filter=ACMR", "HEAD"])
        untracked = _run_git(["git", "-C", str(self.root), "ls-files", "--others", "--exclude-standard"])
        return tracked + untracked

    def _relative_name(self, name: str) -> str:
        path = Path(name)
        if path.is_absolute():
            try:
                return path.resolve().relative_to(self.root).as_posix()
            except ValueError:
                return path.as_posix()
        return path.as_posix()

    def _read(self, relative: str) -> ChangedFile:
        path = self.root / relative
        if not path.is_file():
            return _skipped(relative, "file not found")
        size = path.stat().st_size
        if size > self.max_file_size_bytes:
            return _skipped(relative, f"file exceeds {self.max_file_size_bytes} bytes ({size})")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return _skipped(relative, f"unreadable: {exc}")
        return ChangedFile(path=relative, text=text)


def _skipped(path: str, reason: str) -> ChangedFile:
    return ChangedFile(path=path, text=None, skip_reason=reason)


def _run_git(cmd: list[str]) -> list[str]:
    try:
        process = subprocess.run(cmd, text=True, capture_output=True)
    except FileNotFoundError as exc:
        raise ProviderError("git executable not found") from exc
    if process.returncode != 0:
        stderr = (process.stderr or "").strip()
        stdout = (process.stdout or "").strip()
        message = stderr or stdout or "unknown git error"
        raise ProviderError(f"Git command failed: {' '.join(cmd)}\n{message[:500]}")
    return [line.strip() for line in process.stdout.splitlines() if line.strip()]
