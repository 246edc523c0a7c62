from __future__ import annotations

from review_scanner.providers.base import ChangedFileProvider
from review_scanner.providers.github import GitHubPullRequestProvider
from review_scanner.providers.local import LocalDiffProvider

__all__ = ["ChangedFileProvider", "GitHubPullRequestProvider", "LocalDiffProvider"]
