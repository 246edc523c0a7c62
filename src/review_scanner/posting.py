from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from review_scanner.aggregator import FindingAggregator
from review_scanner.errors import HttpError
from review_scanner.http import post_json
from review_scanner.models import GitHubSettings
from review_scanner.providers.github import github_headers
from review_scanner.reporting import format_inline_comment, format_summary


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostResult:
    inline_posted: int = 0
    inline_failed: int = 0
    summary_posted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class GitHubReviewPoster:
    """Posts findings back to a pull request.

    Failures never propagate: each rejected comment is logged and counted.
    """

    def __init__(self, settings: GitHubSettings, token: str | None):
        self.settings = settings
        self.token = token
        self.base_url = settings.base_url.rstrip("/")

    def post(
        self,
        owner: str,
        repo: str,
        number: int,
        aggregator: FindingAggregator,
        commit_sha: str | None,
    ) -> PostResult:
        headers = github_headers(self.token)
        inline_posted = 0
        inline_failed = 0

        if self.settings.post_inline_comments and commit_sha:
            findings = aggregator.all()
            limit = max(0, self.settings.max_inline_comments)
            if len(findings) > limit:
                logger.info("Posting %d of %d findings as inline comments", limit, len(findings))
            url = f"{self.base_url}/repos/{owner}/{repo}/pulls/{number}/comments"
            for finding in findings[:limit]:
                payload = {
                    "body": format_inline_comment(finding),
                    "commit_id": commit_sha,
                    "path": finding.file_path,
                    "line": finding.line_number,
                    "side": "RIGHT",
                }
                try:
                    post_json(url, payload, headers=headers)
                    inline_posted += 1
                except HttpError as exc:
                    inline_failed += 1
                    logger.warning(
                        "Failed to post inline comment on %s:%d: %s",
                        finding.file_path,
                        finding.line_number,
                        exc,
                    )
        elif self.settings.post_inline_comments:
            logger.warning("No commit sha available, skipping inline comments")

        summary_posted = False
        url = f"{self.base_url}/repos/{owner}/{repo}/issues/{number}/comments"
        try:
            post_json(url, {"body": format_summary(aggregator)}, headers=headers)
            summary_posted = True
        except HttpError as exc:
            logger.warning("Failed to post summary comment: %s", exc)

        return PostResult(
            inline_posted=inline_posted,
            inline_failed=inline_failed,
            summary_posted=summary_posted,
        )
