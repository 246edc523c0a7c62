from __future__ import annotations

import base64
import binascii
import logging
import os
from urllib.parse import quote, urlencode

from review_scanner.errors import HttpError, ProviderError
from review_scanner.http import get_json
from review_scanner.models import ChangedFile, GitHubSettings
from review_scanner.providers.base import ChangedFileProvider


logger = logging.getLogger(__name__)

PER_PAGE = 100


class GitHubPullRequestProvider(ChangedFileProvider):
    def __init__(
        self,
        settings: GitHubSettings,
        owner: str,
        repo: str,
        number: int,
        *,
        token: str | None = None,
        max_file_size_bytes: int = 500_000,
    ):
        if not owner or not repo:
            raise ProviderError("GitHub provider requires owner and repo")
        self.settings = settings
        self.owner = owner
        self.repo = repo
        self.number = int(number)
        self.token = token
        self.max_file_size_bytes = max_file_size_bytes
        self.base_url = settings.base_url.rstrip("/")
        self.head_sha: str | None = None

    @property
    def headers(self) -> dict[str, str]:
        return github_headers(self.token)

    def list_changed_files(self) -> list[ChangedFile]:
        pull = self._get(f"/repos/{self.owner}/{self.repo}/pulls/{self.number}")
        if not isinstance(pull, dict):
            raise ProviderError("GitHub API returned invalid pull request payload")
        self.head_sha = str((pull.get("head") or {}).get("sha") or "") or None

        files: list[ChangedFile] = []
        page = 1
        while True:
            query = urlencode({"per_page": PER_PAGE, "page": page})
            page_data = self._get(f"/repos/{self.owner}/{self.repo}/pulls/{self.number}/files?{query}")
            if not isinstance(page_data, list):
                raise ProviderError("GitHub API returned invalid files payload")

            for item in page_data:
                changed = self._to_changed_file(item)
                if changed is not None:
                    files.append(changed)

            if len(page_data) < PER_PAGE:
                break
            page += 1

        logger.info(
            "Pull request %s/%s#%d has %d changed files",
            self.owner,
            self.repo,
            self.number,
            len(files),
        )
        return files

    def _to_changed_file(self, item: dict) -> ChangedFile | None:
        path = str(item.get("filename") or "").strip()
        status = str(item.get("status") or "modified")
        if not path or status == "removed":
            return None
        try:
            text = self._fetch_content(path)
        except (HttpError, ProviderError) as exc:
            logger.warning("Could not fetch %s: %s", path, exc)
            return ChangedFile(path=path, text=None, status=status, skip_reason=str(exc))
        return ChangedFile(path=path, text=text, status=status)

    def _fetch_content(self, path: str) -> str:
        query = f"?{urlencode({'ref': self.head_sha})}" if self.head_sha else ""
        data = self._get(f"/repos/{self.owner}/{self.repo}/contents/{quote(path)}{query}")
        if not isinstance(data, dict) or "content" not in data:
            raise ProviderError(f"No file content returned for {path}")
        size = int(data.get("size") or 0)
        if size > self.max_file_size_bytes:
            raise ProviderError(f"file exceeds {self.max_file_size_bytes} bytes ({size})")
        try:
            raw = base64.b64decode(str(data["content"]))
            return raw.decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ProviderError(f"Could not decode content of {path}: {exc}") from exc

    def _get(self, path: str):
        response = get_json(f"{self.base_url}{path}", headers=self.headers)
        return response.data


def github_headers(token: str | None) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": "review-scanner/0.1",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def token_from_env(token_env: str | None) -> str | None:
    if not token_env:
        return None
    token = os.getenv(token_env)
    if token:
        return token.strip()
    return None
