from __future__ import annotations

import json
import os
import ssl
from dataclasses import dataclass
from typing import Any
from urllib import error, request

import certifi

from review_scanner.errors import HttpError


@dataclass(frozen=True)
class HttpResponse:
    status: int
    headers: dict[str, str]
    data: Any


def get_json(url: str, headers: dict[str, str] | None = None, timeout: int = 30) -> HttpResponse:
    req = request.Request(url=url, headers=headers or {}, method="GET")
    return _send(req, url, timeout)


def post_json(
    url: str,
    payload: Any,
    headers: dict[str, str] | None = None,
    timeout: int = 30,
) -> HttpResponse:
    body = json.dumps(payload).encode("utf-8")
    merged = {"Content-Type": "application/json"}
    merged.update(headers or {})
    req = request.Request(url=url, data=body, headers=merged, method="POST")
    return _send(req, url, timeout)


def _send(req: request.Request, url: str, timeout: int) -> HttpResponse:
    context = _build_ssl_context()
    try:
        with request.urlopen(req, timeout=timeout, context=context) as response:
            body = response.read().decode("utf-8")
            payload = json.loads(body) if body.strip() else None
            normalized_headers = {k.lower(): v for k, v in response.headers.items()}
            return HttpResponse(
                status=response.status,
                headers=normalized_headers,
                data=payload,
            )
    except error.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")
        raise HttpError(f"HTTP {exc.code} for {url}: {detail[:400]}", status=exc.code) from exc
    except error.URLError as exc:
        raise HttpError(f"Failed request to {url}: {exc.reason}") from exc
    except OSError as exc:
        # timeouts and connection resets raised while reading the body
        raise HttpError(f"Failed request to {url}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise HttpError(f"Invalid JSON from {url}: {exc}") from exc


def _build_ssl_context() -> ssl.SSLContext:
    if _env_true("REVIEW_SCANNER_INSECURE_SKIP_VERIFY"):
        return ssl._create_unverified_context()

    bundle = (
        os.getenv("REVIEW_SCANNER_CA_BUNDLE")
        or os.getenv("SSL_CERT_FILE")
        or os.getenv("REQUESTS_CA_BUNDLE")
    )
    if bundle:
        return ssl.create_default_context(cafile=bundle)

    return ssl.create_default_context(cafile=certifi.where())


def _env_true(name: str) -> bool:
    value = (os.getenv(name) or "").strip().lower()
    return value in {"1", "true", "yes", "on"}
