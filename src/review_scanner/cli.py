from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from review_scanner import __version__
from review_scanner.aggregator import FindingAggregator
from review_scanner.config import build_registry, load_config
from review_scanner.errors import CatalogError, ConfigError, HttpError, ProviderError
from review_scanner.models import AppConfig
from review_scanner.pipeline import review_changed_files
from review_scanner.posting import GitHubReviewPoster
from review_scanner.providers import GitHubPullRequestProvider, LocalDiffProvider
from review_scanner.providers.github import token_from_env
from review_scanner.reporting import format_text, write_reports
from review_scanner.scanners import Analyzer, CatalogRegistry
from review_scanner.scanners.comments import COMMENT_RULE_IDS


logger = logging.getLogger("review_scanner")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="review-scanner",
        description="Rule-based heuristic reviewer for pull request changes",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="Review changed files in a local working tree")
    scan_parser.add_argument("paths", nargs="*", help="Files to review; defaults to the git diff")
    scan_parser.add_argument("--root", default=".")
    scan_parser.add_argument("--base", default=None, help="Base ref to diff against (<base>...HEAD)")
    _add_common_arguments(scan_parser)

    review_parser = subparsers.add_parser("review", help="Review a GitHub pull request")
    review_parser.add_argument("--repo", default=None, help="owner/name, defaults to GITHUB_REPOSITORY")
    review_parser.add_argument("--pr", type=int, default=None, help="Pull request number")
    review_parser.add_argument("--post", action="store_true", help="Post review comments back to the PR")
    _add_common_arguments(review_parser)

    rules_parser = subparsers.add_parser("rules", help="List catalog rules")
    rules_parser.add_argument("--language", default=None)
    rules_parser.add_argument("--config", default=None)

    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default=None)
    parser.add_argument("--format", choices=["text", "json"], default="text")
    parser.add_argument("--output-dir", default=None)
    parser.add_argument("--workers", type=int, default=None)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    try:
        config = load_config(args.config)
        registry = build_registry(config)
    except (ConfigError, CatalogError) as exc:
        parser.error(str(exc))
        return 2

    if args.command == "rules":
        return _list_rules(registry, args.language)

    if args.command == "scan":
        provider = LocalDiffProvider(
            args.root,
            base_ref=args.base,
            paths=args.paths,
            max_file_size_bytes=config.scan.max_file_size_bytes,
        )
        try:
            files = provider.list_changed_files()
        except ProviderError as exc:
            logger.error("%s", exc)
            return 2
        aggregator = _review(files, registry, config, args)
        _emit(aggregator, args)
        return 1 if aggregator.has_errors() else 0

    if args.command == "review":
        return _review_pull_request(parser, args, config, registry)

    parser.error(f"Unsupported command: {args.command}")
    return 2


def _review_pull_request(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    config: AppConfig,
    registry: CatalogRegistry,
) -> int:
    full_name = args.repo or os.getenv("GITHUB_REPOSITORY") or ""
    owner, _, repo = full_name.partition("/")
    if not owner or not repo:
        parser.error("--repo OWNER/NAME is required (or set GITHUB_REPOSITORY)")
        return 2
    number = args.pr or _pr_number_from_event(os.getenv("GITHUB_EVENT_PATH"))
    if number is None:
        parser.error("--pr is required (or set GITHUB_EVENT_PATH to a pull_request event)")
        return 2

    token = token_from_env(config.github.token_env)
    provider = GitHubPullRequestProvider(
        config.github,
        owner,
        repo,
        number,
        token=token,
        max_file_size_bytes=config.scan.max_file_size_bytes,
    )
    try:
        files = provider.list_changed_files()
    except (ProviderError, HttpError) as exc:
        logger.error("%s", exc)
        return 2

    aggregator = _review(files, registry, config, args)
    _emit(aggregator, args)

    if args.post:
        commit_sha = provider.head_sha or os.getenv("GITHUB_SHA")
        poster = GitHubReviewPoster(config.github, token)
        result = poster.post(owner, repo, number, aggregator, commit_sha)
        logger.info(
            "Posted %d inline comments (%d failed), summary posted: %s",
            result.inline_posted,
            result.inline_failed,
            result.summary_posted,
        )

    return 1 if aggregator.has_errors() else 0


def _review(files, registry: CatalogRegistry, config: AppConfig, args: argparse.Namespace) -> FindingAggregator:
    workers = args.workers if args.workers is not None else config.scan.workers
    return review_changed_files(
        files,
        Analyzer(registry),
        workers=max(1, workers),
        exclude_patterns=config.scan.exclude_patterns,
    )


def _emit(aggregator: FindingAggregator, args: argparse.Namespace) -> None:
    if args.format == "json":
        payload = {
            "summary": aggregator.summary().to_dict(),
            "findings": [item.to_dict() for item in aggregator.all()],
            "skipped": [item.to_dict() for item in aggregator.skipped],
            "diagnostics": [item.to_dict() for item in aggregator.diagnostics],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=True))
    else:
        print(format_text(aggregator))

    if args.output_dir:
        written = write_reports(aggregator, args.output_dir)
        logger.info("Reports written to %s", Path(written["files"]["summary"]).parent)


def _list_rules(registry: CatalogRegistry, language: str | None) -> int:
    languages = [language] if language else registry.languages()
    rows: list[dict] = []
    for tag in languages:
        catalog = registry.for_language(tag)
        if catalog is None:
            logger.error("Unknown language: %s", tag)
            return 2
        for rule_id in COMMENT_RULE_IDS:
            rows.append(
                {
                    "language": tag,
                    "rule_id": rule_id,
                    "source": "block_comment",
                    "enabled": catalog.is_enabled(rule_id),
                }
            )
        for item in catalog.rules:
            rows.append(
                {
                    "language": tag,
                    "rule_id": item.rule_id,
                    "source": "line",
                    "severity": item.severity,
                    "category": item.category,
                    "description": item.description,
                    "enabled": catalog.is_enabled(item.rule_id),
                }
            )
    print(json.dumps(rows, indent=2, ensure_ascii=True))
    return 0


def _pr_number_from_event(event_path: str | None) -> int | None:
    if not event_path:
        return None
    try:
        with open(event_path, "r", encoding="utf-8") as handle:
            event = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read event payload %s: %s", event_path, exc)
        return None
    number = (event.get("pull_request") or {}).get("number") or event.get("number")
    return int(number) if number else None


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


if __name__ == "__main__":
    raise SystemExit(main())
