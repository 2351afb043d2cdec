"""Command-line entry point: print link previews for one or more URLs."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from typing import Sequence, TextIO

import aiohttp

from link_preview.core.cache import PreviewCache
from link_preview.core.config import AppConfig
from link_preview.core.fetcher import FetchClient
from link_preview.core.loader import PreviewLoader
from link_preview.core.logging_config import configure_logging
from link_preview.core.request import CachePolicy, PreviewRequest, RequestMethod
from link_preview.core.result import PreviewError, PreviewResult, PreviewSuccess
from link_preview.core.utils import ensure_scheme, split_pair

logger = logging.getLogger("link_preview.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="link-preview",
        description="Fetch web pages and print their title, OpenGraph data and meta tags.",
    )
    parser.add_argument("urls", nargs="+", help="One or more URLs (https:// is assumed when missing)")
    parser.add_argument(
        "--method",
        default="GET",
        choices=[m.value for m in RequestMethod],
        type=str.upper,
        help="HTTP method to use",
    )
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Extra request header (repeatable)",
    )
    parser.add_argument(
        "--cookie",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Cookie to send (repeatable)",
    )
    parser.add_argument("--user-agent", default=None, help="Override the User-Agent header")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument(
        "--cache-policy",
        default=None,
        choices=[p.name.lower().replace("_", "-") for p in CachePolicy],
        help="Memory cache policy for this run (default from config)",
    )
    parser.add_argument("--ignore-http-errors", action="store_true", help="Parse pages even on 4xx/5xx")
    parser.add_argument(
        "--ignore-content-type",
        action="store_true",
        help="Parse responses whatever their Content-Type",
    )
    parser.add_argument("--no-redirects", action="store_true", help="Do not follow HTTP redirects")
    parser.add_argument("--json", action="store_true", help="Emit a JSON array instead of text")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    args = parser.parse_args(argv)

    try:
        args.urls = [ensure_scheme(u) for u in args.urls]
        args.header = [split_pair(h, ":") for h in args.header]
        args.cookie = [split_pair(c, "=") for c in args.cookie]
    except ValueError as e:
        parser.error(str(e))
    return args


def build_request(args: argparse.Namespace, url: str) -> PreviewRequest:
    builder = PreviewRequest.builder().url(url).method(args.method)
    for name, value in args.header:
        builder.header(name, value)
    for name, value in args.cookie:
        builder.cookie(name, value)
    if args.user_agent:
        builder.user_agent(args.user_agent)
    if args.timeout is not None:
        builder.timeout(args.timeout)
    if args.ignore_http_errors:
        builder.ignore_http_errors(True)
    if args.ignore_content_type:
        builder.ignore_content_type(True)
    if args.no_redirects:
        builder.follow_redirects(False)
    return builder.build()


async def load_previews(
    args: argparse.Namespace, config: AppConfig
) -> list[tuple[str, PreviewResult]]:
    policy = CachePolicy.parse(args.cache_policy) if args.cache_policy else config.preview.policy
    cache = PreviewCache(max_cache_elements=config.preview.max_cache_elements)
    requests = [build_request(args, url) for url in args.urls]

    async with aiohttp.ClientSession() as session:
        loader = PreviewLoader(
            cache=cache,
            cache_policy=policy,
            fetch_client=FetchClient(session=session, settings=config.preview),
        )
        results = await asyncio.gather(*(loader.execute(r) for r in requests))
    return list(zip(args.urls, results))


def _result_to_dict(url: str, result: PreviewResult) -> dict:
    if isinstance(result, PreviewSuccess):
        return {
            "url": url,
            "ok": True,
            "from_memory_cache": result.from_memory_cache,
            "preview": result.preview.to_dict(),
        }
    return {"url": url, "ok": False, "error": f"{type(result.cause).__name__}: {result.cause}"}


def _write_text(url: str, result: PreviewResult, out: TextIO) -> None:
    out.write(f"{url}\n")
    if isinstance(result, PreviewError):
        out.write(f"  error: {type(result.cause).__name__}: {result.cause}\n")
        return
    preview = result.preview
    og = preview.open_graph
    out.write(f"  title: {preview.page_title or '-'}\n")
    for label, value in (
        ("og:title", og.title),
        ("og:type", og.type.type if og.type is not None else None),
        ("og:description", og.description),
        ("og:image", og.image),
        ("og:url", og.url),
        ("og:site_name", og.site_name),
    ):
        if value:
            out.write(f"  {label}: {value}\n")
    extra = [t for t in og.tags if t.tag_name]
    for tag in extra:
        out.write(f"  og:{tag.tag_name}: {tag.content}\n")
    for meta in preview.meta_tags:
        out.write(f"  meta {meta.name}: {meta.content}\n")


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    config = AppConfig.load()
    configure_logging(config, verbose=args.verbose)

    started = time.perf_counter()
    results = asyncio.run(load_previews(args, config))
    elapsed = time.perf_counter() - started

    failures = sum(1 for _, r in results if r.is_error)
    logger.info(
        "Finished in %.2fs (%d/%d succeeded, %d failed)",
        elapsed,
        len(results) - failures,
        len(results),
        failures,
    )

    if args.json:
        json.dump([_result_to_dict(u, r) for u, r in results], sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
    else:
        for idx, (url, result) in enumerate(results):
            if idx:
                sys.stdout.write("\n")
            _write_text(url, result, sys.stdout)
    sys.stdout.flush()
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
