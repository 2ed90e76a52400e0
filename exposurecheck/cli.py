from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Tuple
from urllib.parse import urlsplit, urlunsplit

from rich.console import Console
from rich.logging import RichHandler

from .checker import DEFAULT_USER_AGENT, run_check
from .fetcher import MAX_BODY_BYTES, SOCKET_TIMEOUT
from .models import Status
from .reporter import print_report


def normalize_url(u: str) -> str:
    """Normalise a base URL: default to http, drop query/fragment, end with '/'."""
    u = u.strip()
    if not u or u.startswith("#"):
        return ""
    if "://" not in u:
        # host only, e.g. "analytics.example.org/matomo" or "localhost:8080"
        u = "http://" + u.split()[0]
    try:
        sp = urlsplit(u)
    except ValueError:
        return ""
    if sp.scheme not in ("http", "https") or not sp.netloc:
        return ""
    sp = sp._replace(query="", fragment="", path=sp.path.rstrip("/") + "/")
    try:
        return urlunsplit(sp)
    except ValueError:
        return ""


def load_base_urls(path: Path) -> Tuple[List[str], List[Tuple[int, str]]]:
    lines = path.read_text(encoding="utf-8").splitlines()
    urls: List[str] = []
    invalid: List[Tuple[int, str]] = []
    for idx, raw in enumerate(lines, start=1):
        stripped = raw.strip()
        if not stripped or stripped.startswith("#"):
            continue
        normalized = normalize_url(stripped)
        if normalized:
            urls.append(normalized)
        else:
            invalid.append((idx, stripped))
    return urls, invalid


def _configure_logging(debug: bool, verbose: bool) -> None:
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=debug, markup=False, show_time=False, show_path=False)],
    )


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="exposurecheck",
        description="Check that sensitive Matomo files (config, .git, caches) are not publicly downloadable.",
    )
    parser.add_argument("urls", nargs="*", help="Base URL(s) of the application, e.g. https://example.org/matomo/")
    parser.add_argument("--input", help="Path to file with base URLs (one per line)")
    parser.add_argument("--timeout", type=float, default=SOCKET_TIMEOUT)
    parser.add_argument("--concurrency", type=int, default=1, help="Parallel requests per base URL")
    parser.add_argument("--retries", type=int, default=0, help="Retries for requests that failed to connect")
    parser.add_argument("--max-bytes", type=int, default=MAX_BODY_BYTES, help="Read at most this many body bytes per file")
    parser.add_argument("--insecure", action="store_true", help="Disable TLS verification")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    parser.add_argument("--json-output", help="Write reports as JSON to the given path")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--tui", action="store_true", help="Launch Textual TUI instead of Rich CLI")

    args = parser.parse_args(argv)

    _configure_logging(args.debug, args.verbose)
    console = Console()

    base_urls: List[str] = []
    invalid_entries: List[Tuple[str, str]] = []
    for raw in args.urls:
        normalized = normalize_url(raw)
        if normalized:
            base_urls.append(normalized)
        else:
            invalid_entries.append(("argument", raw))
    if args.input:
        input_path = Path(args.input)
        if not input_path.exists():
            console.print(f"[red]Input file not found:[/red] {input_path}")
            return 1
        from_file, invalid = load_base_urls(input_path)
        base_urls.extend(from_file)
        invalid_entries.extend((f"line {ln}", bad) for ln, bad in invalid)

    if invalid_entries:
        console.print("[yellow]Skipping invalid URL entries:[/yellow]")
        for where, bad in invalid_entries:
            console.print(f"  - [red]{bad}[/red] ({where})")
    if not base_urls:
        console.print("[yellow]No valid base URL given. Nothing to do.[/yellow]")
        return 1

    options = dict(
        timeout=args.timeout,
        concurrency=args.concurrency,
        retries=args.retries,
        insecure=args.insecure,
        user_agent=args.user_agent,
        max_bytes=args.max_bytes,
    )

    if args.tui:
        from .tui import ExposureCheckApp

        app = ExposureCheckApp(base_urls, **options)
        app.run()
        if any(report.status == Status.ERROR for _, report in app.results):
            return 2
        return 0

    results = [(base, run_check(base, **options)) for base in base_urls]
    for base, report in results:
        print_report(report, base, console=console)

    if args.json_output:
        out_path = Path(args.json_output)
        with out_path.open("w", encoding="utf-8") as f:
            json.dump(
                [{"base_url": base, "report": report.to_dict()} for base, report in results],
                f,
                indent=2,
                ensure_ascii=False,
            )
        console.print(f"[green]JSON results written to[/green] {out_path}")

    if any(report.status == Status.ERROR for _, report in results):
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
