from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Tuple

import httpx

from .detectors import analyze
from .fetcher import MAX_BODY_BYTES, SOCKET_TIMEOUT, fetch_target
from .models import CheckOutcome, CheckReport, CheckTarget, FetchResult, Status
from .targets import generate_targets

REPORT_LABEL = "Files that should not be public"
DEFAULT_USER_AGENT = "exposurecheck/0.1"

REMEDIATION_MESSAGE = (
    "Please check if your webserver processes the .htaccess files "
    "generated by Matomo properly. If you are using Nginx, please take a look at the "
    "<a href='https://github.com/matomo-org/matomo-nginx/' target='_blank' rel='noopener'>"
    "official matomo-nginx config</a> for reference.<br>"
    "Otherwise attackers might be able to read sensitive data."
)


async def check_async(
    base_url: str,
    targets: Optional[Sequence[CheckTarget]] = None,
    timeout: float = SOCKET_TIMEOUT,
    concurrency: int = 1,
    retries: int = 0,
    insecure: bool = False,
    user_agent: str = DEFAULT_USER_AGENT,
    max_bytes: int = MAX_BODY_BYTES,
    logger: Optional[logging.Logger] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    progress_cb: Optional[Callable[[int, int], None]] = None,
) -> CheckReport:
    """Check base_url for publicly downloadable sensitive files.

    concurrency=1 checks the targets one after another. Outcomes keep the
    target order whatever the completion order is.

    progress_cb: optional callback invoked with (completed, total)
    """
    log = logger or logging.getLogger(__name__)
    items = list(targets) if targets is not None else generate_targets()
    total = len(items)
    completed = 0
    outcomes: List[Optional[CheckOutcome]] = [None] * total
    sem = asyncio.Semaphore(max(1, concurrency))

    async with httpx.AsyncClient(
        follow_redirects=False,
        verify=not insecure,
        headers={"User-Agent": user_agent},
        transport=transport,
    ) as client:
        async def worker(idx: int, target: CheckTarget) -> None:
            nonlocal completed
            async with sem:
                res = await _fetch_with_retries(target, base_url, client, timeout, retries, max_bytes, log)
            outcome = analyze(target, res)
            outcomes[idx] = outcome
            if outcome.status == Status.ERROR:
                log.warning("[%s] %s -> %s", outcome.status.value, res.url, res.status_code)
            elif outcome.status == Status.WARNING:
                log.info("[%s] %s -> %s", outcome.status.value, res.url, res.status_code)
            else:
                log.debug("No exposure: %s -> %s", res.url, res.status_code or res.error)
            completed += 1
            if progress_cb:
                progress_cb(completed, total)

        if items:
            await asyncio.gather(*(worker(i, t) for i, t in enumerate(items)))

    report = CheckReport(label=REPORT_LABEL, outcomes=[o for o in outcomes if o is not None])
    # Decided only once every target has been classified
    if report.has_critical:
        report.long_error_message = REMEDIATION_MESSAGE
    return report


async def _fetch_with_retries(
    target: CheckTarget,
    base_url: str,
    client: httpx.AsyncClient,
    timeout: float,
    retries: int,
    max_bytes: int,
    log: logging.Logger,
) -> FetchResult:
    attempts = 0
    while True:
        res = await fetch_target(target, base_url, client, timeout=timeout, max_bytes=max_bytes, logger=log)
        if res.error is None or not res.retryable or attempts >= retries:
            return res
        attempts += 1
        log.debug("Retrying %s (%d/%d) after %s", res.url, attempts, retries, res.error)
        await asyncio.sleep(0.2 * attempts)


async def check_many_async(
    base_urls: Sequence[str],
    progress_cb: Optional[Callable[[int, int], None]] = None,
    **options,
) -> List[Tuple[str, CheckReport]]:
    """Check several application instances one after another."""
    results: List[Tuple[str, CheckReport]] = []
    for idx, base in enumerate(base_urls, start=1):
        results.append((base, await check_async(base, **options)))
        if progress_cb:
            progress_cb(idx, len(base_urls))
    return results


def run_check(
    base_url: str,
    targets: Optional[Sequence[CheckTarget]] = None,
    timeout: float = SOCKET_TIMEOUT,
    concurrency: int = 1,
    retries: int = 0,
    insecure: bool = False,
    user_agent: str = DEFAULT_USER_AGENT,
    max_bytes: int = MAX_BODY_BYTES,
    logger: Optional[logging.Logger] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    progress_cb: Optional[Callable[[int, int], None]] = None,
) -> CheckReport:
    """Synchronous wrapper to run the async checker.

    Uses asyncio.run, so it cannot be called from a running event loop;
    await check_async there instead.
    """
    return asyncio.run(
        check_async(
            base_url,
            targets=targets,
            timeout=timeout,
            concurrency=concurrency,
            retries=retries,
            insecure=insecure,
            user_agent=user_agent,
            max_bytes=max_bytes,
            logger=logger,
            transport=transport,
            progress_cb=progress_cb,
        )
    )


class PublicFileCheck:
    """Diagnostic wrapper for hosts that inject the base URL and logger.

    options are the keyword arguments of check_async. Synchronous hosts call
    execute(); hosts already running an event loop await execute_async().
    """

    def __init__(self, base_url: str, logger: Optional[logging.Logger] = None, **options) -> None:
        self.base_url = base_url
        self.logger = logger or logging.getLogger(__name__)
        self.options = options

    def execute(self) -> List[CheckReport]:
        return [run_check(self.base_url, logger=self.logger, **self.options)]

    async def execute_async(self) -> List[CheckReport]:
        return [await check_async(self.base_url, logger=self.logger, **self.options)]
