from __future__ import annotations

from typing import Optional

from .models import CheckOutcome, CheckTarget, FetchResult, Status
from .targets import is_config_target


def analyze(target: CheckTarget, res: FetchResult) -> CheckOutcome:
    """Classify one fetched target as OK, WARNING or ERROR.

    Failed requests, non-2xx responses and empty bodies carry no evidence
    of exposure and are reported as OK.
    """
    if is_config_target(target):
        return analyze_config(target, res)

    text = _readable_body(res)
    if target.marker in text:
        return public_error(target, res)
    return not_reachable(target, res)


def analyze_config(target: CheckTarget, res: FetchResult) -> CheckOutcome:
    # An executed config.ini.php only prints its leading "; <?php exit; ?>" line
    text = _readable_body(res)
    if target.marker in text:
        return public_error(target, res)
    if ";" in text:
        path = target.relative_path
        return CheckOutcome(
            path=path,
            status=Status.WARNING,
            message=(
                f"<code>{path}</code> seems to be semi-public. "
                "While attackers can't read the config now, the file is publicly accessible and if for whatever "
                "reason your webserver stops executing PHP files, everyone can read your MySQL credentials and more. "
                "Please check your webserver config."
            ),
            http_status=res.status_code,
            critical=False,
        )
    return not_reachable(target, res)


def public_error(target: CheckTarget, res: FetchResult) -> CheckOutcome:
    return CheckOutcome(
        path=target.relative_path,
        status=Status.ERROR if target.critical else Status.WARNING,
        message=f"<code>{target.relative_path}</code> should never be public. Please check your webserver config.",
        http_status=res.status_code,
        critical=target.critical,
    )


def not_reachable(target: CheckTarget, res: FetchResult) -> CheckOutcome:
    return CheckOutcome(
        path=target.relative_path,
        status=Status.OK,
        message=f"<code>{target.relative_path}</code> doesn't seem to be publicly reachable",
        http_status=res.status_code,
        critical=False,
    )


def _readable_body(res: FetchResult) -> str:
    if not res.ok:
        return ""
    return _safe_decode(res.body)


def _safe_decode(b: Optional[bytes]) -> str:
    if not b:
        return ""
    return b.decode("utf-8", errors="ignore")
