from __future__ import annotations

from typing import List, Tuple

from .models import CheckTarget

CONFIG_INI_PATH = "config/config.ini.php"

CONFIG_TARGET = CheckTarget(CONFIG_INI_PATH, "salt", True, "Matomo config.ini.php")

# Order matters: outcomes are reported in this order
DEFAULT_TARGETS: Tuple[CheckTarget, ...] = (
    CONFIG_TARGET,
    CheckTarget(".git/info/exclude", "Lines that start", True, "git exclude file"),
    CheckTarget("tmp/cache/token.php", "?php exit", True, "token cache"),
    CheckTarget("cache/tracker/matomocache_general.php", "unserialize", True, "tracker cache"),
)


def generate_targets() -> List[CheckTarget]:
    """Return the fixed list of files that must never be served publicly."""
    return list(DEFAULT_TARGETS)


def is_config_target(target: CheckTarget) -> bool:
    return target.relative_path == CONFIG_INI_PATH
