"""exposurecheck - Public file exposure check

Verifies that sensitive Matomo files (config.ini.php, .git metadata,
cache files) cannot be downloaded from the instance's public URL.
Designed to be used as both a script and a library.
"""

from .checker import PublicFileCheck, check_async, run_check
from .models import CheckOutcome, CheckReport, CheckTarget, Status

__all__ = [
    "run_check",
    "check_async",
    "PublicFileCheck",
    "CheckTarget",
    "CheckOutcome",
    "CheckReport",
    "Status",
]
__version__ = "0.1.0"
