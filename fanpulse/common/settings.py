"""Environment-driven configuration for FanPulse services.

Every value can be overridden by an environment variable; the CLI options in
``fanpulse.cli.fanpulse_cli`` take precedence over both.
"""

from __future__ import annotations

import os
from typing import Final

DB_PATH: Final[str] = os.getenv("FANPULSE_DB", "fanpulse.db")
USE_HTTP: Final[bool] = os.getenv("FANPULSE_HTTP", "false").lower() == "true"
HTTP_HOST: Final[str] = os.getenv("FANPULSE_HOST", "127.0.0.1")
HTTP_PORT: Final[int] = int(os.getenv("FANPULSE_PORT", "5001"))
LOG_LEVEL: Final[str] = os.getenv("FANPULSE_LOG_LEVEL", "INFO")
ENVIRONMENT: Final[str] = os.getenv("FANPULSE_ENV", "development")
DEFAULT_LOOKBACK_DAYS: Final[int] = int(os.getenv("FANPULSE_LOOKBACK_DAYS", "90"))

SERVICE_NAME: Final[str] = "fanpulse"
SERVICE_VERSION: Final[str] = "1.0.0"
