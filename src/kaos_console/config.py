"""
Configuration management for the KaosNet Console TUI.

This module handles configuration from multiple sources with the following
precedence (highest to lowest):

1. Command-line arguments (--server, --timeout, --page-size, --demo, --log-file)
2. Environment variables (KAOS_CONSOLE_URL, KAOS_REQUEST_TIMEOUT, ...)
3. Default values

The configuration is immutable once created, ensuring consistent behavior
throughout the application lifecycle.

Example:
    # Create config from CLI args
    config = Config.from_args(["--server", "http://localhost:7350"])

    # Access configuration
    print(config.server_url)  # "http://localhost:7350"
    print(config.page_size)   # 20 (default)
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

# =============================================================================
# DEFAULT CONFIGURATION VALUES
# =============================================================================

# Default server URL - the platform's HTTP API port on the local machine.
DEFAULT_SERVER_URL = "http://localhost:7350"

# Default HTTP request timeout in seconds.
DEFAULT_TIMEOUT = 30.0

# Rows per page in every list view.
DEFAULT_PAGE_SIZE = 20

# Environment variable names for configuration.
ENV_SERVER_URL = "KAOS_CONSOLE_URL"
ENV_TIMEOUT = "KAOS_REQUEST_TIMEOUT"
ENV_PAGE_SIZE = "KAOS_PAGE_SIZE"
ENV_DEMO = "KAOS_CONSOLE_DEMO"
ENV_LOG_FILE = "KAOS_CONSOLE_LOG_FILE"

_TRUTHY = {"1", "true", "yes", "on"}


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for the console.

    Attributes:
        server_url: Base URL of the platform API (e.g., "http://localhost:7350").
                    Should NOT include a trailing slash.
        timeout: HTTP request timeout in seconds. Applied to all API calls.
        page_size: Rows per page in the list views.
        demo: Serve records from the bundled sample data instead of the API.
        log_file: Optional path for log output. The TUI owns the terminal,
                  so nothing is logged unless this is set.

    Example:
        config = Config(server_url="http://localhost:7350", timeout=30.0)
    """

    server_url: str
    timeout: float
    page_size: int = DEFAULT_PAGE_SIZE
    demo: bool = False
    log_file: Path | None = None

    def __post_init__(self) -> None:
        """
        Validate configuration values after initialization.

        Raises:
            ValueError: If server_url is empty, or timeout/page_size is not positive.
        """
        if not self.server_url:
            raise ValueError("server_url cannot be empty")

        if self.timeout <= 0:
            raise ValueError("timeout must be a positive number")

        if self.page_size <= 0:
            raise ValueError("page_size must be a positive integer")

    @classmethod
    def from_args(cls, args: Sequence[str] | None = None) -> Config:
        """
        Create a Config instance from command-line arguments.

        Unspecified options fall back to environment variables and then
        default values.

        Args:
            args: Command-line arguments to parse. If None, uses sys.argv[1:].

        Returns:
            Config: A fully populated configuration object.
        """
        parser = argparse.ArgumentParser(
            prog="kaos-console",
            description="Terminal console for KaosNet platform administration",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  kaos-console                                   # Connect to localhost:7350
  kaos-console --server http://10.0.0.1:7350     # Connect to remote server
  kaos-console --demo                            # Browse bundled sample data

Environment Variables:
  KAOS_CONSOLE_URL       Server URL (default: http://localhost:7350)
  KAOS_REQUEST_TIMEOUT   Request timeout in seconds (default: 30)
  KAOS_PAGE_SIZE         Rows per page in list views (default: 20)
  KAOS_CONSOLE_DEMO      Use sample data when set to 1/true/yes/on
  KAOS_CONSOLE_LOG_FILE  Write logs to this file
            """,
        )

        parser.add_argument(
            "--server",
            "-s",
            dest="server_url",
            default=None,  # None means "check env var, then use default"
            help=f"Platform API URL (default: {DEFAULT_SERVER_URL})",
        )
        parser.add_argument(
            "--timeout",
            "-t",
            type=float,
            default=None,
            help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT})",
        )
        parser.add_argument(
            "--page-size",
            dest="page_size",
            type=int,
            default=None,
            help=f"Rows per page in list views (default: {DEFAULT_PAGE_SIZE})",
        )
        parser.add_argument(
            "--demo",
            action="store_true",
            default=None,
            help="Use bundled sample data instead of the live API",
        )
        parser.add_argument(
            "--log-file",
            dest="log_file",
            default=None,
            help="Write log output to this file",
        )

        parsed = parser.parse_args(args)

        # Resolve server_url with precedence: CLI > ENV > DEFAULT
        server_url = parsed.server_url or os.environ.get(ENV_SERVER_URL) or DEFAULT_SERVER_URL
        server_url = server_url.rstrip("/")

        if parsed.timeout is not None:
            timeout = parsed.timeout
        elif ENV_TIMEOUT in os.environ:
            timeout = float(os.environ[ENV_TIMEOUT])
        else:
            timeout = DEFAULT_TIMEOUT

        if parsed.page_size is not None:
            page_size = parsed.page_size
        elif ENV_PAGE_SIZE in os.environ:
            page_size = int(os.environ[ENV_PAGE_SIZE])
        else:
            page_size = DEFAULT_PAGE_SIZE

        if parsed.demo is not None:
            demo = parsed.demo
        else:
            demo = os.environ.get(ENV_DEMO, "").strip().lower() in _TRUTHY

        log_file_value = parsed.log_file or os.environ.get(ENV_LOG_FILE)
        log_file = Path(log_file_value) if log_file_value else None

        return cls(
            server_url=server_url,
            timeout=timeout,
            page_size=page_size,
            demo=demo,
            log_file=log_file,
        )
