"""Command-line and environment configuration."""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence
from dataclasses import dataclass

from .coingecko import DEFAULT_API_URL, DEFAULT_TIMEOUT
from .exceptions import ConfigError
from .refresher import DEFAULT_REFRESH_INTERVAL

DEFAULT_CURRENCIES = "bitcoin,ethereum,iexec-rlc"
DEFAULT_LISTEN_ADDRESS = ":8080"
ALL_INTERFACES = "0.0.0.0"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class Settings:
    """Validated runtime configuration. Immutable for the process lifetime."""

    identifiers: tuple[str, ...]
    host: str = ALL_INTERFACES
    port: int = 8080
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    api_url: str = DEFAULT_API_URL
    request_timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.identifiers:
            raise ConfigError("at least one currency identifier is required")
        if self.refresh_interval <= 0:
            raise ConfigError(f"refresh interval must be positive, got {self.refresh_interval}")
        if self.request_timeout <= 0:
            raise ConfigError(f"request timeout must be positive, got {self.request_timeout}")
        if not self.api_url:
            raise ConfigError("API URL must not be empty")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"unknown log level {self.log_level!r}")

    @property
    def listen_address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_args(cls, argv: Sequence[str] | None = None) -> Settings:
        """Parse ``argv`` (default: ``sys.argv[1:]``).

        Defaults come from ``EXPORTER_*`` environment variables when set.
        Invalid values print usage and exit with status 2.
        """
        parser = build_parser()
        args = parser.parse_args(argv)
        try:
            host, port = parse_listen_address(args.listen_address)
            return cls(
                identifiers=parse_currencies(args.currencies),
                host=host,
                port=port,
                refresh_interval=args.refresh_interval,
                api_url=args.api_url,
                log_level=args.log_level,
            )
        except ConfigError as e:
            parser.error(str(e))


def build_parser() -> argparse.ArgumentParser:
    env = os.environ
    parser = argparse.ArgumentParser(
        prog="crypto-currency-exporter",
        description="Export CoinGecko USD prices as plain-text metrics.",
    )
    # Both -flag and --flag spellings are accepted
    parser.add_argument(
        "-currencies",
        "--currencies",
        default=env.get("EXPORTER_CURRENCIES", DEFAULT_CURRENCIES),
        help="Comma-separated list of CoinGecko ids to fetch (default: %(default)s).",
    )
    parser.add_argument(
        "-listen-address",
        "--listen-address",
        dest="listen_address",
        default=env.get("EXPORTER_LISTEN_ADDRESS", DEFAULT_LISTEN_ADDRESS),
        help="Address to listen on, as [host]:port (default: %(default)s).",
    )
    parser.add_argument(
        "--refresh-interval",
        type=float,
        default=env.get("EXPORTER_REFRESH_INTERVAL", str(DEFAULT_REFRESH_INTERVAL)),
        help="Seconds between price refreshes (default: %(default)s).",
    )
    parser.add_argument(
        "--api-url",
        default=env.get("EXPORTER_API_URL", DEFAULT_API_URL),
        help="CoinGecko simple/price endpoint (default: %(default)s).",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=env.get("EXPORTER_LOG_LEVEL", "INFO"),
        help="Logging level (default: %(default)s).",
    )
    return parser


def parse_currencies(raw: str) -> tuple[str, ...]:
    """Split a comma-separated id list: strip blanks, drop duplicates, keep order."""
    seen: dict[str, None] = {}
    for part in raw.split(","):
        ident = part.strip()
        if ident:
            seen.setdefault(ident, None)
    if not seen:
        raise ConfigError("missing required flag: currencies")
    return tuple(seen)


def parse_listen_address(raw: str) -> tuple[str, int]:
    """``":8080"`` -> ``("0.0.0.0", 8080)``; ``"[::1]:9000"`` -> ``("::1", 9000)``."""
    raw = raw.strip()
    if not raw:
        raise ConfigError("missing required flag: listen-address")

    host, sep, port_str = raw.rpartition(":")
    if not sep:
        raise ConfigError(f"invalid listen address {raw!r}: expected [host]:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        port = int(port_str)
    except ValueError:
        raise ConfigError(f"invalid port in listen address {raw!r}") from None
    if not 0 <= port <= 65535:
        raise ConfigError(f"port out of range in listen address {raw!r}")

    return host or ALL_INTERFACES, port
