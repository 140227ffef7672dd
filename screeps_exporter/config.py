import argparse
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .client import DEFAULT_API_URL
from .decoder import MODE_MEMORY, MODES
from .errors import ConfigError


@dataclass
class ExporterConfig:
    shards: List[str] = field(default_factory=list)
    token: str = ""
    mode: str = MODE_MEMORY
    segment: int = 0
    memory_path: str = ""
    api_url: str = DEFAULT_API_URL
    interval: float = 60.0
    port: int = 8080
    addr: str = "0.0.0.0"
    request_timeout: Optional[float] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None


def _split_shards(value: str) -> List[str]:
    return [s.strip() for s in (value or "").split(",") if s.strip()]


def _number(value: Optional[str], name: str, kind=float):
    if value is None or str(value).strip() == "":
        return None
    try:
        return kind(str(value).strip())
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}") from None


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="screeps-exporter",
        description="Export Screeps account, shard and room statistics to Prometheus.",
    )
    parser.add_argument("shard", nargs="?", help="Shard name(s), comma separated (SCREEPS_SHARDS)")
    parser.add_argument("token", nargs="?", help="API auth token (SCREEPS_TOKEN)")
    parser.add_argument("--mode", choices=MODES, help="Stats source: memory history or a memory segment (SCREEPS_MODE)")
    parser.add_argument("--segment", help="Memory segment holding the stats (SCREEPS_SEGMENT)")
    parser.add_argument("--memory-path", help="Memory path to fetch in memory mode (SCREEPS_MEMORY_PATH)")
    parser.add_argument("--api-url", help=f"API base URL (SCREEPS_API_URL, default {DEFAULT_API_URL})")
    parser.add_argument("--interval", help="Seconds between collections (SCRAPE_INTERVAL)")
    parser.add_argument("--port", help="Metrics listen port (EXPORTER_PORT)")
    parser.add_argument("--addr", help="Metrics listen address (EXPORTER_ADDR)")
    parser.add_argument("--request-timeout", help="Per request timeout in seconds (SCREEPS_REQUEST_TIMEOUT)")
    parser.add_argument("--log-level", help="Log level (LOG_LEVEL)")
    parser.add_argument("--log-file", help="Also log to this rotated file (LOG_FILE)")
    return parser.parse_args(argv)


def load_config(argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> ExporterConfig:
    """Build the configuration from the environment, overridden by the command line.

    Raises ConfigError when no shard or no token is configured, or when a
    numeric setting does not parse.
    """
    env = os.environ if environ is None else environ
    args = parse_args(argv)

    def pick(arg_value: Optional[str], env_name: str) -> Optional[str]:
        if arg_value is not None:
            return arg_value
        return env.get(env_name)

    shards = _split_shards(env.get("SCREEPS_SHARDS", "") or env.get("SCREEPS_SHARD", ""))
    token = env.get("SCREEPS_TOKEN", "")
    if args.shard is not None:
        shards = _split_shards(args.shard)
    if args.token is not None:
        token = args.token

    if not shards:
        raise ConfigError("no shard configured (SCREEPS_SHARDS)")
    if not token.strip():
        raise ConfigError("no token configured (SCREEPS_TOKEN)")

    mode = (pick(args.mode, "SCREEPS_MODE") or MODE_MEMORY).strip().lower()
    if mode not in MODES:
        raise ConfigError(f"SCREEPS_MODE must be one of {', '.join(MODES)}, got {mode!r}")

    cfg = ExporterConfig(shards=shards, token=token.strip(), mode=mode)

    segment = _number(pick(args.segment, "SCREEPS_SEGMENT"), "SCREEPS_SEGMENT", int)
    if segment is not None:
        if not 0 <= segment <= 99:
            raise ConfigError(f"SCREEPS_SEGMENT must be between 0 and 99, got {segment}")
        cfg.segment = segment

    interval = _number(pick(args.interval, "SCRAPE_INTERVAL"), "SCRAPE_INTERVAL")
    if interval is not None:
        if interval <= 0:
            raise ConfigError(f"SCRAPE_INTERVAL must be positive, got {interval:g}")
        cfg.interval = interval

    port = _number(pick(args.port, "EXPORTER_PORT"), "EXPORTER_PORT", int)
    if port is not None:
        cfg.port = port

    timeout = _number(pick(args.request_timeout, "SCREEPS_REQUEST_TIMEOUT"), "SCREEPS_REQUEST_TIMEOUT")
    if timeout is not None:
        cfg.request_timeout = timeout

    cfg.memory_path = (pick(args.memory_path, "SCREEPS_MEMORY_PATH") or "").strip()
    cfg.api_url = (pick(args.api_url, "SCREEPS_API_URL") or DEFAULT_API_URL).strip().rstrip("/")
    cfg.addr = (pick(args.addr, "EXPORTER_ADDR") or cfg.addr).strip()
    cfg.log_level = (pick(args.log_level, "LOG_LEVEL") or cfg.log_level).strip()
    cfg.log_file = pick(args.log_file, "LOG_FILE") or None
    return cfg
