import contextlib
import logging
import sys
from typing import List, Optional

from . import __version__
from .client import ScreepsClient
from .collector import Collector
from .config import load_config
from .decoder import make_decoder
from .errors import ConfigError
from .logger import setup_logging
from .store import MetricStore

log = logging.getLogger("screeps_exporter")


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(message)s", stream=sys.stderr)

    try:
        cfg = load_config(argv)
    except ConfigError as exc:
        log.critical(f"invalid config: {exc}")
        sys.exit(1)

    setup_logging(cfg.log_level, cfg.log_file)
    log.info(f"Screeps exporter v{__version__} starting")

    client = ScreepsClient(cfg.api_url, cfg.token, timeout=cfg.request_timeout)
    store = MetricStore()
    collector = Collector(
        client=client,
        decoder=make_decoder(cfg.mode),
        store=store,
        shards=cfg.shards,
        interval=cfg.interval,
        segment=cfg.segment,
        memory_path=cfg.memory_path,
    )

    store.serve(cfg.port, cfg.addr)
    try:
        with contextlib.suppress(KeyboardInterrupt):
            collector.run()
    finally:
        client.close()
        log.info("Shutdown complete")


if __name__ == "__main__":
    main()
