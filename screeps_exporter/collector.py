import logging
import threading
import time
from typing import Dict, List, Optional

from .client import ScreepsClient
from .decoder import MODE_SEGMENT, decode_account, decode_market_orders
from .errors import DecodeError, ExporterError, TransportError
from .models import GameState, ShardState
from .projector import project
from .store import MetricStore

log = logging.getLogger(__name__)


class Collector:
    """Runs fetch -> decode -> project -> publish cycles on a fixed interval.

    Every fetch of a cycle completes before the store is touched, so a failure
    anywhere leaves the previous cycle's series in place. Only successful
    cycles record a processing time.
    """

    def __init__(
        self,
        client: ScreepsClient,
        decoder,
        store: MetricStore,
        shards: List[str],
        interval: float = 60.0,
        segment: int = 0,
        memory_path: str = "",
    ):
        self.client = client
        self.decoder = decoder
        self.store = store
        self.shards = list(shards)
        self.interval = interval
        self.segment = segment
        self.memory_path = memory_path

    def _fetch_shard(self, shard: str) -> bytes:
        if self.decoder.mode == MODE_SEGMENT:
            return self.client.fetch_segment(shard, self.segment)
        return self.client.fetch_memory(shard, self.memory_path)

    def gather(self) -> GameState:
        account = decode_account(self.client.fetch_account())
        orders = decode_market_orders(self.client.fetch_market_orders())

        shards: Dict[str, ShardState] = {}
        for shard in self.shards:
            try:
                shards[shard] = self.decoder.decode(self._fetch_shard(shard))
            except TransportError as exc:
                raise TransportError(f"shard {shard}: {exc.reason}", exc.url) from exc
            except DecodeError as exc:
                raise DecodeError(f"shard {shard}: {exc}") from exc
        return GameState(account=account, shards=shards, market_orders=orders)

    def collect_once(self) -> bool:
        start = time.monotonic()
        try:
            state = self.gather()
        except ExporterError as exc:
            log.error(f"Collection failed: {exc}")
            return False

        self.store.publish(project(state))
        elapsed = time.monotonic() - start
        self.store.observe_processing_time(elapsed)
        log.debug(f"Collected {len(state.shards)} shard(s) in {elapsed:.3f}s")
        return True

    def run(self, stop: Optional[threading.Event] = None) -> None:
        stop = stop if stop is not None else threading.Event()
        log.info(f"Collecting shards {', '.join(self.shards)} every {self.interval:g}s using {self.decoder.mode}")
        while not stop.is_set():
            try:
                self.collect_once()
            except Exception:
                log.exception("Unexpected error during collection")
            stop.wait(self.interval)
