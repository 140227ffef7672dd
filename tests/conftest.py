import base64
import gzip
import json
from typing import Any, Dict, List, Optional

import pytest

from screeps_exporter.errors import TransportError
from screeps_exporter.store import MetricStore


def envelope(**fields: Any) -> bytes:
    body = {"ok": 1}
    body.update(fields)
    return json.dumps(body).encode("utf-8")


def memory_payload(history: List[Dict[str, Any]], marker: bool = True) -> bytes:
    raw = json.dumps({"stats": {"history": history}}).encode("utf-8")
    data = base64.b64encode(gzip.compress(raw)).decode("ascii")
    return envelope(data=("gz:" + data) if marker else data)


def segment_payload(stats: Dict[str, Any]) -> bytes:
    return envelope(data=json.dumps(stats))


def room(level=3, creeps=5, available=200, capacity=500, **extra) -> Dict[str, Any]:
    data = {
        "rcl": {"level": level, "progress": 10, "progressTotal": 100},
        "creeps": creeps,
        "energyAvailable": available,
        "energyCapacityAvailable": capacity,
    }
    data.update(extra)
    return data


def stats(rooms: Optional[Dict[str, Any]] = None, tick=1000, **extra) -> Dict[str, Any]:
    data = {
        "tick": tick,
        "ms": 1600000000000,
        "cpu": {"used": 12.5, "limit": 20, "bucket": 10000},
        "gcl": {"level": 4, "progress": 1.5, "progressTotal": 3.0},
        "gpl": {"level": 0, "progress": 0, "progressTotal": 1000},
        "rooms": rooms if rooms is not None else {},
    }
    data.update(extra)
    return data


class FakeClient:
    """Stands in for ScreepsClient; values are payload bytes or exceptions to raise."""

    def __init__(self, account: Any, orders: Any, shards: Dict[str, Any]):
        self.account = account
        self.orders = orders
        self.shards = shards
        self.calls: List[Any] = []

    @staticmethod
    def _answer(value: Any) -> bytes:
        if isinstance(value, Exception):
            raise value
        return value

    def fetch_account(self) -> bytes:
        self.calls.append("account")
        return self._answer(self.account)

    def fetch_market_orders(self) -> bytes:
        self.calls.append("orders")
        return self._answer(self.orders)

    def fetch_memory(self, shard: str, path: str = "") -> bytes:
        self.calls.append(("memory", shard, path))
        return self._answer(self.shards[shard])

    def fetch_segment(self, shard: str, segment: int) -> bytes:
        self.calls.append(("segment", shard, segment))
        return self._answer(self.shards[shard])


@pytest.fixture
def store() -> MetricStore:
    return MetricStore()


@pytest.fixture
def account_payload() -> bytes:
    return envelope(money=100, resources={"energy": 50}, cpuShard={"shard0": 20})


@pytest.fixture
def transport_error() -> TransportError:
    return TransportError("connection refused", "https://screeps.com/api/user/memory")
