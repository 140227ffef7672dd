"""Exported metric names and label sets.

This table is what dashboards depend on: gauge names, label names and the
order of label names must stay stable.
"""

from typing import Dict, NamedTuple, Tuple

PREFIX = "screeps_"

INTERSHARD = "intershard"

RESOURCES = PREFIX + "resources"
CPU_SHARD = PREFIX + "cpu_shard"
MARKET_ORDERS = PREFIX + "market_orders"
TICK = PREFIX + "tick"
MS = PREFIX + "ms"
LAST_GLOBAL_RESET_TICK = PREFIX + "last_global_reset_tick"
LAST_GLOBAL_RESET_MS = PREFIX + "last_global_reset_ms"
CPU = PREFIX + "cpu"
GCL = PREFIX + "gcl"
GPL = PREFIX + "gpl"
RCL = PREFIX + "rcl"
ENERGY = PREFIX + "energy"
CREEPS = PREFIX + "creeps"
STRUCTURES = PREFIX + "structures"
STORAGE = PREFIX + "storage"
TERMINAL = PREFIX + "terminal"

PROCESSING_TIME = PREFIX + "stats_processing_time"
PROCESSING_TIME_BUCKETS = (0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60)

SHARD_LABELS = ("shard",)
TYPED_LABELS = ("shard", "type")
ROOM_LABELS = ("shard", "room")
ROOM_TYPED_LABELS = ("shard", "room", "type")
MARKET_LABELS = ("shard", "room", "type", "order_type", "metric")

MARKET_METRICS = ("price", "amount", "remainingAmount", "totalAmount")

# name -> (help, label names)
GAUGES: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    RESOURCES: ("Account money and intershard resources", TYPED_LABELS),
    CPU_SHARD: ("CPU allocated to each shard", SHARD_LABELS),
    MARKET_ORDERS: ("Open market orders", MARKET_LABELS),
    TICK: ("Current tick", SHARD_LABELS),
    MS: ("Current time", SHARD_LABELS),
    LAST_GLOBAL_RESET_TICK: ("Tick of the last global reset", SHARD_LABELS),
    LAST_GLOBAL_RESET_MS: ("Time of the last global reset", SHARD_LABELS),
    CPU: ("CPU statistics", TYPED_LABELS),
    GCL: ("Global Control Level", TYPED_LABELS),
    GPL: ("Global Power Level", TYPED_LABELS),
    RCL: ("Room Control Level", ROOM_TYPED_LABELS),
    ENERGY: ("Energy statistics", ROOM_TYPED_LABELS),
    CREEPS: ("Creep counts", ROOM_LABELS),
    STRUCTURES: ("Structure counts", ROOM_TYPED_LABELS),
    STORAGE: ("Storage contents", ROOM_TYPED_LABELS),
    TERMINAL: ("Terminal contents", ROOM_TYPED_LABELS),
}

Labels = Dict[str, str]


class MetricWrite(NamedTuple):
    name: str
    labels: Labels
    value: float


def shard_labels(shard: str) -> Labels:
    return {"shard": shard}


def typed_labels(shard: str, kind: str) -> Labels:
    return {"shard": shard, "type": kind}


def intershard_labels(kind: str) -> Labels:
    return typed_labels(INTERSHARD, kind)


def room_labels(shard: str, room: str) -> Labels:
    return {"shard": shard, "room": room}


def room_typed_labels(shard: str, room: str, kind: str) -> Labels:
    return {"shard": shard, "room": room, "type": kind}


def market_labels(shard: str, room: str, resource_type: str, order_type: str, metric: str) -> Labels:
    if metric not in MARKET_METRICS:
        raise ValueError(f"unknown market order metric {metric!r}")
    return {"shard": shard, "room": room, "type": resource_type, "order_type": order_type, "metric": metric}
