from typing import Dict, List, Optional

from . import metrics
from .metrics import MetricWrite
from .models import AccountState, GameState, MarketOrder, Progress, RoomState, ShardState


def _progress_writes(name: str, labels: Dict[str, str], progress: Progress) -> List[MetricWrite]:
    return [
        MetricWrite(name, {**labels, "type": "level"}, progress.level),
        MetricWrite(name, {**labels, "type": "progress"}, progress.progress),
        MetricWrite(name, {**labels, "type": "progressTotal"}, progress.progress_total),
    ]


def _amounts(name: str, shard: str, room: str, amounts: Dict[str, float]) -> List[MetricWrite]:
    return [
        MetricWrite(name, metrics.room_typed_labels(shard, room, kind), amounts[kind])
        for kind in sorted(amounts)
    ]


def _or_zero(value: Optional[float]) -> float:
    return 0.0 if value is None else value


def project_account(account: AccountState) -> List[MetricWrite]:
    writes = [MetricWrite(metrics.RESOURCES, metrics.intershard_labels("money"), account.money)]
    for kind in sorted(account.resources):
        writes.append(MetricWrite(metrics.RESOURCES, metrics.intershard_labels(kind), account.resources[kind]))
    for shard in sorted(account.cpu_shard):
        writes.append(MetricWrite(metrics.CPU_SHARD, metrics.shard_labels(shard), account.cpu_shard[shard]))
    return writes


def project_order(shard: str, order: MarketOrder) -> List[MetricWrite]:
    values = {
        "price": order.price,
        "amount": order.amount,
        "remainingAmount": order.remaining_amount,
        "totalAmount": order.total_amount,
    }
    return [
        MetricWrite(
            metrics.MARKET_ORDERS,
            metrics.market_labels(shard, order.room_name, order.resource_type, order.order_type, metric),
            values[metric],
        )
        for metric in metrics.MARKET_METRICS
    ]


def project_room(shard: str, name: str, room: RoomState) -> List[MetricWrite]:
    writes = _progress_writes(metrics.RCL, metrics.room_labels(shard, name), room.rcl)
    writes.append(
        MetricWrite(metrics.ENERGY, metrics.room_typed_labels(shard, name, "available"), room.energy_available)
    )
    writes.append(
        MetricWrite(
            metrics.ENERGY,
            metrics.room_typed_labels(shard, name, "capacityAvailable"),
            room.energy_capacity_available,
        )
    )
    writes.append(MetricWrite(metrics.CREEPS, metrics.room_labels(shard, name), room.creeps))
    writes.extend(_amounts(metrics.STRUCTURES, shard, name, room.structures))
    writes.extend(_amounts(metrics.STORAGE, shard, name, room.storage))
    if room.terminal is not None:
        writes.extend(_amounts(metrics.TERMINAL, shard, name, room.terminal))
    return writes


def project_shard(shard: str, stats: ShardState) -> List[MetricWrite]:
    base = metrics.shard_labels(shard)
    writes = [
        MetricWrite(metrics.TICK, base, stats.tick),
        MetricWrite(metrics.MS, base, stats.ms),
        MetricWrite(metrics.LAST_GLOBAL_RESET_TICK, base, _or_zero(stats.last_global_reset_tick)),
        MetricWrite(metrics.LAST_GLOBAL_RESET_MS, base, _or_zero(stats.last_global_reset_ms)),
        MetricWrite(metrics.CPU, metrics.typed_labels(shard, "used"), stats.cpu.used),
        MetricWrite(metrics.CPU, metrics.typed_labels(shard, "limit"), stats.cpu.limit),
        MetricWrite(metrics.CPU, metrics.typed_labels(shard, "bucket"), stats.cpu.bucket),
    ]
    writes.extend(_progress_writes(metrics.GCL, base, stats.gcl))
    writes.extend(_progress_writes(metrics.GPL, base, stats.gpl))
    for name in sorted(stats.rooms):
        writes.extend(project_room(shard, name, stats.rooms[name]))
    return writes


def project(state: GameState) -> List[MetricWrite]:
    """Flatten a snapshot into gauge writes, in a stable order.

    The writes only describe series present in ``state``; evicting series of
    rooms or shards that disappeared is the store's reset on publish.
    """
    writes = project_account(state.account)
    for shard in sorted(state.market_orders):
        for order in state.market_orders[shard]:
            writes.extend(project_order(shard, order))
    for shard in sorted(state.shards):
        writes.extend(project_shard(shard, state.shards[shard]))
    return writes
