from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Progress:
    level: float = 0.0
    progress: float = 0.0
    progress_total: float = 0.0


@dataclass(frozen=True)
class CpuStats:
    used: float = 0.0
    limit: float = 0.0
    bucket: float = 0.0


@dataclass(frozen=True)
class RoomState:
    rcl: Progress = field(default_factory=Progress)
    creeps: float = 0.0
    energy_available: float = 0.0
    energy_capacity_available: float = 0.0
    structures: Dict[str, float] = field(default_factory=dict)
    storage: Dict[str, float] = field(default_factory=dict)
    # Only reported by the segment payload.
    terminal: Optional[Dict[str, float]] = None


@dataclass(frozen=True)
class ShardState:
    tick: float = 0.0
    ms: float = 0.0
    cpu: CpuStats = field(default_factory=CpuStats)
    gcl: Progress = field(default_factory=Progress)
    gpl: Progress = field(default_factory=Progress)
    rooms: Dict[str, RoomState] = field(default_factory=dict)
    # Absent from the compressed memory history.
    last_global_reset_tick: Optional[float] = None
    last_global_reset_ms: Optional[float] = None


@dataclass(frozen=True)
class MarketOrder:
    active: bool = False
    order_type: str = ""
    resource_type: str = ""
    room_name: str = ""
    price: float = 0.0
    amount: float = 0.0
    remaining_amount: float = 0.0
    total_amount: float = 0.0


@dataclass(frozen=True)
class AccountState:
    money: float = 0.0
    resources: Dict[str, float] = field(default_factory=dict)
    cpu_shard: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class GameState:
    """One cycle's snapshot of the account, built fresh and discarded after projection."""

    account: AccountState = field(default_factory=AccountState)
    shards: Dict[str, ShardState] = field(default_factory=dict)
    market_orders: Dict[str, List[MarketOrder]] = field(default_factory=dict)
