import pytest

from screeps_exporter import metrics
from screeps_exporter.metrics import MetricWrite
from screeps_exporter.models import (
    AccountState,
    CpuStats,
    GameState,
    MarketOrder,
    Progress,
    RoomState,
    ShardState,
)
from screeps_exporter.projector import project, project_order, project_room, project_shard


def _as_map(writes):
    return {(w.name, tuple(sorted(w.labels.items()))): w.value for w in writes}


def _key(name, **labels):
    return (name, tuple(sorted(labels.items())))


ORDER = MarketOrder(
    active=True,
    order_type="buy",
    resource_type="H",
    room_name="W2N2",
    price=1.25,
    amount=100,
    remaining_amount=40,
    total_amount=200,
)


def test_account_writes_use_intershard_labels():
    state = GameState(account=AccountState(money=100, resources={"energy": 50, "token": 2}, cpu_shard={"shard0": 20}))
    values = _as_map(project(state))
    assert values == {
        _key("screeps_resources", shard="intershard", type="money"): 100,
        _key("screeps_resources", shard="intershard", type="energy"): 50,
        _key("screeps_resources", shard="intershard", type="token"): 2,
        _key("screeps_cpu_shard", shard="shard0"): 20,
    }


def test_market_order_emits_four_writes():
    writes = project_order("shard1", ORDER)
    assert len(writes) == 4
    assert {w.labels["metric"] for w in writes} == set(metrics.MARKET_METRICS)
    assert {w.name for w in writes} == {"screeps_market_orders"}
    values = {w.labels["metric"]: w.value for w in writes}
    assert values == {"price": 1.25, "amount": 100, "remainingAmount": 40, "totalAmount": 200}
    assert writes[0].labels == {
        "shard": "shard1",
        "room": "W2N2",
        "type": "H",
        "order_type": "buy",
        "metric": "price",
    }


def test_shard_counters():
    shard = ShardState(
        tick=10,
        ms=20,
        cpu=CpuStats(used=1, limit=2, bucket=3),
        gcl=Progress(4, 5, 6),
        gpl=Progress(7, 8, 9),
    )
    values = _as_map(project_shard("shard0", shard))
    assert values[_key("screeps_tick", shard="shard0")] == 10
    assert values[_key("screeps_ms", shard="shard0")] == 20
    assert values[_key("screeps_last_global_reset_tick", shard="shard0")] == 0
    assert values[_key("screeps_last_global_reset_ms", shard="shard0")] == 0
    assert values[_key("screeps_cpu", shard="shard0", type="bucket")] == 3
    assert values[_key("screeps_gcl", shard="shard0", type="progressTotal")] == 6
    assert values[_key("screeps_gpl", shard="shard0", type="level")] == 7
    assert len(values) == 13


def test_room_writes():
    room = RoomState(
        rcl=Progress(3, 10, 100),
        creeps=5,
        energy_available=200,
        energy_capacity_available=500,
        structures={"spawn": 1, "extension": 10},
        storage={"energy": 5000},
    )
    values = _as_map(project_room("shard0", "W1N1", room))
    assert values == {
        _key("screeps_rcl", shard="shard0", room="W1N1", type="level"): 3,
        _key("screeps_rcl", shard="shard0", room="W1N1", type="progress"): 10,
        _key("screeps_rcl", shard="shard0", room="W1N1", type="progressTotal"): 100,
        _key("screeps_energy", shard="shard0", room="W1N1", type="available"): 200,
        _key("screeps_energy", shard="shard0", room="W1N1", type="capacityAvailable"): 500,
        _key("screeps_creeps", shard="shard0", room="W1N1"): 5,
        _key("screeps_structures", shard="shard0", room="W1N1", type="spawn"): 1,
        _key("screeps_structures", shard="shard0", room="W1N1", type="extension"): 10,
        _key("screeps_storage", shard="shard0", room="W1N1", type="energy"): 5000,
    }


def test_terminal_only_when_reported():
    with_terminal = project_room("shard0", "W1N1", RoomState(terminal={"energy": 300}))
    without_terminal = project_room("shard0", "W1N1", RoomState())
    assert MetricWrite("screeps_terminal", {"shard": "shard0", "room": "W1N1", "type": "energy"}, 300) in with_terminal
    assert not [w for w in without_terminal if w.name == "screeps_terminal"]


def test_projection_order_is_stable():
    rooms_a = {"W2N2": RoomState(), "W1N1": RoomState()}
    rooms_b = {"W1N1": RoomState(), "W2N2": RoomState()}
    state_a = GameState(shards={"shard1": ShardState(rooms=rooms_a), "shard0": ShardState(rooms=rooms_b)})
    state_b = GameState(shards={"shard0": ShardState(rooms=rooms_b), "shard1": ShardState(rooms=rooms_a)})
    writes = project(state_a)
    assert writes == project(state_b)
    shards = [w.labels["shard"] for w in writes if w.name == "screeps_tick"]
    assert shards == ["shard0", "shard1"]


def test_every_write_matches_declared_labels():
    state = GameState(
        account=AccountState(money=1, resources={"energy": 1}, cpu_shard={"shard0": 1}),
        shards={"shard0": ShardState(rooms={"W1N1": RoomState(structures={"road": 3}, terminal={"O": 1})})},
        market_orders={"shard0": [ORDER]},
    )
    for write in project(state):
        _, labelnames = metrics.GAUGES[write.name]
        assert tuple(write.labels) == labelnames


def test_market_labels_reject_unknown_metric():
    with pytest.raises(ValueError):
        metrics.market_labels("shard0", "W1N1", "energy", "sell", "volume")
