"""Decoding of Screeps API payloads into the canonical state model.

The memory endpoints deliver the same stats in two shapes:

- segment: ``{"ok": 1, "data": "<json stats>"}``, the stats object is
  JSON encoded a second time inside ``data``.
- memory: ``{"ok": 1, "data": "gz:<base64 gzip json>"}``, the decompressed
  document is ``{"stats": {"history": [stats, ...]}}`` and only the last
  history entry is current.

Both converge on :func:`parse_stats`, which coerces every number to float
and fills absent fields with zero.
"""

import base64
import binascii
import gzip
import json
import zlib
from typing import Any, Dict, List, Optional

from .errors import ConfigError, DecodeError
from .models import AccountState, CpuStats, MarketOrder, Progress, RoomState, ShardState

GZIP_MARKER = "gz:"

MODE_MEMORY = "memory"
MODE_SEGMENT = "segment"
MODES = (MODE_MEMORY, MODE_SEGMENT)


def _safe_float(value: Any, path: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{path}: expected a number, got {type(value).__name__}")
    try:
        return float(value)
    except OverflowError:
        raise DecodeError(f"{path}: number out of range") from None


def _optional_float(value: Any, path: str) -> Optional[float]:
    if value is None:
        return None
    return _safe_float(value, path)


def _as_dict(value: Any, path: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(f"{path}: expected an object, got {type(value).__name__}")
    return value


def _as_list(value: Any, path: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(f"{path}: expected a list, got {type(value).__name__}")
    return value


def _as_str(value: Any, path: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"{path}: expected a string, got {type(value).__name__}")
    return value


def _number_map(value: Any, path: str) -> Dict[str, float]:
    return {str(key): _safe_float(amount, f"{path}.{key}") for key, amount in _as_dict(value, path).items()}


def _load_json(raw: Any, what: str) -> Any:
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError(f"{what} is not valid JSON: {exc}") from exc
    except RecursionError:
        raise DecodeError(f"{what} is nested too deeply") from None


def _envelope(payload: bytes) -> Dict[str, Any]:
    document = _load_json(payload, "response")
    if not isinstance(document, dict):
        raise DecodeError("response envelope is not an object")
    if not document.get("ok"):
        error = document.get("error")
        raise DecodeError(f"API reported failure: {error}" if error else "API response is not ok")
    return document


def _envelope_data(payload: bytes) -> str:
    data = _envelope(payload).get("data")
    if data is None:
        raise DecodeError("response has no data")
    if not isinstance(data, str):
        raise DecodeError(f"response data: expected a string, got {type(data).__name__}")
    return data


def parse_progress(raw: Any, path: str) -> Progress:
    raw = _as_dict(raw, path)
    return Progress(
        level=_safe_float(raw.get("level"), f"{path}.level"),
        progress=_safe_float(raw.get("progress"), f"{path}.progress"),
        progress_total=_safe_float(raw.get("progressTotal"), f"{path}.progressTotal"),
    )


def parse_room(raw: Any, path: str) -> RoomState:
    raw = _as_dict(raw, path)
    terminal = raw.get("terminal")
    return RoomState(
        rcl=parse_progress(raw.get("rcl"), f"{path}.rcl"),
        creeps=_safe_float(raw.get("creeps"), f"{path}.creeps"),
        energy_available=_safe_float(raw.get("energyAvailable"), f"{path}.energyAvailable"),
        energy_capacity_available=_safe_float(
            raw.get("energyCapacityAvailable"), f"{path}.energyCapacityAvailable"
        ),
        structures=_number_map(raw.get("structures"), f"{path}.structures"),
        storage=_number_map(raw.get("storage"), f"{path}.storage"),
        terminal=None if terminal is None else _number_map(terminal, f"{path}.terminal"),
    )


def parse_stats(raw: Any, path: str = "stats") -> ShardState:
    raw = _as_dict(raw, path)
    cpu = _as_dict(raw.get("cpu"), f"{path}.cpu")

    reset_tick = raw.get("lastGlobalResetTick")
    reset_ms = raw.get("lastGlobalResetMs")
    if "lastGlobalReset" in raw:
        nested = _as_dict(raw.get("lastGlobalReset"), f"{path}.lastGlobalReset")
        reset_tick = nested.get("tick", reset_tick)
        reset_ms = nested.get("ms", reset_ms)

    rooms = {
        str(name): parse_room(room, f"{path}.rooms.{name}")
        for name, room in _as_dict(raw.get("rooms"), f"{path}.rooms").items()
    }
    return ShardState(
        tick=_safe_float(raw.get("tick"), f"{path}.tick"),
        ms=_safe_float(raw.get("ms"), f"{path}.ms"),
        cpu=CpuStats(
            used=_safe_float(cpu.get("used"), f"{path}.cpu.used"),
            limit=_safe_float(cpu.get("limit"), f"{path}.cpu.limit"),
            bucket=_safe_float(cpu.get("bucket"), f"{path}.cpu.bucket"),
        ),
        gcl=parse_progress(raw.get("gcl"), f"{path}.gcl"),
        gpl=parse_progress(raw.get("gpl"), f"{path}.gpl"),
        rooms=rooms,
        last_global_reset_tick=_optional_float(reset_tick, f"{path}.lastGlobalResetTick"),
        last_global_reset_ms=_optional_float(reset_ms, f"{path}.lastGlobalResetMs"),
    )


class SegmentDecoder:
    """Stats written as JSON into a memory segment."""

    mode = MODE_SEGMENT

    def decode(self, payload: bytes) -> ShardState:
        data = _envelope_data(payload)
        return parse_stats(_load_json(data, "segment data"))


class MemoryDecoder:
    """Stats history kept in Memory, usually gzip compressed by the API."""

    mode = MODE_MEMORY

    @staticmethod
    def unpack(data: str) -> Any:
        if not data.startswith(GZIP_MARKER):
            try:
                return json.loads(data)
            except ValueError:
                pass
            except RecursionError:
                raise DecodeError("memory data is nested too deeply") from None
        encoded = data[len(GZIP_MARKER):] if data.startswith(GZIP_MARKER) else data
        try:
            compressed = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeError(f"memory data is not valid base64: {exc}") from exc
        try:
            raw = gzip.decompress(compressed)
        except (OSError, EOFError, zlib.error) as exc:
            raise DecodeError(f"memory data is not a valid gzip stream: {exc}") from exc
        return _load_json(raw, "memory data")

    def decode(self, payload: bytes) -> ShardState:
        memory = _as_dict(self.unpack(_envelope_data(payload)), "memory")
        stats = _as_dict(memory.get("stats"), "memory.stats")
        history = _as_list(stats.get("history"), "memory.stats.history")
        if not history:
            raise DecodeError("memory.stats.history is empty")
        return parse_stats(history[-1], f"memory.stats.history[{len(history) - 1}]")


def make_decoder(mode: str):
    if mode == MODE_MEMORY:
        return MemoryDecoder()
    if mode == MODE_SEGMENT:
        return SegmentDecoder()
    raise ConfigError(f"unknown mode {mode!r}, expected one of {', '.join(MODES)}")


def decode_account(payload: bytes) -> AccountState:
    document = _envelope(payload)
    return AccountState(
        money=_safe_float(document.get("money"), "me.money"),
        resources=_number_map(document.get("resources"), "me.resources"),
        cpu_shard=_number_map(document.get("cpuShard"), "me.cpuShard"),
    )


def parse_market_order(raw: Any, path: str) -> MarketOrder:
    raw = _as_dict(raw, path)
    return MarketOrder(
        active=bool(raw.get("active", False)),
        order_type=_as_str(raw.get("type"), f"{path}.type"),
        resource_type=_as_str(raw.get("resourceType"), f"{path}.resourceType"),
        room_name=_as_str(raw.get("roomName"), f"{path}.roomName"),
        price=_safe_float(raw.get("price"), f"{path}.price"),
        amount=_safe_float(raw.get("amount"), f"{path}.amount"),
        remaining_amount=_safe_float(raw.get("remainingAmount"), f"{path}.remainingAmount"),
        total_amount=_safe_float(raw.get("totalAmount"), f"{path}.totalAmount"),
    )


def decode_market_orders(payload: bytes) -> Dict[str, List[MarketOrder]]:
    document = _envelope(payload)
    orders: Dict[str, List[MarketOrder]] = {}
    for shard, entries in _as_dict(document.get("shards"), "orders.shards").items():
        orders[str(shard)] = [
            parse_market_order(entry, f"orders.shards.{shard}[{index}]")
            for index, entry in enumerate(_as_list(entries, f"orders.shards.{shard}"))
        ]
    return orders
