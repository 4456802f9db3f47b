"""
Counterexample Extractor
========================

Turns the snapshot of a refuted invocation site into a CounterexampleTrace:
the receiver first (as `this`, dumped structurally), then every other
binding under its source-level name, in snapshot order.

The structural dump is capped at DUMP_MAX_DEPTH levels of nesting and
DUMP_MAX_BREADTH elements per container. Deeper levels print as `...`,
elided elements as a trailing `...`, and a container already being dumped
higher up the path prints as `<cycle>`.
"""
from collections.abc import Mapping, Set
from typing import Any, List, Sequence

from bounded_verify.engine.base import SolvedModel
from bounded_verify.types import CounterexampleTrace

RECEIVER_KEY = "thiz_0"
RECEIVER_DISPLAY = "this"
DUMP_MAX_DEPTH = 5
DUMP_MAX_BREADTH = 5


def display_name(variable: str) -> str:
    """`n_0` -> `n`; names without a suffix are kept as they are."""
    head, sep, _ = variable.rpartition("_")
    return head if sep else variable


def dump(value: Any, max_depth: int = DUMP_MAX_DEPTH, max_breadth: int = DUMP_MAX_BREADTH) -> str:
    return _dump(value, max_depth, max_breadth, [])


def _dump(value: Any, depth: int, breadth: int, path: List[int]) -> str:
    if value is None:
        return "null"
    if isinstance(value, (str, bytes, int, float, bool)):
        return str(value)
    if id(value) in path:
        return "<cycle>"
    if depth <= 0:
        return "..."

    path.append(id(value))
    try:
        if isinstance(value, Mapping):
            items = [f"{k}={_dump(v, depth - 1, breadth, path)}"
                     for k, v in _take(value.items(), breadth)]
            return "{" + _join(items, len(value) > breadth) + "}"
        if isinstance(value, (list, tuple)):
            items = [_dump(v, depth - 1, breadth, path) for v in _take(value, breadth)]
            return "[" + _join(items, len(value) > breadth) + "]"
        if isinstance(value, Set):
            ordered = sorted(value, key=repr)
            items = [_dump(v, depth - 1, breadth, path) for v in _take(ordered, breadth)]
            return "{" + _join(items, len(value) > breadth) + "}"
        attrs = getattr(value, "__dict__", None)
        if attrs is not None:
            items = [f"{k}={_dump(v, depth - 1, breadth, path)}"
                     for k, v in _take(attrs.items(), breadth)]
            return type(value).__name__ + "{" + _join(items, len(attrs) > breadth) + "}"
        return str(value)
    finally:
        path.pop()


def _take(items, n: int) -> list:
    out = []
    for item in items:
        if len(out) >= n:
            break
        out.append(item)
    return out


def _join(items: List[str], truncated: bool) -> str:
    if truncated:
        items = items + ["..."]
    return ", ".join(items)


def trace_from_snapshot(snapshot: Mapping) -> CounterexampleTrace:
    entries = []
    if RECEIVER_KEY in snapshot:
        entries.append((RECEIVER_DISPLAY, dump(snapshot[RECEIVER_KEY])))
    for key, value in snapshot.items():
        if key == RECEIVER_KEY:
            continue
        entries.append((display_name(key), str(value)))
    return CounterexampleTrace(entries=tuple(entries))


def extract_counterexample(model: SolvedModel, context: Sequence[str],
                           class_name: str, method_id: str) -> CounterexampleTrace:
    """Recover the snapshot for one invocation site and format it as a trace."""
    return trace_from_snapshot(model.snapshot(context, class_name, method_id))
