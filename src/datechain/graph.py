"""Dependency graph checks for activity collections.

Edges run from an activity to each activity it depends on. Dependencies are
stored as activity ids and resolved to collection positions here; ids that no
longer match an activity are skipped and never count as edges.
"""

from __future__ import annotations

import heapq
from collections import defaultdict
from collections.abc import Iterator, Sequence

from .logger import get_logger
from .models import Activity

logger = get_logger()


def resolve_positions(activities: Sequence[Activity]) -> dict[int, int]:
    """Build the activity id -> collection position lookup table."""
    return {activity.id: position for position, activity in enumerate(activities)}


def dependency_positions(activity: Activity, positions: dict[int, int]) -> list[int]:
    """Positions of an activity's dependencies that still exist."""
    return [positions[dep_id] for dep_id in activity.dependencies if dep_id in positions]


def find_cycle(from_index: int, activities: Sequence[Activity]) -> list[int] | None:
    """Find a dependency cycle reachable from the activity at ``from_index``.

    Runs an iterative depth-first traversal. Nodes on the current path are
    tracked separately from fully explored nodes, so two paths that meet at a
    shared dependency are not mistaken for a cycle.

    Returns:
        Positions along the cycle, first and last entry equal
        (e.g. ``[0, 2, 1, 0]``; a self-reference gives ``[i, i]``),
        or None if no cycle is reachable.
    """
    if not 0 <= from_index < len(activities):
        return None

    positions = resolve_positions(activities)

    def _deps(position: int) -> Iterator[int]:
        return iter(dependency_positions(activities[position], positions))

    path: list[int] = [from_index]
    on_path: set[int] = {from_index}
    finished: set[int] = set()
    stack: list[tuple[int, Iterator[int]]] = [(from_index, _deps(from_index))]

    while stack:
        node, remaining = stack[-1]
        dep = next(remaining, None)

        if dep is None:
            stack.pop()
            path.pop()
            on_path.discard(node)
            finished.add(node)
            continue

        if dep in on_path:
            return [*path[path.index(dep) :], dep]
        if dep in finished:
            continue

        path.append(dep)
        on_path.add(dep)
        stack.append((dep, _deps(dep)))

    return None


def has_cycle(from_index: int, activities: Sequence[Activity]) -> bool:
    """Return True if a cycle (or self-reference) is reachable from ``from_index``."""
    return find_cycle(from_index, activities) is not None


def topological_order(activities: Sequence[Activity]) -> list[int]:
    """Order positions so every activity comes after its dependencies.

    Ties are broken by collection position, so a collection whose
    dependencies all point backwards comes out in its original order.
    Self-references are ignored. Activities caught in a cycle cannot be
    ordered; they are appended in collection order.
    """
    positions = resolve_positions(activities)
    dependents: dict[int, list[int]] = defaultdict(list)
    in_degree = [0] * len(activities)

    for position, activity in enumerate(activities):
        for dep_position in set(dependency_positions(activity, positions)):
            if dep_position == position:
                continue
            dependents[dep_position].append(position)
            in_degree[position] += 1

    ready = [position for position, degree in enumerate(in_degree) if degree == 0]
    heapq.heapify(ready)
    order: list[int] = []

    while ready:
        position = heapq.heappop(ready)
        order.append(position)
        for dependent in dependents[position]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, dependent)

    if len(order) < len(activities):
        ordered = set(order)
        stuck = [position for position in range(len(activities)) if position not in ordered]
        stuck_numbers = ", ".join(str(position + 1) for position in stuck)
        logger.warning(
            f"Dependency cycle among activities {stuck_numbers}; scheduling them in list order"
        )
        order.extend(stuck)

    return order
