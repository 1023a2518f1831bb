# photo_tagger/core/grouping/clusters.py
"""
Time clustering of photos per machine identity.

Photos sharing (machine_type, machine_id) are chained in time order; a chain
breaks where consecutive photos are not `within_gap` (the continuity policy).
Each chain is one numeric group.

Stability across incremental runs
---------------------------------
- Items carrying a `fixed_group` (from an earlier run) keep it.
- A new item in a chain that holds fixed items takes the group of the nearest
  fixed item before it (or after it, when none precedes).
- Chains of only new items get max(existing) + 1, + 2, ... in ascending order
  of their first timestamp.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass

from photo_tagger.core.classify.continuity import within_gap
from photo_tagger.schemas.models import Group


@dataclass(frozen=True)
class ClusterItem:
    file: str
    timestamp: int
    machine_type: str
    machine_id: str
    fixed_group: int | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.machine_type, self.machine_id)


def _chains(members: list[ClusterItem], gap_minutes: float) -> list[list[ClusterItem]]:
    chains: list[list[ClusterItem]] = []
    for item in members:
        if chains and within_gap(chains[-1][-1].timestamp, item.timestamp, gap_minutes):
            chains[-1].append(item)
        else:
            chains.append([item])
    return chains


def _nearest_fixed(chain: list[ClusterItem], pos: int) -> int | None:
    for j in range(pos - 1, -1, -1):
        if chain[j].fixed_group:
            return chain[j].fixed_group
    for j in range(pos + 1, len(chain)):
        if chain[j].fixed_group:
            return chain[j].fixed_group
    return None


def assign_groups(items: Sequence[ClusterItem], gap_minutes: float) -> tuple[dict[str, int], list[Group]]:
    """
    Return ({file: group_index}, groups).

    `items` order is the tie-breaker for equal timestamps. Groups are listed by
    identity in first-seen order, then by group index.
    """
    by_key: dict[tuple[str, str], list[ClusterItem]] = defaultdict(list)
    for it in items:
        by_key[it.key].append(it)

    assigned: dict[str, int] = {}
    groups: list[Group] = []

    for key, members in by_key.items():
        members = sorted(members, key=lambda it: it.timestamp)  # stable: ties keep input order
        next_index = max((it.fixed_group or 0 for it in members), default=0) + 1

        for chain in _chains(members, gap_minutes):
            if any(it.fixed_group for it in chain):
                for pos, it in enumerate(chain):
                    assigned[it.file] = it.fixed_group or _nearest_fixed(chain, pos) or 0
            else:
                for it in chain:
                    assigned[it.file] = next_index
                next_index += 1

        per_group: dict[int, list[ClusterItem]] = defaultdict(list)
        for it in members:
            per_group[assigned[it.file]].append(it)
        for index in sorted(per_group):
            grp = per_group[index]
            groups.append(
                Group(
                    machine_type=key[0],
                    machine_id=key[1],
                    group_index=index,
                    member_files=[it.file for it in grp],
                    time_range=(grp[0].timestamp, grp[-1].timestamp),
                )
            )

    return assigned, groups
