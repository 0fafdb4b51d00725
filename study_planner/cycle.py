"""Expansion of a study cycle into concrete discipline and exam slots."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .models import Cycle, CycleSlot, Discipline, StudyPlan


def flatten_cycle(cycle: Cycle, disciplines: Sequence[Discipline]) -> List[CycleSlot]:
    """Replace folder slots by one slot per discipline in the folder.

    Expanded disciplines follow their ordering key and inherit the folder
    slot's ``subjects_per_visit``. Discipline and exam slots pass through
    untouched; duplicates are kept.
    """
    flattened: List[CycleSlot] = []
    for slot in cycle.slots:
        if not slot.folder_id:
            flattened.append(slot)
            continue
        members = sorted(
            (discipline for discipline in disciplines if discipline.folder_id == slot.folder_id),
            key=lambda discipline: discipline.order,
        )
        for discipline in members:
            flattened.append(
                slot.model_copy(update={"folder_id": None, "discipline_id": discipline.id})
            )
    return flattened


def active_cycle(plan: StudyPlan) -> Optional[Cycle]:
    if not plan.cycles:
        return None
    return plan.cycles[0]


__all__ = ["active_cycle", "flatten_cycle"]
