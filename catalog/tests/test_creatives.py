from __future__ import annotations

import sys
from pathlib import Path
from uuid import uuid4

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from catalog.creatives import MAX_PER_TYPE, select_creatives
from catalog.records import CompletedTask, GeneratedCreative
from shared.models import CreativeType


def _task(*creatives: GeneratedCreative) -> CompletedTask:
    return CompletedTask(id=uuid4(), owner_id=uuid4(), creatives=list(creatives))


def test_selected_creatives_take_precedence() -> None:
    task = _task(
        GeneratedCreative(CreativeType.HEADLINE, "A", is_selected=True),
        GeneratedCreative(CreativeType.HEADLINE, "B"),
        GeneratedCreative(CreativeType.HEADLINE, "C"),
    )
    assert select_creatives(task).headlines == ["A"]


def test_all_variants_used_when_nothing_selected() -> None:
    task = _task(
        GeneratedCreative(CreativeType.PRIMARY_TEXT, "one"),
        GeneratedCreative(CreativeType.PRIMARY_TEXT, "two"),
    )
    assert select_creatives(task).primary_texts == ["one", "two"]


def test_each_type_is_capped_and_keeps_order() -> None:
    task = _task(*[GeneratedCreative(CreativeType.DESCRIPTION, f"d{i}") for i in range(5)])
    selected = select_creatives(task)
    assert selected.descriptions == ["d0", "d1", "d2"]
    assert len(selected.descriptions) == MAX_PER_TYPE


def test_types_are_selected_independently() -> None:
    task = _task(
        GeneratedCreative(CreativeType.HEADLINE, "H1", is_selected=True),
        GeneratedCreative(CreativeType.HEADLINE, "H2"),
        GeneratedCreative(CreativeType.PRIMARY_TEXT, "P1"),
        GeneratedCreative(CreativeType.PRIMARY_TEXT, "P2"),
    )
    selected = select_creatives(task)
    assert selected.headlines == ["H1"]
    assert selected.primary_texts == ["P1", "P2"]
    assert selected.descriptions == []


def test_empty_task_yields_empty_lists() -> None:
    assert select_creatives(_task()).as_dict() == {
        "headlines": [],
        "primaryTexts": [],
        "descriptions": [],
    }
