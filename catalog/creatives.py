"""Pick the generated creatives that become a template's ad copy."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from shared.models import CreativeType

from .records import CompletedTask, GeneratedCreative


MAX_PER_TYPE = 3


@dataclass
class SelectedCreatives:
    headlines: List[str] = field(default_factory=list)
    primary_texts: List[str] = field(default_factory=list)
    descriptions: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, List[str]]:
        return {
            "headlines": list(self.headlines),
            "primaryTexts": list(self.primary_texts),
            "descriptions": list(self.descriptions),
        }


def _pick(creatives: Sequence[GeneratedCreative], creative_type: CreativeType) -> List[str]:
    of_type = [creative for creative in creatives if creative.type == creative_type]
    selected = [creative for creative in of_type if creative.is_selected]
    # Nothing marked selected: keep every variant of this type instead.
    chosen = selected or of_type
    return [creative.content for creative in chosen[:MAX_PER_TYPE]]


def select_creatives(task: CompletedTask) -> SelectedCreatives:
    """Return up to three creatives per type, preferring user-selected ones.

    Each type is handled independently and keeps the order the task returned
    them in.  A list is empty only when the task generated nothing of that
    type.
    """

    return SelectedCreatives(
        headlines=_pick(task.creatives, CreativeType.HEADLINE),
        primary_texts=_pick(task.creatives, CreativeType.PRIMARY_TEXT),
        descriptions=_pick(task.creatives, CreativeType.DESCRIPTION),
    )


__all__ = ["MAX_PER_TYPE", "SelectedCreatives", "select_creatives"]
