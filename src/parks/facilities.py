"""Facility extraction from the free-text columns of the park registry.

The registry describes park facilities in five loosely formatted text
columns ("체력단련시설 3점", "모래밭 1기+조합놀이 1기", "시소 외3종", ...).
Two views are derived from them: six boolean flags used for filtering and
tagging, and a per-facility count mapping.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Pattern, Union

__all__ = [
    "FACILITY_FIELDS",
    "FacilityFlags",
    "build_facility_flags",
    "facility_tags",
    "parse_facility_counts",
]

# Column names of the five facility texts in the raw dataset, in canonical order.
FACILITY_FIELDS = (
    "공원보유시설(운동시설)",
    "공원보유시설(유희시설)",
    "공원보유시설(편익시설)",
    "공원보유시설(교양시설)",
    "공원보유시설(기타시설)",
)


@dataclass(frozen=True)
class FacilityFlags:
    has_playground: bool = False
    has_gym: bool = False
    has_toilet: bool = False
    has_parking: bool = False
    has_bench: bool = False
    has_stage_or_culture: bool = False

    def as_dict(self) -> Dict[str, bool]:
        return asdict(self)


_FLAG_PATTERNS: Dict[str, Pattern[str]] = {
    "has_playground": re.compile(r"놀이대|놀이터|그네|미끄럼틀|모래밭|조합놀이|놀이시설|유희시설|시소", re.IGNORECASE),
    "has_gym": re.compile(r"운동시설|운동기구|체력단련|헬스|철봉|평행봉|운동장|야외체육|싸이클링", re.IGNORECASE),
    "has_toilet": re.compile(r"화장실|변소|공중화장실", re.IGNORECASE),
    "has_parking": re.compile(r"주차장|주차", re.IGNORECASE),
    "has_bench": re.compile(r"벤치|의자|휴게", re.IGNORECASE),
    "has_stage_or_culture": re.compile(r"야외무대|공연장|무대|전망대|문화시설|교양시설", re.IGNORECASE),
}

_FLAG_TAGS = (
    ("has_playground", "놀이시설"),
    ("has_gym", "운동시설"),
    ("has_toilet", "화장실"),
    ("has_parking", "주차장"),
    ("has_bench", "벤치"),
    ("has_stage_or_culture", "문화시설"),
)

FacilityTexts = Union[Mapping[str, object], Iterable[Optional[str]]]


def _facility_texts(fields: FacilityTexts) -> List[str]:
    if isinstance(fields, Mapping):
        values: Iterable[object] = (fields.get(name) for name in FACILITY_FIELDS)
    else:
        values = fields
    return [value.strip() for value in values if isinstance(value, str) and value.strip()]


def build_facility_flags(fields: FacilityTexts) -> FacilityFlags:
    """Derive :class:`FacilityFlags` from the raw facility texts.

    ``fields`` is either a raw registry row (the five facility columns are
    picked by name) or an iterable of the texts themselves. Empty and
    missing texts are ignored; flags are independent of each other.
    """

    blob = " ".join(_facility_texts(fields))
    return FacilityFlags(
        **{name: bool(pattern.search(blob)) for name, pattern in _FLAG_PATTERNS.items()}
    )


def facility_tags(flags: FacilityFlags) -> List[str]:
    return [label for name, label in _FLAG_TAGS if getattr(flags, name)]


_KINDS_RE = re.compile(r"^(.+?)\s*외\s*(\d+)\s*종$")
_COUNT_RE = re.compile(r"^(.+?)\s*(\d+)\s*(?:점|기|개|종|대|주|시설)?$")


def _add(counts: Dict[str, int], name: str, count: int) -> None:
    counts[name] = counts.get(name, 0) + count


def parse_facility_counts(text: Optional[str]) -> Dict[str, int]:
    """Parse a facility text into ``{facility name: count}``.

    >>> parse_facility_counts("모래밭 1기+조합놀이 1기")
    {'모래밭': 1, '조합놀이': 1}
    >>> parse_facility_counts("시소 외3종")
    {'시소': 3}
    """

    if not isinstance(text, str) or not text.strip():
        return {}

    counts: Dict[str, int] = {}
    for token in (part.strip() for part in text.split("+")):
        if not token:
            continue

        match = _KINDS_RE.match(token)
        if match is None:
            match = _COUNT_RE.match(token)
        if match is not None:
            name = match.group(1).strip()
            count = int(match.group(2))
            if name and count > 0:
                _add(counts, name, count)
            continue

        # No count in the token: it names a single facility.
        _add(counts, token, 1)

    return counts
