"""Conversion of raw urban park registry rows into curated records."""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, fields
from datetime import date
from typing import Any, Dict, Mapping, Optional

from ..places.models import FacilityBundle
from ..places.normalize import is_valid_coordinate
from .facilities import FACILITY_FIELDS, FacilityFlags, build_facility_flags

__all__ = [
    "CuratedParkRecord",
    "UNCLASSIFIED_PARK_TYPE",
    "convert_record",
    "normalize_park_type",
    "normalize_string",
    "parse_date_or_none",
    "parse_float_or_none",
    "parse_int_or_none",
]

UNCLASSIFIED_PARK_TYPE = "unclassified"

RAW_FIELD_ID = "관리번호"
RAW_FIELD_NAME = "공원명"
RAW_FIELD_PARK_TYPE = "공원구분"
RAW_FIELD_ROAD_ADDRESS = "소재지도로명주소"
RAW_FIELD_LOT_ADDRESS = "소재지지번주소"
RAW_FIELD_LAT = "위도"
RAW_FIELD_LNG = "경도"
RAW_FIELD_AREA = "공원면적"
RAW_FIELD_ESTABLISHED_AT = "지정고시일"
RAW_FIELD_ORG_NAME = "관리기관명"
RAW_FIELD_PHONE = "전화번호"
RAW_FIELD_DATA_DATE = "데이터기준일자"
RAW_FIELD_PROVIDER_CODE = "제공기관코드"
RAW_FIELD_PROVIDER_NAME = "제공기관명"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class CuratedParkRecord:
    """A park from the public registry, normalised for matching and lookup."""

    id: str
    name: str
    park_type: str = UNCLASSIFIED_PARK_TYPE
    road_address: Optional[str] = None
    lot_address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    area: Optional[float] = None
    sports_facilities: Optional[str] = None
    play_facilities: Optional[str] = None
    convenience_facilities: Optional[str] = None
    culture_facilities: Optional[str] = None
    other_facilities: Optional[str] = None
    has_playground: bool = False
    has_gym: bool = False
    has_toilet: bool = False
    has_parking: bool = False
    has_bench: bool = False
    has_stage_or_culture: bool = False
    established_at: Optional[str] = None
    org_name: Optional[str] = None
    phone: Optional[str] = None
    data_date: Optional[str] = None
    provider_code: Optional[str] = None
    provider_name: Optional[str] = None

    @property
    def address(self) -> Optional[str]:
        """The road address, falling back to the lot-number address."""
        return self.road_address or self.lot_address

    @property
    def has_coordinates(self) -> bool:
        return is_valid_coordinate(self.lat, self.lng)

    @property
    def facilities(self) -> FacilityBundle:
        return FacilityBundle(
            sports=self.sports_facilities,
            play=self.play_facilities,
            convenience=self.convenience_facilities,
            culture=self.culture_facilities,
            other=self.other_facilities,
        )

    @property
    def flags(self) -> FacilityFlags:
        return FacilityFlags(
            has_playground=self.has_playground,
            has_gym=self.has_gym,
            has_toilet=self.has_toilet,
            has_parking=self.has_parking,
            has_bench=self.has_bench,
            has_stage_or_culture=self.has_stage_or_culture,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CuratedParkRecord":
        """Rebuild a record from :meth:`to_dict` output, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        if not isinstance(values.get("id"), str) or not isinstance(values.get("name"), str):
            raise ValueError("park records need string 'id' and 'name' fields")
        return cls(**values)


def normalize_string(value: object) -> Optional[str]:
    """Trim ``value``; empty strings and non-strings become ``None``."""

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def parse_float_or_none(value: object) -> Optional[float]:
    """Parse a finite float, tolerating surrounding whitespace."""

    text = normalize_string(value)
    if text is None:
        return None
    try:
        parsed = float(text.replace(",", ""))
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def parse_int_or_none(value: object) -> Optional[int]:
    text = normalize_string(value)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def parse_date_or_none(value: object) -> Optional[str]:
    """Return ``value`` if it is a real calendar date in ``YYYY-MM-DD`` form."""

    text = normalize_string(value)
    if text is None or not _DATE_RE.match(text):
        return None
    try:
        date.fromisoformat(text)
    except ValueError:
        return None
    return text


def normalize_park_type(value: object) -> str:
    """Keep the registry's free-text park type; blanks become the sentinel."""

    return normalize_string(value) or UNCLASSIFIED_PARK_TYPE


def convert_record(raw: Mapping[str, Any]) -> CuratedParkRecord:
    """Convert one raw registry row into a :class:`CuratedParkRecord`.

    Never raises for malformed field values: each field degrades to
    ``None`` (or its default) on its own. Coordinates outside the valid
    WGS84 range are dropped as a pair so that a record is either spatially
    usable or excluded from spatial queries.
    """

    sports, play, convenience, culture, other = (
        normalize_string(raw.get(name)) for name in FACILITY_FIELDS
    )
    flags = build_facility_flags([sports, play, convenience, culture, other])

    lat = parse_float_or_none(raw.get(RAW_FIELD_LAT))
    lng = parse_float_or_none(raw.get(RAW_FIELD_LNG))
    if not is_valid_coordinate(lat, lng):
        lat = lng = None

    return CuratedParkRecord(
        id=normalize_string(raw.get(RAW_FIELD_ID)) or "",
        name=normalize_string(raw.get(RAW_FIELD_NAME)) or "",
        park_type=normalize_park_type(raw.get(RAW_FIELD_PARK_TYPE)),
        road_address=normalize_string(raw.get(RAW_FIELD_ROAD_ADDRESS)),
        lot_address=normalize_string(raw.get(RAW_FIELD_LOT_ADDRESS)),
        lat=lat,
        lng=lng,
        area=parse_float_or_none(raw.get(RAW_FIELD_AREA)),
        sports_facilities=sports,
        play_facilities=play,
        convenience_facilities=convenience,
        culture_facilities=culture,
        other_facilities=other,
        has_playground=flags.has_playground,
        has_gym=flags.has_gym,
        has_toilet=flags.has_toilet,
        has_parking=flags.has_parking,
        has_bench=flags.has_bench,
        has_stage_or_culture=flags.has_stage_or_culture,
        established_at=parse_date_or_none(raw.get(RAW_FIELD_ESTABLISHED_AT)),
        org_name=normalize_string(raw.get(RAW_FIELD_ORG_NAME)),
        phone=normalize_string(raw.get(RAW_FIELD_PHONE)),
        data_date=parse_date_or_none(raw.get(RAW_FIELD_DATA_DATE)),
        provider_code=normalize_string(raw.get(RAW_FIELD_PROVIDER_CODE)),
        provider_name=normalize_string(raw.get(RAW_FIELD_PROVIDER_NAME)),
    )
