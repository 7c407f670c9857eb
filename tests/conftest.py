import sys
from pathlib import Path
from typing import Callable, Dict, List

import pytest

root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from src.parks.convert import CuratedParkRecord  # noqa: E402
from src.places.models import Place  # noqa: E402

_SETTINGS_ENV_KEYS = (
    "PARKS_STORE_PATH",
    "SEARCH_RADIUS_M",
    "SEARCH_MAX_WORKERS",
    "MATCH_MIN_ADDRESS_SIMILARITY",
    "MATCH_TIE_THRESHOLD",
    "MATCH_MAX_DISTANCE_M",
    "REQUEST_TIMEOUT_S",
    "REQUEST_MAX_RETRIES",
    "KAKAO_MAX_PAGES",
    "LOG_LEVEL",
    "ERROR_LOG_PATH",
    "PARKFINDER_ENV_FILES",
)


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _SETTINGS_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_place() -> Callable[..., Place]:
    def _factory(**overrides: object) -> Place:
        values: Dict[str, object] = {
            "place_id": "k-1",
            "name": "서울광장",
            "latitude": 37.5665,
            "longitude": 126.9780,
            "address": "서울 중구 세종대로 110",
            "category": "park",
            "source": "external",
        }
        values.update(overrides)
        return Place(**values)  # type: ignore[arg-type]

    return _factory


@pytest.fixture
def make_record() -> Callable[..., CuratedParkRecord]:
    def _factory(**overrides: object) -> CuratedParkRecord:
        values: Dict[str, object] = {
            "id": "P-1",
            "name": "서울광장공원",
            "park_type": "근린공원",
            "road_address": "중구 세종대로 110",
            "lat": 37.5665,
            "lng": 126.9780,
            "play_facilities": "조합놀이 1기",
            "has_playground": True,
        }
        values.update(overrides)
        return CuratedParkRecord(**values)  # type: ignore[arg-type]

    return _factory


@pytest.fixture
def raw_park_rows() -> List[Dict[str, object]]:
    return [
        {
            "관리번호": "11260-00001",
            "공원명": "면목공원",
            "공원구분": "근린공원",
            "소재지도로명주소": "",
            "소재지지번주소": "서울특별시 중랑구 면목동 137-14",
            "위도": "37.5889",
            "경도": "127.0833",
            "공원면적": "12,345.6",
            "공원보유시설(운동시설)": "체력단련시설 3점",
            "공원보유시설(유희시설)": "모래밭 1기+조합놀이 1기",
            "공원보유시설(편익시설)": "화장실 1동+벤치 10개",
            "공원보유시설(교양시설)": "",
            "공원보유시설(기타시설)": None,
            "지정고시일": "1977-06-30",
            "관리기관명": "서울특별시 중랑구청",
            "전화번호": "02-2094-0114",
            "데이터기준일자": "2024-05-01",
            "제공기관코드": "3150000",
            "제공기관명": "서울특별시 중랑구",
        },
        {
            "관리번호": "11260-00002",
            "공원명": "망우어린이공원",
            "공원구분": " ",
            "소재지도로명주소": "서울특별시 중랑구 망우로 300",
            "위도": "abc",
            "경도": "127.09",
            "지정고시일": "2020/01/01",
        },
    ]
