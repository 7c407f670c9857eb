import math

import pytest

from src.places.normalize import (
    distance_meters,
    format_distance,
    haversine_m,
    is_valid_coordinate,
    normalize_name,
)


def test_haversine_reference_value():
    d = haversine_m(48.2065, 16.384, 48.207, 16.3845)
    assert d == pytest.approx(66.8129884753474, rel=1e-9)


def test_haversine_same_point_is_zero():
    assert haversine_m(37.5665, 126.9780, 37.5665, 126.9780) == 0.0


def test_haversine_is_symmetric():
    forward = haversine_m(37.5665, 126.9780, 35.1796, 129.0756)
    backward = haversine_m(35.1796, 129.0756, 37.5665, 126.9780)
    assert forward == pytest.approx(backward)
    # Seoul City Hall to Busan City Hall
    assert 320_000 < forward < 330_000


def test_haversine_propagates_nan():
    assert math.isnan(haversine_m(float("nan"), 126.9780, 37.5665, 126.9780))


def test_distance_meters_is_haversine():
    assert distance_meters is haversine_m


@pytest.mark.parametrize(
    "meters, expected",
    [(0, "0m"), (420.4, "420m"), (999.4, "999m"), (1000, "1.0km"), (1340, "1.3km"), (12_500, "12.5km")],
)
def test_format_distance(meters, expected):
    assert format_distance(meters) == expected


@pytest.mark.parametrize(
    "lat, lng, expected",
    [
        (37.5665, 126.9780, True),
        (-90, 180, True),
        (90.0001, 0, False),
        (0, -180.5, False),
        (float("nan"), 0, False),
        (0, float("inf"), False),
        (None, 126.9, False),
        ("37.5", "126.9", False),
        (True, 126.9, False),
    ],
)
def test_is_valid_coordinate(lat, lng, expected):
    assert is_valid_coordinate(lat, lng) is expected


def test_normalize_name_collapses_whitespace_and_case():
    assert normalize_name("  Seoul   Forest ") == "seoul forest"
    assert normalize_name("Café Müller") == "cafe muller"


def test_normalize_name_keeps_hangul_intact():
    assert normalize_name(" 서울  숲 ") == "서울 숲"


@pytest.mark.parametrize(
    "a, b, c",
    [
        ((37.5665, 126.9780), (37.5700, 126.9820), (37.5750, 126.9760)),
        ((37.5889, 127.0833), (37.5889, 127.0900), (37.5950, 127.0900)),
        ((35.1796, 129.0756), (35.1800, 129.0756), (35.1805, 129.0756)),
    ],
)
def test_haversine_triangle_inequality(a, b, c):
    ab = haversine_m(*a, *b)
    bc = haversine_m(*b, *c)
    ac = haversine_m(*a, *c)
    assert ac <= ab + bc + 1e-6
