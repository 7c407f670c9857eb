import pytest

from src.places.diagnostics import (
    assess_pair,
    levenshtein_distance,
    name_similarity,
    permission_hint,
)


@pytest.mark.parametrize(
    "a, b, expected",
    [("", "", 0), ("kitten", "sitting", 3), ("공원", "공원", 0), ("면목공원", "면목근린공원", 2)],
)
def test_levenshtein_distance(a, b, expected):
    assert levenshtein_distance(a, b) == expected
    assert levenshtein_distance(b, a) == expected


def test_name_similarity():
    assert name_similarity("면목 공원", "면목공원") == 1.0
    assert name_similarity("면목공원", "서울 면목공원") == 0.9
    assert name_similarity("abcd", "abxy") == pytest.approx(0.5)


def test_assess_pair_close_and_same_address_is_match(make_place, make_record):
    place = make_place(name="서울광장", address="중구 세종대로 110")
    record = make_record(name="서울광장")

    assessment = assess_pair(place, record)

    assert assessment.is_match
    # 50 (distance) + 40 (address) + 10 (name)
    assert assessment.confidence == 100
    assert assessment.distance_m == pytest.approx(0.0)


def test_assess_pair_far_and_unrelated_is_not_match(make_place, make_record):
    place = make_place(name="망우공원", address="중랑구 망우동 1")
    record = make_record(name="여의도공원", road_address="영등포구 여의공원로 68", lat=37.5256, lng=126.9224)

    assessment = assess_pair(place, record)

    assert not assessment.is_match
    assert assessment.confidence < 70


def test_assess_pair_without_coordinates(make_place, make_record):
    assessment = assess_pair(make_place(), make_record(lat=None, lng=None))

    assert assessment.distance_m is None
    assert "curated record has no coordinates" in assessment.reasons


@pytest.mark.parametrize(
    "details, fragment",
    [
        ("NotAuthorizedError: App disabled OPEN_MAP_AND_LOCAL service.", "Enable the Kakao Map"),
        ("wrong appKey format", "was rejected"),
        ("ip mismatched! callerIp=1.2.3.4 not allowed", "allowed IP addresses"),
    ],
)
def test_permission_hint(details, fragment):
    hint = permission_hint(details)
    assert hint is not None
    assert fragment in hint


def test_permission_hint_unknown_message():
    assert permission_hint("something else entirely") is None


def test_name_similarity_ignores_accents_and_case():
    assert name_similarity("Café  Park", "cafe park") == 1.0
