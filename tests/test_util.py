"""
Unit Tests for the shared utilities
"""
import pytest

from dxsuggest.services.util import tag_value, parse_curie, normalize_curie

_TEST_JSON_DATA = {
        "testing": {
            "one": {
                "two": {
                    "three": "The End!"
                },

                "another_one": "for_fun"
            }
        }
    }


def test_valid_tag_path():
    value = tag_value(_TEST_JSON_DATA, "testing.one.two.three")
    assert value == "The End!"


def test_empty_tag_path():
    value = tag_value(_TEST_JSON_DATA, "")
    assert not value


def test_missing_intermediate_tag_path():
    value = tag_value(_TEST_JSON_DATA, "testing.one.four.five")
    assert not value


def test_missing_end_tag_path():
    value = tag_value(_TEST_JSON_DATA, "testing.one.two.three.four")
    assert not value


@pytest.mark.parametrize(
    "code,expected",
    [
        ("HP:0002066", ("HP", "0002066")),
        ("  HP:0002066 ", ("HP", "0002066")),
        ("OMIM:101600", ("OMIM", "101600")),
        ("MONDO:0008807", ("MONDO", "0008807")),
        ("HP0002066", None),
        (":0002066", None),
        ("HP:", None),
        ("HP: 0002066", None),
        ("", None),
        (None, None),
        (2066, None)
    ]
)
def test_parse_curie(code, expected):
    assert parse_curie(code) == expected


def test_normalize_curie():
    assert normalize_curie(" HP:0002066\n") == "HP:0002066"
    assert normalize_curie("not a code") is None
