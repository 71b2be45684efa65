import pytest

from apps.common.pagination import parse_limit_offset


@pytest.mark.parametrize(
    "params,expected",
    [
        ({}, (24, 0)),
        ({"limit": "10", "offset": "20"}, (10, 20)),
        ({"limit": "1000"}, (100, 0)),
        ({"limit": "0", "offset": "-5"}, (1, 0)),
        ({"limit": "abc", "offset": "x"}, (24, 0)),
    ],
)
def test_parse_limit_offset(params, expected):
    assert parse_limit_offset(params) == expected
