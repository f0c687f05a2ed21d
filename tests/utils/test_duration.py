from datetime import timedelta

import pytest

from opmon.utils.duration import duration_to_seconds, humanize_duration, parse_duration


@pytest.mark.parametrize(
    "value, expected",
    [
        ("30s", timedelta(seconds=30)),
        ("15m", timedelta(minutes=15)),
        ("87600h", timedelta(hours=87600)),
        ("7D", timedelta(days=7)),
    ],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["", "10", "1w", "h", "-5h", "0h"])
def test_parse_duration_rejects_invalid(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_duration_to_seconds():
    assert duration_to_seconds("87600h") == 315360000


def test_humanize_duration():
    assert humanize_duration("87600h") == "10 years"
    assert humanize_duration("8760h") == "1 year"
    assert humanize_duration("2d") == "2 days"
    assert humanize_duration("90m") == "90m"
