# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
import yaml

from wipeout_lib.core.common import (
    format_duration,
    get_panel_width,
    load_yaml_dumper,
    load_yaml_loader,
    to_utc,
    utc_now,
    wipeout_timestamp,
    yes_or_no_prompt,
)


@pytest.mark.parametrize(
    "td,expected",
    [
        (timedelta(0), "0s"),
        (timedelta(seconds=59), "59s"),
        (timedelta(minutes=5), "5m"),
        (timedelta(hours=1, seconds=3), "1h 3s"),
        (timedelta(days=1, hours=2, minutes=3, seconds=4), "1d 2h 3m 4s"),
        (timedelta(weeks=2, days=1), "2w 1d"),
        (timedelta(seconds=-30), "0s"),
    ],
)
def test_format_duration(td, expected):
    assert format_duration(td) == expected


def test_wipeout_timestamp_is_in_milliseconds():
    with patch(
        "wipeout_lib.core.common.time.time_ns", return_value=1_760_875_200_123_456_789
    ):
        assert wipeout_timestamp() == 1_760_875_200_123


def test_wipeout_timestamp_does_not_decrease():
    first = wipeout_timestamp()
    second = wipeout_timestamp()

    assert second >= first


def test_utc_now_is_aware():
    now = utc_now()

    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_to_utc_treats_naive_as_utc():
    naive = datetime(2026, 10, 19, 12, 0, 0)

    assert to_utc(naive) == datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


def test_to_utc_converts_other_zones():
    prague = datetime(2026, 10, 19, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))

    converted = to_utc(prague)

    assert converted.tzinfo == UTC
    assert converted.hour == 12
    assert converted == prague


def test_yaml_loader_and_dumper():
    data = {"items": [{"id": "abc", "attempts": 1}]}

    dumped = yaml.dump(data, Dumper=load_yaml_dumper())

    assert yaml.load(dumped, Loader=load_yaml_loader()) == data


@pytest.mark.parametrize(
    "term_width,factor,min_width,max_width,expected",
    [
        (120, 1, None, None, 120),
        (120, 2, None, None, 60),
        (120, 2, 80, None, 80),
        (120, 1, 80, 100, 100),
    ],
)
def test_get_panel_width(term_width, factor, min_width, max_width, expected):
    console = MagicMock()
    console.size.width = term_width

    assert get_panel_width(console, factor, min_width, max_width) == expected


@pytest.mark.parametrize(
    "key,expected", [("y", True), ("Y", True), ("n", False), ("x", False)]
)
def test_yes_or_no_prompt(key, expected):
    with (
        patch("wipeout_lib.core.common.readchar.readkey", return_value=key),
        patch("wipeout_lib.core.common.Live") as mock_live,
    ):
        assert yes_or_no_prompt("Continue?") is expected

    mock_live.return_value.__enter__.return_value.update.assert_called_once()
