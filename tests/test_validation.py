from __future__ import annotations

import pytest

from utils.time import from_ms, remaining_seconds
from utils.validation import is_valid_client_id, sanitize_json


@pytest.mark.parametrize("value", ["alice", "user-42", "a1b2c3d4.e5", "José", "客户", "dev@kiosk:1"])
def test_valid_client_ids(value):
    assert is_valid_client_id(value)


@pytest.mark.parametrize("value", [None, 42, "", "  ", "two words", "semi;colon", "x" * 129])
def test_invalid_client_ids(value):
    assert not is_valid_client_id(value)


def test_sanitize_json_drops_dangerous_keys():
    raw = {"ok": [1, {"$gt": 1, "a..b": 2, "fine": None}], "constructor": {"x": 1}}
    assert sanitize_json(raw) == {"ok": [1, {"fine": None}]}


def test_sanitize_json_rejects_deep_nesting_and_odd_types():
    deep = current = {}
    for _ in range(15):
        current["n"] = {}
        current = current["n"]
    with pytest.raises(ValueError):
        sanitize_json(deep)
    with pytest.raises(ValueError):
        sanitize_json({"when": object()})


def test_remaining_seconds_never_negative():
    assert remaining_seconds(10_000, 0) == 10
    assert remaining_seconds(10_000, 9_999) == 0
    assert remaining_seconds(10_000, 20_000) == 0


def test_from_ms_is_utc():
    dt = from_ms(0)
    assert dt.year == 1970 and dt.utcoffset().total_seconds() == 0
