# Copyright 2026 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.
"""Unit tests for the locator LRU cache."""

from collections import OrderedDict

import pytest
from pydantic import ValidationError

from slack_stream.app.domain.models import MessageLocator
from slack_stream.app.infrastructure.in_memory_lru_cache import InMemoryLRUCache


def build_cache(max_entries: int = 3) -> InMemoryLRUCache[MessageLocator]:
    return InMemoryLRUCache(MessageLocator, max_entries=max_entries)


def locator(ts: str) -> dict[str, str]:
    return {"channel": "C123", "ts": ts}


def test_get_returns_none_for_unknown_key():
    cache = build_cache()

    assert cache.get("1:1") is None
    assert len(cache) == 0


def test_set_validates_and_returns_locator():
    cache = build_cache()
    stored = cache.set("1:1", locator("100.1"))

    assert stored == MessageLocator(channel="C123", ts="100.1")
    assert cache.get("1:1") == stored


@pytest.mark.parametrize(
    "value",
    [
        {"channel": "C123"},
        {"channel": "", "ts": "1.0"},
        {"channel": "C123", "ts": 12},
        "C123/1.0",
    ],
)
def test_set_rejects_malformed_locator_without_mutation(value):
    cache = build_cache()
    cache.set("1:1", locator("100.1"))

    with pytest.raises(ValidationError):
        cache.set("2:1", value)
    with pytest.raises(ValidationError):
        cache.set("1:1", value)

    assert len(cache) == 1
    assert "2:1" not in cache
    assert cache.get("1:1") == MessageLocator(channel="C123", ts="100.1")


def test_overflow_evicts_least_recently_set():
    cache = build_cache(max_entries=2)
    cache.set("a", locator("1"))
    cache.set("b", locator("2"))
    cache.set("c", locator("3"))

    assert len(cache) == 2
    assert cache.get("a") is None
    assert list(cache.keys()) == ["c", "b"]


def test_get_touch_protects_entry_from_next_eviction():
    cache = build_cache(max_entries=3)
    for key in ("a", "b", "c"):
        cache.set(key, locator(key))

    assert cache.get("a") is not None
    cache.set("d", locator("d"))

    assert "a" in cache
    assert "b" not in cache


def test_touched_entry_survives_until_capacity_more_inserts():
    cache = build_cache(max_entries=3)
    for key in ("k", "x", "y"):
        cache.set(key, locator(key))
    cache.get("k")

    cache.set("n1", locator("1"))
    cache.set("n2", locator("2"))
    assert "k" in cache

    cache.set("n3", locator("3"))
    assert "k" not in cache


def test_set_existing_key_replaces_value_and_touches():
    cache = build_cache(max_entries=2)
    cache.set("a", locator("1"))
    cache.set("b", locator("2"))
    cache.set("a", locator("9"))
    cache.set("c", locator("3"))

    assert len(cache) == 2
    assert cache.get("a") == MessageLocator(channel="C123", ts="9")
    assert "b" not in cache


def test_entries_are_mru_first_and_restartable():
    cache = build_cache(max_entries=5)
    for key in ("a", "b", "c"):
        cache.set(key, locator(key))
    cache.get("a")

    first = list(cache.entries())
    second = list(cache.entries())

    assert [key for key, _ in first] == ["a", "c", "b"]
    assert first == second
    assert [value.ts for value in cache.values()] == ["a", "c", "b"]


def test_contains_does_not_touch_recency():
    cache = build_cache(max_entries=2)
    cache.set("a", locator("1"))
    cache.set("b", locator("2"))

    assert "a" in cache
    cache.set("c", locator("3"))

    assert "a" not in cache


def test_single_slot_cache_keeps_only_latest():
    cache = build_cache(max_entries=1)
    cache.set("a", locator("1"))
    cache.set("b", locator("2"))

    assert list(cache.keys()) == ["b"]
    assert cache.get("a") is None


def test_matches_reference_lru_under_mixed_operations():
    cache = build_cache(max_entries=4)
    reference: OrderedDict[str, str] = OrderedDict()
    for i in range(60):
        key = f"{(i * 5) % 9}:1"
        if i % 3 == 0:
            value = cache.get(key)
            if key in reference:
                reference.move_to_end(key)
                assert value is not None and value.ts == reference[key]
            else:
                assert value is None
        else:
            cache.set(key, locator(str(i)))
            reference[key] = str(i)
            reference.move_to_end(key)
            if len(reference) > 4:
                reference.popitem(last=False)
        assert len(cache) <= 4
        assert list(cache.keys()) == list(reversed(reference))


def test_rejects_non_positive_capacity():
    with pytest.raises(ValueError, match="max_entries"):
        InMemoryLRUCache(MessageLocator, max_entries=0)
