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
"""Bounded in-memory LRU cache with schema-validated values."""

from __future__ import annotations

import logging
from typing import Generic, Iterator, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_NIL = -1


class InMemoryLRUCache(Generic[ModelT]):
    """Least-recently-used cache keyed by string.

    Entries live in slot arrays linked by index (``_prev``/``_next``), with
    ``_head`` as the most recently used slot and ``_tail`` as the least.
    Freed slots are recycled through ``_free``. Not thread-safe; callers are
    expected to touch it from one task at a time.
    """

    def __init__(self, schema: type[ModelT], max_entries: int = 1000) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.schema = schema
        self.max_entries = max_entries
        self._index: dict[str, int] = {}
        self._keys: list[str | None] = []
        self._values: list[ModelT | None] = []
        self._prev: list[int] = []
        self._next: list[int] = []
        self._free: list[int] = []
        self._head = _NIL
        self._tail = _NIL

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def get(self, key: str) -> ModelT | None:
        """Return the cached value and mark it most recently used."""
        slot = self._index.get(key)
        if slot is None:
            return None
        self._touch(slot)
        return self._values[slot]

    def set(self, key: str, value: ModelT | dict) -> ModelT:
        """Validate and store a value, evicting the LRU entry when full."""
        parsed = self.schema.model_validate(value)
        slot = self._index.get(key)
        if slot is not None:
            self._values[slot] = parsed
            self._touch(slot)
            return parsed
        if len(self._index) >= self.max_entries:
            self._evict()
        slot = self._allocate(key, parsed)
        self._index[key] = slot
        self._push_front(slot)
        return parsed

    def entries(self) -> Iterator[tuple[str, ModelT]]:
        """Iterate (key, value) pairs from most to least recently used."""
        slot = self._head
        while slot != _NIL:
            key = self._keys[slot]
            value = self._values[slot]
            if key is not None and value is not None:
                yield key, value
            slot = self._next[slot]

    def keys(self) -> Iterator[str]:
        for key, _ in self.entries():
            yield key

    def values(self) -> Iterator[ModelT]:
        for _, value in self.entries():
            yield value

    def _allocate(self, key: str, value: ModelT) -> int:
        if self._free:
            slot = self._free.pop()
            self._keys[slot] = key
            self._values[slot] = value
            return slot
        self._keys.append(key)
        self._values.append(value)
        self._prev.append(_NIL)
        self._next.append(_NIL)
        return len(self._keys) - 1

    def _unlink(self, slot: int) -> None:
        prev_slot = self._prev[slot]
        next_slot = self._next[slot]
        if prev_slot != _NIL:
            self._next[prev_slot] = next_slot
        else:
            self._head = next_slot
        if next_slot != _NIL:
            self._prev[next_slot] = prev_slot
        else:
            self._tail = prev_slot
        self._prev[slot] = _NIL
        self._next[slot] = _NIL

    def _push_front(self, slot: int) -> None:
        self._prev[slot] = _NIL
        self._next[slot] = self._head
        if self._head != _NIL:
            self._prev[self._head] = slot
        self._head = slot
        if self._tail == _NIL:
            self._tail = slot

    def _touch(self, slot: int) -> None:
        if slot == self._head:
            return
        self._unlink(slot)
        self._push_front(slot)

    def _evict(self) -> None:
        slot = self._tail
        if slot == _NIL:
            return
        self._unlink(slot)
        key = self._keys[slot]
        if key is not None:
            del self._index[key]
        self._keys[slot] = None
        self._values[slot] = None
        self._free.append(slot)
        logger.debug("Evicted cache entry %s (capacity %s)", key, self.max_entries)
