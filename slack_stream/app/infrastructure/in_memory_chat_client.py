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
"""In-memory chat client for local runs and tests."""

from __future__ import annotations

import copy
import itertools
from typing import Any

from slack_stream.app.application.relay_service import ChatClient
from slack_stream.app.domain.models import MessageLocator


class InMemoryChatClient(ChatClient):
    """Keeps posted messages and thread replies in process memory."""

    def __init__(self) -> None:
        self._ts = itertools.count(1)
        self.messages: dict[tuple[str, str], dict[str, Any]] = {}
        self.replies: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.update_count = 0

    async def post_message(
        self, channel: str, content: dict[str, Any], thread_ts: str | None = None
    ) -> MessageLocator:
        ts = f"1700000000.{next(self._ts):06d}"
        message = copy.deepcopy(content)
        if thread_ts is not None:
            self.replies.setdefault((channel, thread_ts), []).append(message)
        else:
            self.messages[(channel, ts)] = message
        return MessageLocator(channel=channel, ts=ts)

    async def update_message(
        self, locator: MessageLocator, content: dict[str, Any]
    ) -> None:
        key = (locator.channel, locator.ts)
        if key not in self.messages:
            raise LookupError(f"Message not found: {locator.channel}/{locator.ts}")
        self.messages[key] = copy.deepcopy(content)
        self.update_count += 1

    async def read_message(self, locator: MessageLocator) -> dict[str, Any] | None:
        message = self.messages.get((locator.channel, locator.ts))
        return copy.deepcopy(message) if message is not None else None

    def thread(self, locator: MessageLocator) -> list[dict[str, Any]]:
        return list(self.replies.get((locator.channel, locator.ts), []))
