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
"""Slack Web API adapter for the status message."""

from __future__ import annotations

from typing import Any

import httpx

from slack_stream.app.application.relay_service import ChatClient
from slack_stream.app.domain.models import MessageLocator

SLACK_API_URL = "https://slack.com/api"
REQUEST_TIMEOUT_SECONDS = 10.0


class SlackApiError(RuntimeError):
    """Slack answered with ``ok: false``."""

    def __init__(self, method: str, error: str):
        super().__init__(f"Slack {method} failed: {error}")
        self.method = method
        self.error = error


class SlackChatClient(ChatClient):
    """Posts, updates and reads messages with a bot token."""

    def __init__(
        self,
        token: str,
        base_url: str = SLACK_API_URL,
        client: httpx.AsyncClient | None = None,
    ):
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=REQUEST_TIMEOUT_SECONDS,
            headers={"Authorization": f"Bearer {token}"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(
        self,
        method: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if json is not None:
            response = await self._client.post(f"/{method}", json=json)
        else:
            response = await self._client.get(f"/{method}", params=params)
        response.raise_for_status()
        data = response.json()
        if not data.get("ok"):
            raise SlackApiError(method, str(data.get("error", "unknown_error")))
        return data

    async def post_message(
        self, channel: str, content: dict[str, Any], thread_ts: str | None = None
    ) -> MessageLocator:
        payload: dict[str, Any] = {
            "channel": channel,
            "unfurl_links": False,
            "unfurl_media": False,
            **content,
        }
        if thread_ts is not None:
            payload["thread_ts"] = thread_ts
        data = await self._call("chat.postMessage", json=payload)
        return MessageLocator(channel=data.get("channel") or "", ts=data.get("ts") or "")

    async def update_message(
        self, locator: MessageLocator, content: dict[str, Any]
    ) -> None:
        await self._call(
            "chat.update",
            json={
                "channel": locator.channel,
                "ts": locator.ts,
                "unfurl_links": False,
                "unfurl_media": False,
                **content,
            },
        )

    async def read_message(self, locator: MessageLocator) -> dict[str, Any] | None:
        data = await self._call(
            "conversations.history",
            params={
                "channel": locator.channel,
                "latest": locator.ts,
                "limit": 1,
                "inclusive": "true",
            },
        )
        messages = data.get("messages") or []
        return messages[0] if messages else None
