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
"""Serialized asyncio queue for relay event handlers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from slack_stream.app.domain.models import EventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[None]]


class WebhookQueue:
    """Runs one handler at a time, in enqueue order."""

    def __init__(self) -> None:
        self._handlers: dict[EventType, EventHandler] = {}
        self._queue: asyncio.Queue[tuple[EventType, Any]] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._accepting = True
        self._in_flight = 0

    def register(self, event_type: EventType, handler: EventHandler) -> "WebhookQueue":
        """Associate a handler with an event type."""
        self._handlers[event_type] = handler
        return self

    @property
    def pending(self) -> int:
        """Queued plus in-flight events."""
        return self._queue.qsize() + self._in_flight

    def enqueue(self, event_type: EventType, event: Any) -> bool:
        """Add an event without waiting for it to be handled.

        Returns False when no handler is registered for the event type.
        """
        if not self._accepting:
            raise RuntimeError("Webhook queue is closed")
        if event_type not in self._handlers:
            logger.debug("No handler registered for %s, dropping event", event_type.value)
            return False
        self._queue.put_nowait((event_type, event))
        self._ensure_worker()
        return True

    async def drain(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def close(self, timeout: float | None = None) -> None:
        """Stop accepting events, drain, then stop the worker.

        With a timeout, events still queued when it expires are abandoned.
        """
        self._accepting = False
        try:
            await asyncio.wait_for(self.drain(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Webhook queue drain timed out after %ss, abandoning %s event(s)",
                timeout,
                self.pending,
            )
        finally:
            if self._worker is not None:
                self._worker.cancel()
                try:
                    await self._worker
                except asyncio.CancelledError:
                    pass
                self._worker = None

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            event_type, event = await self._queue.get()
            self._in_flight = 1
            try:
                await self._handlers[event_type](event)
            except Exception:
                run_key = getattr(event, "run_key", None)
                logger.exception(
                    "Error in %s handler for run %s",
                    event_type.value,
                    run_key.key if run_key is not None else "unknown",
                )
            finally:
                self._in_flight = 0
                self._queue.task_done()
