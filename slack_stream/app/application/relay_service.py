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
"""Webhook handlers keeping one Slack status message per workflow run."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from slack_stream.app.application.eligibility import EligibilityFilter
from slack_stream.app.domain.blocks import (
    IN_PROGRESS_COLOR,
    info_block,
    job_block,
    run_color,
    upsert_job,
)
from slack_stream.app.domain.models import (
    EventType,
    JobEvent,
    MessageLocator,
    RunEvent,
    RunKey,
    WorkflowJob,
)
from slack_stream.app.infrastructure.in_memory_lru_cache import InMemoryLRUCache
from slack_stream.app.infrastructure.webhook_queue import WebhookQueue

logger = logging.getLogger(__name__)


class ChatClient(Protocol):
    """Chat provider contract."""

    async def post_message(
        self, channel: str, content: dict[str, Any], thread_ts: str | None = None
    ) -> MessageLocator:
        """Post a message (optionally as a thread reply) and return its address."""

    async def update_message(
        self, locator: MessageLocator, content: dict[str, Any]
    ) -> None:
        """Replace the content of a posted message."""

    async def read_message(self, locator: MessageLocator) -> dict[str, Any] | None:
        """Read a posted message, or None if it no longer exists."""


class RunRelayService:
    """Maps workflow events onto the run's status message and its thread."""

    def __init__(
        self,
        chat: ChatClient,
        eligibility: EligibilityFilter,
        cache: InMemoryLRUCache[MessageLocator],
        channel: str,
    ):
        self.chat = chat
        self.eligibility = eligibility
        self.cache = cache
        self.channel = channel

    def register(self, queue: WebhookQueue) -> WebhookQueue:
        return (
            queue.register(EventType.JOB_QUEUED, self.on_job_queued)
            .register(EventType.JOB_IN_PROGRESS, self.on_job_in_progress)
            .register(EventType.JOB_COMPLETED, self.on_job_completed)
            .register(EventType.RUN_COMPLETED, self.on_run_completed)
        )

    def get_locator(self, run_key: RunKey) -> MessageLocator | None:
        return self.cache.get(run_key.key)

    def set_locator(self, run_key: RunKey, locator: MessageLocator) -> None:
        self.cache.set(run_key.key, locator)

    async def on_job_queued(self, event: JobEvent) -> None:
        """Post the run's status message on its first job, else merge the job."""
        job = event.job
        locator = self.get_locator(job.run_key)
        if locator is not None:
            await self._update_from_job(locator, job)
            return

        run = await self.eligibility.fetch_eligible_run(job, event.repository)
        if run is None:
            return
        locator = await self.chat.post_message(
            self.channel,
            {
                "attachments": [
                    {
                        "color": run_color(),
                        "blocks": [
                            info_block(run, event.repository, event.sender),
                            job_block(job),
                        ],
                    }
                ]
            },
        )
        self.set_locator(job.run_key, locator)
        logger.info(
            "Posted status message for run %s in %s at %s",
            job.run_key.key,
            locator.channel,
            locator.ts,
        )

    async def on_job_in_progress(self, event: JobEvent) -> None:
        locator = self.get_locator(event.job.run_key)
        if locator is None:
            return
        await self._update_from_job(locator, event.job)

    async def on_job_completed(self, event: JobEvent) -> None:
        """Merge the final job state and announce it in the run's thread."""
        job = event.job
        locator = self.get_locator(job.run_key)
        if locator is None:
            return
        await self._update_from_job(locator, job)
        await self.chat.post_message(
            locator.channel,
            {"text": f"{job.name} {job.conclusion}", "blocks": [job_block(job)]},
            thread_ts=locator.ts,
        )

    async def on_run_completed(self, event: RunEvent) -> None:
        """Recolor the status message and post the run outcome in its thread."""
        run = event.run
        locator = self.get_locator(run.run_key)
        if locator is None:
            return
        message = await self.chat.read_message(locator)
        if message is None:
            return
        color = run_color(run)
        await self.chat.update_message(
            locator,
            {"attachments": [{"color": color, "blocks": _message_blocks(message)}]},
        )
        await self.chat.post_message(
            locator.channel,
            {
                "attachments": [
                    {
                        "color": color,
                        "blocks": [
                            {
                                "type": "header",
                                "text": {
                                    "type": "plain_text",
                                    "text": f"{run.name} {run.conclusion}",
                                },
                            }
                        ],
                    }
                ]
            },
            thread_ts=locator.ts,
        )
        logger.info("Closed run %s as %s", run.run_key.key, run.conclusion)

    async def _update_from_job(self, locator: MessageLocator, job: WorkflowJob) -> None:
        message = await self.chat.read_message(locator)
        if message is None:
            logger.info(
                "Status message %s/%s for run %s is gone",
                locator.channel,
                locator.ts,
                job.run_key.key,
            )
            return
        blocks = upsert_job(_message_blocks(message), job)
        await self.chat.update_message(
            locator,
            {"attachments": [{"color": IN_PROGRESS_COLOR, "blocks": blocks}]},
        )


def _message_blocks(message: dict[str, Any]) -> list[dict[str, Any]]:
    attachments = message.get("attachments") or [{}]
    return list(attachments[0].get("blocks") or [])
