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
"""FastAPI entrypoint receiving GitHub workflow webhooks."""

import hashlib
import hmac
import json
import logging
from contextlib import asynccontextmanager
from typing import Optional, Union

from fastapi import FastAPI, Header, HTTPException, Request
from pydantic import ValidationError

from slack_stream.app.api.schemas import (
    CacheEntryResponse,
    CacheResponse,
    WebhookAcceptedResponse,
)
from slack_stream.app.application.eligibility import CiClient, EligibilityFilter
from slack_stream.app.application.relay_service import ChatClient, RunRelayService
from slack_stream.app.config import Settings, load_settings
from slack_stream.app.domain.models import (
    EventType,
    JobEvent,
    MessageLocator,
    RunEvent,
)
from slack_stream.app.infrastructure.github_client import GitHubClient
from slack_stream.app.infrastructure.github_schemas import (
    WorkflowJobWebhook,
    WorkflowRunWebhook,
)
from slack_stream.app.infrastructure.in_memory_chat_client import InMemoryChatClient
from slack_stream.app.infrastructure.in_memory_lru_cache import InMemoryLRUCache
from slack_stream.app.infrastructure.slack_chat_client import SlackChatClient
from slack_stream.app.infrastructure.webhook_queue import WebhookQueue

logger = logging.getLogger(__name__)

_JOB_ACTIONS = {
    "queued": EventType.JOB_QUEUED,
    "in_progress": EventType.JOB_IN_PROGRESS,
    "completed": EventType.JOB_COMPLETED,
}


def verify_signature(secret: str, body: bytes, signature: Optional[str]) -> bool:
    """Check an ``X-Hub-Signature-256`` header against the raw body."""
    if not signature or not signature.startswith("sha256="):
        return False
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={digest}", signature)


def parse_webhook(event_name: str, payload: dict) -> Union[JobEvent, RunEvent, None]:
    """Translate a webhook delivery into a relay event, or None if not relayed."""
    action = payload.get("action")
    if event_name == "workflow_job" and action in _JOB_ACTIONS:
        job_hook = WorkflowJobWebhook.model_validate(payload)
        return JobEvent(
            type=_JOB_ACTIONS[action],
            job=job_hook.workflow_job.to_domain(),
            repository=job_hook.repository.to_domain(),
            sender=job_hook.sender_domain(),
        )
    if event_name == "workflow_run" and action == "completed":
        run_hook = WorkflowRunWebhook.model_validate(payload)
        return RunEvent(
            type=EventType.RUN_COMPLETED,
            run=run_hook.workflow_run.to_domain(),
            repository=run_hook.repository.to_domain(),
            sender=run_hook.sender_domain(),
        )
    return None


def create_app(
    settings: Optional[Settings] = None,
    chat: Optional[ChatClient] = None,
    ci: Optional[CiClient] = None,
) -> FastAPI:
    """Wire the relay service and return the FastAPI app."""
    settings = settings or load_settings()
    owned_clients: list[Union[SlackChatClient, GitHubClient]] = []

    if chat is None:
        if settings.chat_mode == "simulated":
            chat = InMemoryChatClient()
        else:
            slack = SlackChatClient(token=settings.slack_bot_token)
            owned_clients.append(slack)
            chat = slack
    if ci is None:
        github = GitHubClient(token=settings.github_token)
        owned_clients.append(github)
        ci = github

    cache: InMemoryLRUCache[MessageLocator] = InMemoryLRUCache(
        MessageLocator, max_entries=settings.cache_size
    )
    queue = WebhookQueue()
    relay = RunRelayService(
        chat=chat,
        eligibility=EligibilityFilter(ci=ci),
        cache=cache,
        channel=settings.slack_channel_id,
    )
    relay.register(queue)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Webhook relay ready: channel=%s chat_mode=%s cache_size=%s",
            settings.slack_channel_id,
            settings.chat_mode,
            settings.cache_size,
        )
        yield
        logger.info("Draining %s pending webhook event(s)", queue.pending)
        await queue.close(timeout=settings.drain_timeout_seconds)
        for client in owned_clients:
            await client.aclose()

    app = FastAPI(title="Slack Stream", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.cache = cache
    app.state.queue = queue
    app.state.relay = relay
    app.state.chat = chat

    @app.get("/")
    @app.get("/health")
    def health() -> dict[str, str]:
        """Simple health endpoint."""
        return {"status": "ok"}

    @app.post("/", status_code=202, response_model=WebhookAcceptedResponse)
    async def receive_webhook(
        request: Request,
        x_github_event: Optional[str] = Header(default=None),
        x_hub_signature_256: Optional[str] = Header(default=None),
    ) -> WebhookAcceptedResponse:
        """Verify, parse and enqueue a GitHub webhook delivery."""
        body = await request.body()
        if not verify_signature(
            settings.github_webhook_secret, body, x_hub_signature_256
        ):
            raise HTTPException(status_code=401, detail="Invalid webhook signature")
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Invalid JSON payload") from exc
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Payload must be an object")

        try:
            event = parse_webhook(x_github_event or "", payload)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if event is None:
            return WebhookAcceptedResponse(status="ignored", event=x_github_event)

        try:
            queue.enqueue(event.type, event)
        except RuntimeError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return WebhookAcceptedResponse(status="queued", event=event.type.value)

    @app.get("/api/cache", response_model=CacheResponse)
    def cache_entries() -> CacheResponse:
        """List cached status message locators."""
        return CacheResponse(
            size=len(cache),
            capacity=cache.max_entries,
            pending_events=queue.pending,
            entries=[
                CacheEntryResponse(key=key, channel=locator.channel, ts=locator.ts)
                for key, locator in cache.entries()
            ],
        )

    return app


def run() -> None:
    """Console entrypoint: serve the relay with uvicorn."""
    import uvicorn

    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
