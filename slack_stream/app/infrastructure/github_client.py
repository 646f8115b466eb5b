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
"""GitHub REST adapter for run attempts and workflow files."""

from __future__ import annotations

import base64
import logging
from urllib.parse import quote

import httpx

from slack_stream.app.application.eligibility import CiClient
from slack_stream.app.domain.models import WorkflowRun
from slack_stream.app.infrastructure.github_schemas import WorkflowRunPayload

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
REQUEST_TIMEOUT_SECONDS = 10.0


class GitHubClient(CiClient):
    """Async GitHub REST client."""

    def __init__(
        self,
        token: str,
        base_url: str = GITHUB_API_URL,
        client: httpx.AsyncClient | None = None,
    ):
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=REQUEST_TIMEOUT_SECONDS,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_run_attempt(
        self, owner: str, repo: str, run_id: int, attempt: int
    ) -> WorkflowRun:
        response = await self._client.get(
            f"/repos/{quote(owner)}/{quote(repo)}/actions/runs/{run_id}/attempts/{attempt}"
        )
        response.raise_for_status()
        return WorkflowRunPayload.model_validate(response.json()).to_domain()

    async def fetch_file_at_commit(
        self, owner: str, repo: str, path: str, commit_sha: str
    ) -> bytes | None:
        """Return decoded file content, or None for missing paths and directories."""
        response = await self._client.get(
            f"/repos/{quote(owner)}/{quote(repo)}/contents/{quote(path)}",
            params={"ref": commit_sha},
        )
        if response.status_code == 404:
            logger.info("No file at %s/%s:%s@%s", owner, repo, path, commit_sha)
            return None
        response.raise_for_status()
        content = response.json()
        if not isinstance(content, dict) or content.get("type") != "file":
            return None
        if content.get("encoding") != "base64":
            return None
        return base64.b64decode(content.get("content") or "")
