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
"""Opt-in check for workflow runs."""

from __future__ import annotations

import logging
from typing import Protocol

import yaml

from slack_stream.app.domain.errors import EligibilityFetchError
from slack_stream.app.domain.models import Repository, WorkflowJob, WorkflowRun

logger = logging.getLogger(__name__)

OPT_IN_FLAG = "SLACK_STREAM"


class CiClient(Protocol):
    """CI provider contract."""

    async def fetch_run_attempt(
        self, owner: str, repo: str, run_id: int, attempt: int
    ) -> WorkflowRun:
        """Fetch one attempt of a workflow run."""

    async def fetch_file_at_commit(
        self, owner: str, repo: str, path: str, commit_sha: str
    ) -> bytes | None:
        """Fetch raw file content at a commit, or None if it is not a file."""


class EligibilityFilter:
    """Admits runs whose workflow sets ``env.SLACK_STREAM: true``."""

    def __init__(self, ci: CiClient):
        self.ci = ci

    async def fetch_eligible_run(
        self, job: WorkflowJob, repository: Repository
    ) -> WorkflowRun | None:
        """Fetch the job's run attempt and return it only if it opted in."""
        try:
            run = await self.ci.fetch_run_attempt(
                repository.owner, repository.name, job.run_id, job.run_attempt
            )
        except Exception as exc:
            logger.warning(
                "Could not fetch run %s for %s: %s",
                job.run_key.key,
                repository.full_name,
                exc,
            )
            return None
        if not await self.is_eligible(run, repository):
            return None
        return run

    async def is_eligible(self, run: WorkflowRun, repository: Repository) -> bool:
        try:
            definition = await self._load_definition(run, repository)
        except EligibilityFetchError as exc:
            logger.warning("Run %s is not eligible: %s", run.run_key.key, exc)
            return False
        env = definition.get("env") or {}
        eligible = env.get(OPT_IN_FLAG) is True
        if not eligible:
            logger.info(
                "Run %s of %s did not opt in via env.%s",
                run.run_key.key,
                repository.full_name,
                OPT_IN_FLAG,
            )
        return eligible

    async def _load_definition(self, run: WorkflowRun, repository: Repository) -> dict:
        try:
            content = await self.ci.fetch_file_at_commit(
                repository.owner, repository.name, run.path, run.head_sha
            )
        except Exception as exc:
            raise EligibilityFetchError(
                f"failed to fetch {run.path}@{run.head_sha}: {exc}"
            ) from exc
        if content is None:
            raise EligibilityFetchError(f"{run.path}@{run.head_sha} is not a file")
        try:
            definition = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise EligibilityFetchError(f"invalid YAML in {run.path}: {exc}") from exc
        if not isinstance(definition, dict):
            raise EligibilityFetchError(f"{run.path} is not a mapping")
        env = definition.get("env")
        if env is not None and not isinstance(env, dict):
            raise EligibilityFetchError(f"env in {run.path} is not a mapping")
        return definition
