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
"""Domain models for workflow runs, jobs and relayed status messages."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Relay events accepted by the webhook queue."""

    JOB_QUEUED = "job.queued"
    JOB_IN_PROGRESS = "job.in_progress"
    JOB_COMPLETED = "job.completed"
    RUN_COMPLETED = "run.completed"


@dataclass(frozen=True)
class RunKey:
    """One attempt of one workflow run."""

    run_id: int
    run_attempt: int

    @property
    def key(self) -> str:
        """Stable key for the locator cache and logs."""
        return f"{self.run_id}:{self.run_attempt}"


class MessageLocator(BaseModel):
    """Address of the root status message posted for a run."""

    model_config = ConfigDict(frozen=True)

    channel: str = Field(min_length=1)
    ts: str = Field(min_length=1)


@dataclass(frozen=True)
class WorkflowJob:
    """Job snapshot carried by a workflow_job webhook."""

    run_id: int
    run_attempt: int
    name: str
    html_url: str
    status: str
    conclusion: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def run_key(self) -> RunKey:
        return RunKey(run_id=self.run_id, run_attempt=self.run_attempt)


@dataclass(frozen=True)
class WorkflowRun:
    """Workflow run attempt."""

    id: int
    run_attempt: int
    name: str
    html_url: str
    path: str
    head_sha: str
    conclusion: Optional[str] = None
    pull_requests: list[int] = field(default_factory=list)

    @property
    def run_key(self) -> RunKey:
        return RunKey(run_id=self.id, run_attempt=self.run_attempt)


@dataclass(frozen=True)
class Repository:
    """Repository the run belongs to."""

    name: str
    full_name: str
    html_url: str
    owner_login: str
    organization: Optional[str] = None

    @property
    def owner(self) -> str:
        """Owner segment used in REST API paths."""
        return self.organization or self.owner_login


@dataclass(frozen=True)
class Sender:
    """User that triggered the webhook."""

    login: str
    html_url: str


@dataclass(frozen=True)
class JobEvent:
    """Job lifecycle event queued for relay."""

    type: EventType
    job: WorkflowJob
    repository: Repository
    sender: Sender

    @property
    def run_key(self) -> RunKey:
        return self.job.run_key


@dataclass(frozen=True)
class RunEvent:
    """Run lifecycle event queued for relay."""

    type: EventType
    run: WorkflowRun
    repository: Repository
    sender: Sender

    @property
    def run_key(self) -> RunKey:
        return self.run.run_key
