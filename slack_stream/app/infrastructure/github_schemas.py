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
"""GitHub REST and webhook payload schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from slack_stream.app.domain.models import (
    Repository,
    Sender,
    WorkflowJob,
    WorkflowRun,
)


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class UserPayload(_Payload):
    login: str
    html_url: str


class RepositoryPayload(_Payload):
    name: str
    full_name: str
    html_url: str
    owner: UserPayload
    organization: Optional[str] = None

    @field_validator("organization", mode="before")
    @classmethod
    def organization_login(cls, value):
        if isinstance(value, dict):
            return value.get("login")
        return value

    def to_domain(self) -> Repository:
        return Repository(
            name=self.name,
            full_name=self.full_name,
            html_url=self.html_url,
            owner_login=self.owner.login,
            organization=self.organization,
        )


class PullRequestPayload(_Payload):
    number: int


class WorkflowJobPayload(_Payload):
    run_id: int
    run_attempt: int = 1
    name: str
    html_url: str
    status: str
    conclusion: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def to_domain(self) -> WorkflowJob:
        return WorkflowJob(
            run_id=self.run_id,
            run_attempt=self.run_attempt,
            name=self.name,
            html_url=self.html_url,
            status=self.status,
            conclusion=self.conclusion,
            started_at=self.started_at,
            completed_at=self.completed_at,
        )


class WorkflowRunPayload(_Payload):
    id: int
    run_attempt: int = 1
    name: str
    html_url: str
    path: str
    head_sha: str
    conclusion: Optional[str] = None
    pull_requests: List[PullRequestPayload] = []

    def to_domain(self) -> WorkflowRun:
        return WorkflowRun(
            id=self.id,
            run_attempt=self.run_attempt,
            name=self.name,
            html_url=self.html_url,
            path=self.path,
            head_sha=self.head_sha,
            conclusion=self.conclusion,
            pull_requests=[pr.number for pr in self.pull_requests],
        )


class WorkflowJobWebhook(_Payload):
    """``workflow_job`` delivery."""

    action: str
    workflow_job: WorkflowJobPayload
    repository: RepositoryPayload
    sender: UserPayload

    def sender_domain(self) -> Sender:
        return Sender(login=self.sender.login, html_url=self.sender.html_url)


class WorkflowRunWebhook(_Payload):
    """``workflow_run`` delivery."""

    action: str
    workflow_run: WorkflowRunPayload
    repository: RepositoryPayload
    sender: UserPayload

    def sender_domain(self) -> Sender:
        return Sender(login=self.sender.login, html_url=self.sender.html_url)
