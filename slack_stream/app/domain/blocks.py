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
"""Slack block rendering and the job block merge."""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Iterable, Sequence, TypeVar

from .errors import InvalidJobState
from .models import Repository, Sender, WorkflowJob, WorkflowRun

T = TypeVar("T")

Block = dict[str, Any]

JOB_BLOCK_PREFIX = "jobs"
# Slack renders at most 10 elements per context block.
MAX_ELEMENTS_PER_BLOCK = 10

IN_PROGRESS_COLOR = "#DBAB0A"
DEFAULT_RUN_COLOR = "#768390"

_RUN_COLORS = {
    "success": "#57AB5A",
    "failure": "#E5534B",
    "cancelled": "#767172",
}

_JOB_EMOJI = {
    ("queued", None): "slack-stream-pending",
    ("in_progress", None): "slack-stream-running",
    ("completed", "success"): "slack-stream-success",
    ("completed", "failure"): "slack-stream-failure",
    ("completed", "cancelled"): "slack-stream-cancelled",
}

_TERMINAL_EMOJI = re.compile(r":slack-stream-(success|failure|cancelled):")


def job_emoji(job: WorkflowJob) -> str:
    """Map job status/conclusion to an emoji name."""
    conclusion = job.conclusion if job.status == "completed" else None
    emoji = _JOB_EMOJI.get((job.status, conclusion))
    if emoji is None:
        raise InvalidJobState(job.status, job.conclusion)
    return emoji


def completion_time(job: WorkflowJob) -> str | None:
    """Elapsed time as m:ss, or None while the job is still running."""
    if job.completed_at is None:
        return None
    started_at = job.started_at or job.completed_at
    total_seconds = math.floor((job.completed_at - started_at).total_seconds())
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


def job_text(job: WorkflowJob) -> str:
    elapsed = completion_time(job)
    suffix = f" ({elapsed})" if elapsed else ""
    return f":{job_emoji(job)}: <{job.html_url}|{job.name}>{suffix}"


def job_block(job: WorkflowJob) -> Block:
    """Single job container holding only this job."""
    return {
        "block_id": f"{JOB_BLOCK_PREFIX}0",
        "type": "context",
        "elements": [{"type": "mrkdwn", "text": job_text(job)}],
    }


def info_block(run: WorkflowRun, repository: Repository, sender: Sender) -> Block:
    """Header section linking repository, pull requests, workflow and author."""
    info = [("Repo", repository.html_url, repository.full_name)]
    for number in run.pull_requests:
        info.append(("PR", f"{repository.html_url}/pull/{number}", f"#{number}"))
    info.append(("Workflow", run.html_url, run.name))
    if run.run_attempt > 1:
        info.append(
            (
                "Attempt",
                f"{run.html_url}/attempts/{run.run_attempt}",
                f"#{run.run_attempt}",
            )
        )
    info.append(("Author", sender.html_url, sender.login))
    return {
        "block_id": "info",
        "type": "section",
        "fields": [
            {"type": "mrkdwn", "text": f"*{label}*\n<{url}|{value}>"}
            for label, url, value in info
        ],
    }


def run_color(run: WorkflowRun | None = None) -> str:
    """Attachment color for a run outcome."""
    if run is None:
        return DEFAULT_RUN_COLOR
    return _RUN_COLORS.get(run.conclusion or "", DEFAULT_RUN_COLOR)


def chunk_every(items: Sequence[T], count: int) -> list[list[T]]:
    return [list(items[i : i + count]) for i in range(0, len(items), count)]


def partition(
    items: Iterable[T], predicate: Callable[[T], Any]
) -> tuple[list[T], list[T]]:
    """Split items into (matching, rest), keeping order in both."""
    left: list[T] = []
    right: list[T] = []
    for item in items:
        if predicate(item):
            left.append(item)
        else:
            right.append(item)
    return left, right


def is_job_block(block: Block) -> bool:
    return str(block.get("block_id") or "").startswith(JOB_BLOCK_PREFIX)


def upsert_job(blocks: Sequence[Block], job: WorkflowJob) -> list[Block]:
    """Merge one job update into the message blocks.

    Non-job blocks keep their order and come first. Job lines are matched by
    job URL; a line already showing success, failure or cancelled is never
    replaced. The job lines are then repacked into ``jobs0``, ``jobs1``, ...
    context blocks of at most ``MAX_ELEMENTS_PER_BLOCK`` elements.
    """
    job_blocks, other_blocks = partition(blocks, is_job_block)
    new_element = {"type": "mrkdwn", "text": job_text(job)}
    marker = f"<{job.html_url}|"

    elements: list[dict[str, Any]] = []
    found = False
    for block in job_blocks:
        for element in block.get("elements") or []:
            text = element.get("text")
            if (
                element.get("type") != "mrkdwn"
                or not isinstance(text, str)
                or marker not in text
            ):
                elements.append(element)
                continue
            found = True
            if _TERMINAL_EMOJI.search(text):
                elements.append(element)
            else:
                elements.append(new_element)
    if not found:
        elements.append(new_element)

    return list(other_blocks) + [
        {
            "block_id": f"{JOB_BLOCK_PREFIX}{index}",
            "type": "context",
            "elements": chunk,
        }
        for index, chunk in enumerate(chunk_every(elements, MAX_ELEMENTS_PER_BLOCK))
    ]
