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
"""Unit tests for Slack block rendering and the job merge."""

import copy
import math
from datetime import datetime, timedelta, timezone

import pytest

from slack_stream.app.domain.blocks import (
    chunk_every,
    completion_time,
    info_block,
    job_block,
    job_emoji,
    job_text,
    partition,
    run_color,
    upsert_job,
)
from slack_stream.app.domain.errors import InvalidJobState
from slack_stream.app.domain.models import Repository, Sender, WorkflowJob, WorkflowRun

STARTED = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
INFO = {"block_id": "info", "type": "section", "fields": []}


def make_job(
    index: int = 1,
    status: str = "queued",
    conclusion: str | None = None,
    elapsed: int | None = None,
) -> WorkflowJob:
    return WorkflowJob(
        run_id=100,
        run_attempt=1,
        name=f"build-{index}",
        html_url=f"https://github.com/acme/app/actions/runs/100/job/{index}",
        status=status,
        conclusion=conclusion,
        started_at=STARTED,
        completed_at=STARTED + timedelta(seconds=elapsed) if elapsed is not None else None,
    )


def job_elements(blocks: list[dict]) -> list[dict]:
    return [
        element
        for block in blocks
        if block["block_id"].startswith("jobs")
        for element in block["elements"]
    ]


@pytest.mark.parametrize(
    ("status", "conclusion", "emoji"),
    [
        ("queued", None, "slack-stream-pending"),
        ("in_progress", None, "slack-stream-running"),
        ("completed", "success", "slack-stream-success"),
        ("completed", "failure", "slack-stream-failure"),
        ("completed", "cancelled", "slack-stream-cancelled"),
    ],
)
def test_job_emoji_table(status, conclusion, emoji):
    assert job_emoji(make_job(status=status, conclusion=conclusion)) == emoji


@pytest.mark.parametrize(
    ("status", "conclusion"),
    [
        ("completed", "skipped"),
        ("completed", None),
        ("waiting", None),
        ("requested", None),
    ],
)
def test_job_emoji_rejects_unknown_state(status, conclusion):
    with pytest.raises(InvalidJobState, match="Unknown job state"):
        job_emoji(make_job(status=status, conclusion=conclusion))


def test_completion_time_formats_minutes_and_padded_seconds():
    assert completion_time(make_job(status="in_progress")) is None
    assert completion_time(make_job(elapsed=5)) == "0:05"
    assert completion_time(make_job(elapsed=125)) == "2:05"
    assert completion_time(make_job(elapsed=3600)) == "60:00"


def test_job_text_links_name_and_adds_duration():
    job = make_job(status="completed", conclusion="success", elapsed=61)

    assert job_text(job) == (
        ":slack-stream-success: "
        "<https://github.com/acme/app/actions/runs/100/job/1|build-1> (1:01)"
    )
    assert job_text(make_job()).endswith("|build-1>")


def test_upsert_appends_new_job_after_other_blocks():
    blocks = [INFO, job_block(make_job(1))]

    result = upsert_job(blocks, make_job(2))

    assert result[0] == INFO
    assert [e["text"] for e in job_elements(result)] == [
        job_text(make_job(1)),
        job_text(make_job(2)),
    ]


def test_upsert_replaces_non_terminal_job_in_place():
    blocks = [INFO, job_block(make_job(1))]
    blocks = upsert_job(blocks, make_job(2))

    result = upsert_job(blocks, make_job(1, status="in_progress"))

    texts = [e["text"] for e in job_elements(result)]
    assert texts[0].startswith(":slack-stream-running:")
    assert texts[1] == job_text(make_job(2))


@pytest.mark.parametrize("late_status", ["queued", "in_progress"])
def test_terminal_job_state_is_sticky(late_status):
    done = make_job(1, status="completed", conclusion="success", elapsed=30)
    blocks = upsert_job([INFO], done)

    result = upsert_job(blocks, make_job(1, status=late_status))

    assert result == blocks
    assert job_elements(result)[0]["text"] == job_text(done)


def test_upsert_is_idempotent_for_terminal_job():
    done = make_job(3, status="completed", conclusion="failure", elapsed=90)
    blocks = [INFO, job_block(make_job(1)), {"type": "divider"}]

    once = upsert_job(blocks, done)
    twice = upsert_job(once, done)

    assert twice == once


def test_upsert_does_not_mutate_input():
    blocks = [INFO, job_block(make_job(1))]
    snapshot = copy.deepcopy(blocks)

    upsert_job(blocks, make_job(1, status="in_progress"))

    assert blocks == snapshot


def test_upsert_keeps_other_blocks_first_and_in_order():
    divider = {"type": "divider"}
    footer = {"block_id": "footer", "type": "context", "elements": []}
    blocks = [job_block(make_job(1)), INFO, divider, footer]

    result = upsert_job(blocks, make_job(2))

    assert result[:3] == [INFO, divider, footer]
    assert [b["block_id"] for b in result[3:]] == ["jobs0"]


def test_upsert_passes_through_non_mrkdwn_elements():
    image = {"type": "image", "image_url": "https://example.com/x.png", "alt_text": "x"}
    blocks = [{"block_id": "jobs0", "type": "context", "elements": [image]}]

    result = upsert_job(blocks, make_job(1))

    assert job_elements(result) == [image, {"type": "mrkdwn", "text": job_text(make_job(1))}]


@pytest.mark.parametrize("count", [1, 9, 10, 11, 20, 21, 35])
def test_upsert_chunks_job_elements_into_containers_of_ten(count):
    blocks: list[dict] = [INFO]
    for index in range(count):
        blocks = upsert_job(blocks, make_job(index))

    containers = blocks[1:]
    assert len(containers) == math.ceil(count / 10)
    assert [b["block_id"] for b in containers] == [f"jobs{i}" for i in range(len(containers))]
    assert all(len(b["elements"]) <= 10 for b in containers)
    assert [e["text"] for e in job_elements(blocks)] == [
        job_text(make_job(index)) for index in range(count)
    ]


def test_eleven_queued_jobs_fill_two_containers():
    blocks: list[dict] = [INFO]
    for index in range(11):
        blocks = upsert_job(blocks, make_job(index))

    assert [len(b["elements"]) for b in blocks if b["block_id"].startswith("jobs")] == [10, 1]


def test_upsert_finds_job_across_container_boundary():
    blocks: list[dict] = [INFO]
    for index in range(12):
        blocks = upsert_job(blocks, make_job(index))

    result = upsert_job(blocks, make_job(11, status="completed", conclusion="cancelled", elapsed=2))

    assert len(job_elements(result)) == 12
    assert job_elements(result)[11]["text"].startswith(":slack-stream-cancelled:")


def test_upsert_raises_for_unknown_state():
    with pytest.raises(InvalidJobState):
        upsert_job([INFO], make_job(status="completed", conclusion="neutral"))


def test_info_block_lists_pull_requests_and_attempt():
    repository = Repository(
        name="app",
        full_name="acme/app",
        html_url="https://github.com/acme/app",
        owner_login="acme",
    )
    sender = Sender(login="octocat", html_url="https://github.com/octocat")
    run = WorkflowRun(
        id=100,
        run_attempt=2,
        name="CI",
        html_url="https://github.com/acme/app/actions/runs/100",
        path=".github/workflows/ci.yml",
        head_sha="abc123",
        pull_requests=[7],
    )

    block = info_block(run, repository, sender)

    assert block["block_id"] == "info"
    assert [f["text"] for f in block["fields"]] == [
        "*Repo*\n<https://github.com/acme/app|acme/app>",
        "*PR*\n<https://github.com/acme/app/pull/7|#7>",
        "*Workflow*\n<https://github.com/acme/app/actions/runs/100|CI>",
        "*Attempt*\n<https://github.com/acme/app/actions/runs/100/attempts/2|#2>",
        "*Author*\n<https://github.com/octocat|octocat>",
    ]


def test_info_block_omits_first_attempt():
    repository = Repository(
        name="app", full_name="acme/app", html_url="https://github.com/acme/app", owner_login="acme"
    )
    sender = Sender(login="octocat", html_url="https://github.com/octocat")
    run = WorkflowRun(
        id=1, run_attempt=1, name="CI", html_url="u", path="p", head_sha="s"
    )

    labels = [f["text"].split("\n")[0] for f in info_block(run, repository, sender)["fields"]]

    assert labels == ["*Repo*", "*Workflow*", "*Author*"]


@pytest.mark.parametrize(
    ("conclusion", "color"),
    [
        ("success", "#57AB5A"),
        ("failure", "#E5534B"),
        ("cancelled", "#767172"),
        ("skipped", "#768390"),
        (None, "#768390"),
    ],
)
def test_run_color(conclusion, color):
    run = WorkflowRun(
        id=1, run_attempt=1, name="CI", html_url="u", path="p", head_sha="s", conclusion=conclusion
    )
    assert run_color(run) == color


def test_run_color_without_run_is_neutral():
    assert run_color() == "#768390"


def test_chunk_every_and_partition():
    assert chunk_every([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert chunk_every([], 3) == []
    assert partition([1, 2, 3, 4], lambda n: n % 2) == ([1, 3], [2, 4])
