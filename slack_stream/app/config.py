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
"""Environment-driven settings."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class Settings(BaseModel):
    """Runtime settings for the relay service."""

    port: int = Field(default=3000, ge=1, le=65535)
    github_webhook_secret: str = Field(min_length=10)
    github_token: str
    slack_bot_token: str = ""
    slack_channel_id: str = Field(min_length=1)
    cache_size: int = Field(default=1000, ge=1)
    drain_timeout_seconds: float = Field(default=30.0, ge=0.0)
    chat_mode: Literal["slack", "simulated"] = "slack"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def require_slack_token(self) -> "Settings":
        if self.chat_mode == "slack" and not self.slack_bot_token:
            raise ValueError("SLACK_BOT_TOKEN is required when chat mode is slack")
        return self


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip()


def load_settings() -> Settings:
    """Build settings from the process environment.

    Raises pydantic.ValidationError when a required variable is missing or a
    value is out of range.
    """
    raw = {
        "port": _env("PORT", "3000"),
        "github_webhook_secret": _env("GITHUB_WEBHOOK_SECRET"),
        "github_token": _env("GITHUB_TOKEN"),
        "slack_bot_token": _env("SLACK_BOT_TOKEN", ""),
        "slack_channel_id": _env("SLACK_CHANNEL_ID"),
        "cache_size": _env("SLACK_STREAM_CACHE_SIZE", "1000"),
        "drain_timeout_seconds": _env("SLACK_STREAM_DRAIN_TIMEOUT_SECONDS", "30"),
        "chat_mode": (_env("SLACK_STREAM_CHAT_MODE", "slack") or "slack").lower(),
        "log_level": (_env("SLACK_STREAM_LOG_LEVEL", "INFO") or "INFO").upper(),
    }
    return Settings.model_validate({k: v for k, v in raw.items() if v is not None})
