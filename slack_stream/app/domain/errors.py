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
"""Errors raised by the relay engine."""

from __future__ import annotations


class InvalidJobState(ValueError):
    """Job reported a status/conclusion pair with no display mapping."""

    def __init__(self, status: str, conclusion: str | None):
        super().__init__(f"Unknown job state: status={status}, conclusion={conclusion}")
        self.status = status
        self.conclusion = conclusion


class EligibilityFetchError(RuntimeError):
    """Workflow definition could not be fetched or parsed."""
