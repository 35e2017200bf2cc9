# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Sequential execution of named summarizer steps.

Each telemetry event is processed as an ordered list of steps. Steps run one
after the other; the first failing step stops the run and is reported
together with the steps that already took effect. Applied side effects are
left in place and nothing is retried.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class SummaryPipelineError(Exception):
    """Raised when a step of a telemetry pipeline fails.

    The original error is available as ``__cause__``.

    Attributes:
        step: Name of the failed step.
        completed_steps: Steps that completed before the failure, in order.
    """

    def __init__(self, step: str, completed_steps: list[str]) -> None:
        self.step = step
        self.completed_steps = completed_steps
        applied = ", ".join(completed_steps) or "none"
        super().__init__(f"Summary step '{step}' failed (applied: {applied})")


@dataclass(frozen=True)
class PipelineStep:
    """A named unit of work."""

    name: str
    action: Callable[[], Awaitable[None]]


async def run_pipeline(steps: list[PipelineStep]) -> list[str]:
    """Run steps in order.

    Args:
        steps: Steps to run.

    Returns:
        Names of the steps that ran.

    Raises:
        SummaryPipelineError: If a step raises.
    """
    completed: list[str] = []
    for step in steps:
        try:
            await step.action()
        except Exception as e:
            logger.warning(
                "Summary step %s failed after %s: %s",
                step.name,
                completed,
                str(e),
            )
            raise SummaryPipelineError(step.name, list(completed)) from e
        completed.append(step.name)
    return completed
