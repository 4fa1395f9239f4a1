"""
Pytest configuration and fixtures for blockterm tests.
"""

import os
from itertools import count

import pytest
from hypothesis import Verbosity, settings

from blockterm.session import AiTool, SessionTimeline

# Configure hypothesis settings for property-based testing
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.register_profile(
    "ci",
    max_examples=300,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.register_profile(
    "dev",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


class StepClock:
    """Deterministic millisecond clock: each call advances by ``step``."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 10):
        self._ticks = count(start, step)

    def __call__(self) -> int:
        return next(self._ticks)


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def timeline(clock):
    return SessionTimeline(clock=clock)


@pytest.fixture
def populated_timeline(timeline):
    """Two finished command blocks and one completed AI run."""
    timeline.start_command_block("cargo check", "/repo")
    timeline.push_output_lines(["Checking blockterm v0.1.0", "Finished dev"])
    timeline.finish_command_block(0, 0, 1200)
    timeline.start_command_block("cargo test", "/repo")
    timeline.push_output_lines(["running 3 tests", "test result: FAILED"])
    timeline.finish_command_block(1, 101, 3400)
    ai_id = timeline.start_ai_block(AiTool.CODEX_CLI, "why did tests fail?", [1])
    timeline.append_ai_output_lines(ai_id, ["assertion in parser"])
    timeline.complete_ai_block(ai_id, 0, 800)
    return timeline
