"""
State of the single current generation run.

A workspace owns exactly one GenerationRun. Every step of the pipeline moves
it through explicit states, so "one run at a time" is a checked rule rather
than a convention.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet, Optional

from book_weaver.core.exceptions import InvalidTransitionError, RunInProgressError
from book_weaver.core.models import Book

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    AWAITING_BIO = "awaiting_bio"
    AWAITING_OUTLINE = "awaiting_outline"
    AWAITING_CONTENT = "awaiting_content"
    ASSEMBLING = "assembling"
    READY = "ready"
    FAILED = "failed"


BUSY_STATES: FrozenSet[RunState] = frozenset({
    RunState.AWAITING_BIO,
    RunState.AWAITING_OUTLINE,
    RunState.AWAITING_CONTENT,
    RunState.ASSEMBLING,
})

_START_STATES = frozenset({RunState.AWAITING_BIO, RunState.AWAITING_OUTLINE})

ALLOWED_TRANSITIONS: Dict[RunState, FrozenSet[RunState]] = {
    RunState.IDLE: _START_STATES,
    RunState.READY: _START_STATES | {RunState.IDLE},
    RunState.FAILED: _START_STATES | {RunState.IDLE},
    RunState.AWAITING_BIO: frozenset({RunState.AWAITING_OUTLINE, RunState.FAILED}),
    RunState.AWAITING_OUTLINE: frozenset({RunState.AWAITING_CONTENT, RunState.FAILED}),
    RunState.AWAITING_CONTENT: frozenset({RunState.ASSEMBLING, RunState.FAILED}),
    RunState.ASSEMBLING: frozenset({RunState.READY, RunState.FAILED}),
}

PROGRESS_MESSAGES: Dict[RunState, str] = {
    RunState.AWAITING_BIO: "Generating author bio...",
    RunState.AWAITING_OUTLINE: "Step 1/3: Generating book outline...",
    RunState.AWAITING_CONTENT: "Step 2/3: Generating content for all chapters... (this may take a few minutes)",
    RunState.ASSEMBLING: "Step 3/3: Assembling your book...",
}


class GenerationRun:
    """Loading flag, progress message, result and error of the current run."""

    def __init__(self):
        self.state = RunState.IDLE
        self.progress: Optional[str] = None
        self.book: Optional[Book] = None
        self.error: Optional[str] = None
        self.started_at: Optional[datetime] = None
        self.finished_at: Optional[datetime] = None
        self.number = 0  # incremented by every begin()

    @property
    def is_busy(self) -> bool:
        return self.state in BUSY_STATES

    def _move(self, target: RunState) -> None:
        if target not in ALLOWED_TRANSITIONS.get(self.state, frozenset()):
            raise InvalidTransitionError(
                f"Cannot move generation from '{self.state.value}' to '{target.value}'"
            )
        logger.debug(f"Run state {self.state.value} -> {target.value}")
        self.state = target
        self.progress = PROGRESS_MESSAGES.get(target)

    def begin(self, with_bio: bool = False) -> None:
        """
        Start a new run, discarding any previous result.

        Raises:
            RunInProgressError: if a run is already in flight
        """
        if self.is_busy:
            raise RunInProgressError("A book is already being generated. Please wait for it to finish.")
        self._move(RunState.AWAITING_BIO if with_bio else RunState.AWAITING_OUTLINE)
        self.number += 1
        self.book = None
        self.error = None
        self.started_at = datetime.now(timezone.utc)
        self.finished_at = None

    def advance(self, target: RunState) -> None:
        """Move to the next in-flight state."""
        if target in (RunState.READY, RunState.FAILED, RunState.IDLE):
            raise InvalidTransitionError(f"Use complete(), fail() or reset() to reach '{target.value}'")
        self._move(target)

    def complete(self, book: Book) -> None:
        self._move(RunState.READY)
        self.book = book
        self.progress = None
        self.finished_at = datetime.now(timezone.utc)

    def fail(self, message: str) -> None:
        """Abort the run. No partial book is kept."""
        self._move(RunState.FAILED)
        self.book = None
        self.error = message
        self.progress = None
        self.finished_at = datetime.now(timezone.utc)

    def reset(self) -> None:
        """Drop the result and go back to idle."""
        if self.state != RunState.IDLE:
            self._move(RunState.IDLE)
        self.book = None
        self.error = None
        self.progress = None
        self.started_at = None
        self.finished_at = None

    def note_error(self, message: str) -> None:
        """Record an error from a side action (cover, titles...) without touching the run."""
        self.error = message

    def clear_error(self) -> None:
        self.error = None

    def attach_book(self, book: Book) -> None:
        """Swap in an updated copy of the ready book (e.g. a new bio)."""
        if self.state != RunState.READY:
            raise InvalidTransitionError("No finished book to update")
        self.book = book
