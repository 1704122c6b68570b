# Copyright 2025 HERU Contributors
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

"""Stage events emitted by the engine for an external metrics collaborator."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from heru.core.errors import RequestCancelled

logger = logging.getLogger(__name__)


class StageEvent(BaseModel):
    """Timing and outcome of one pipeline stage."""

    stage: str = Field(..., description="analyze, recognize, generate, rank, validate, ...")
    outcome: str = Field(default="ok", description="ok, error or cancelled")
    latency_ms: float = Field(..., ge=0.0)
    request_id: str
    segment_index: int | None = None

    model_config = ConfigDict(frozen=True)


class EventSink(Protocol):
    def emit(self, event: StageEvent) -> None: ...


class LoggingEventSink:
    """Default sink: writes every event to the module logger at DEBUG."""

    def emit(self, event: StageEvent) -> None:
        where = f" segment={event.segment_index}" if event.segment_index is not None else ""
        logger.debug(
            f"[{event.request_id}] {event.stage}{where} {event.outcome} "
            f"({event.latency_ms:.1f} ms)"
        )


class CollectingEventSink:
    """Keeps events in memory."""

    def __init__(self) -> None:
        self.events: list[StageEvent] = []

    def emit(self, event: StageEvent) -> None:
        self.events.append(event)


@contextmanager
def timed_stage(
    sink: EventSink, stage: str, request_id: str, segment_index: int | None = None
) -> Iterator[None]:
    """Emit a :class:`StageEvent` for the enclosed block, outcome ``error`` on exceptions."""
    start = time.perf_counter()
    outcome = "ok"
    try:
        yield
    except RequestCancelled:
        outcome = "cancelled"
        raise
    except BaseException:
        outcome = "error"
        raise
    finally:
        sink.emit(
            StageEvent(
                stage=stage,
                outcome=outcome,
                latency_ms=(time.perf_counter() - start) * 1000.0,
                request_id=request_id,
                segment_index=segment_index,
            )
        )
