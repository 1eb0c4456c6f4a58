# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Ordered runner for async step functions sharing one context object.

The mount flow is split into small phases (allocate layers, create
directories, start serving, register), each living in its own module
under :mod:`layermount.manager.mount` and registering itself here::

    mount_pipeline = Pipeline[MountContext]("mount")

    @mount_pipeline.step(order=100)
    async def allocate_layers(ctx: MountContext) -> None: ...

Steps run in ascending ``order``; ties keep registration order.  The
first step that raises ends the run and its exception propagates.
Callers undo partial work from whatever the context recorded.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from itertools import count
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

_Ctx = TypeVar("_Ctx")

StepFn = Callable[[_Ctx], Awaitable[None]]

DEFAULT_ORDER = 500


@dataclass(frozen=True, order=True)
class _Step(Generic[_Ctx]):
    order: int
    seq: int
    fn: StepFn[_Ctx] = field(compare=False)

    @property
    def name(self) -> str:
        return getattr(self.fn, "__name__", repr(self.fn))


class Pipeline(Generic[_Ctx]):
    """A named, ordered list of async steps over a context of type ``_Ctx``."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._steps: list[_Step[_Ctx]] = []
        self._counter = count()

    def step(self, fn: StepFn[_Ctx] | None = None, *, order: int = DEFAULT_ORDER):
        """Decorator registering a step, as ``@p.step`` or ``@p.step(order=N)``.

        The function is returned unchanged so it can still be called
        directly in tests.
        """
        def register(f: StepFn[_Ctx]) -> StepFn[_Ctx]:
            bisect.insort(self._steps, _Step(order, next(self._counter), f))
            return f

        return register(fn) if fn is not None else register

    def step_names(self) -> list[str]:
        """Registered step names in execution order."""
        return [s.name for s in self._steps]

    async def run(self, ctx: _Ctx) -> None:
        for s in list(self._steps):
            logger.debug("%s: running %s", self.name, s.name)
            await s.fn(ctx)

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        listed = ", ".join(f"{s.name}({s.order})" for s in self._steps)
        return f"<Pipeline {self.name}: {listed}>"
