"""Render step registry.

A step is a plain function over a RenderContext, registered with ``@step``::

    @step(id="S2", stage=Stage.RESIZE, dependencies=["S1"])
    def resize(ctx: RenderContext) -> None:
        ctx.image = ctx.image.resize(ctx.target_size)

Run order comes from the dependency graph; among steps that are ready at the
same time, the earlier stage runs first. A step may only depend on steps of
its own or an earlier stage, which keeps crop → resize → flip → rotate fixed
however the step modules are imported.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from layerforge.engine.context import RenderContext

logger = logging.getLogger(__name__)


class Stage(enum.IntEnum):
    CROP = 0
    RESIZE = 1
    FLIP = 2
    ROTATE = 3


StepFn = Callable[["RenderContext"], None]


@dataclass
class StepSpec:
    id: str
    stage: Stage
    fn: StepFn
    dependencies: list[str] = field(default_factory=list)
    description: str = ""


class StepRegistry:
    def __init__(self) -> None:
        self._steps: dict[str, StepSpec] = {}

    def register(self, spec: StepSpec) -> None:
        if spec.id in self._steps:
            raise ValueError(f"Duplicate step ID: {spec.id}")
        self._steps[spec.id] = spec
        logger.debug("Registered step %s (%s)", spec.id, spec.stage.name)

    def resolve_order(self) -> list[StepSpec]:
        """Dependency order, earlier stages first among ready steps.

        Raises ValueError for unknown dependencies, dependencies on a later
        stage, or cycles.
        """
        sorter: TopologicalSorter[str] = TopologicalSorter()
        for spec in self._steps.values():
            for dep in spec.dependencies:
                required = self._steps.get(dep)
                if required is None:
                    raise ValueError(f"Step {spec.id} depends on unknown step {dep}")
                if required.stage > spec.stage:
                    raise ValueError(
                        f"Step {spec.id} ({spec.stage.name}) cannot depend on "
                        f"{dep} from the later {required.stage.name} stage"
                    )
            sorter.add(spec.id, *spec.dependencies)

        try:
            sorter.prepare()
        except CycleError as e:
            raise ValueError(f"Circular dependency detected among: {e.args[1]}") from e

        ordered: list[StepSpec] = []
        ready: list[StepSpec] = []
        while sorter.is_active():
            ready.extend(self._steps[sid] for sid in sorter.get_ready())
            ready.sort(key=lambda s: (s.stage, s.id))
            nxt = ready.pop(0)
            ordered.append(nxt)
            sorter.done(nxt.id)
        return ordered

    @property
    def count(self) -> int:
        return len(self._steps)


_registry = StepRegistry()


def get_registry() -> StepRegistry:
    return _registry


def step(
    *,
    id: str,
    stage: Stage,
    dependencies: list[str] | None = None,
    description: str = "",
) -> Callable[[StepFn], StepFn]:
    """Register the decorated function in the shared registry."""

    def decorator(fn: StepFn) -> StepFn:
        _registry.register(
            StepSpec(
                id=id,
                stage=stage,
                fn=fn,
                dependencies=dependencies or [],
                description=description,
            )
        )
        return fn

    return decorator
