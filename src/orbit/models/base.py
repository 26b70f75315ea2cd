"""
Task definitions and model registry.

The registry is loaded from configs/models.yaml and maps each logical task to
a model id, the pipeline label the inference engine expects, and the fixed
options applied on every run.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

import yaml

from orbit.core.logging import get_logger

logger = get_logger("models.base")

ProgressCallback = Callable[[dict[str, Any]], None]


class ModelTask(Enum):
    SENTIMENT = "sentiment-analysis"
    GENERATION = "generation"
    FEATURE_EXTRACTION = "feature-extraction"


class UnknownTaskError(ValueError):
    """Task name outside the supported set."""


class ModelNotLoadedError(RuntimeError):
    """Pipeline used before load_model() was called for its task."""

    def __init__(self, task: "ModelTask"):
        self.task = task
        super().__init__(
            f'Pipeline for task "{task.value}" not initialized. '
            f'Call load_model("{task.value}") first.'
        )


def resolve_task(task: "ModelTask | str") -> ModelTask:
    """Coerce a task value to ModelTask, rejecting unknown names."""
    if isinstance(task, ModelTask):
        return task
    try:
        return ModelTask(task)
    except ValueError:
        valid = ", ".join(t.value for t in ModelTask)
        raise UnknownTaskError(f"Unknown task {task!r} (expected one of: {valid})") from None


class PipelineHandle(Protocol):
    """Loaded pipeline: awaitable callable over a single text."""

    async def __call__(self, text: str, **options: Any) -> Any: ...


class InferenceBackend(Protocol):
    """Creates pipeline handles for a task label and model id."""

    async def create(
        self,
        pipeline_task: str,
        model_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineHandle: ...


@dataclass(frozen=True)
class TaskSpec:
    """Registry entry for one task."""

    task: ModelTask
    pipeline_task: str
    model_id: str
    options: dict[str, Any] = field(default_factory=dict)
    notes: str = ""


class ModelRegistry:
    """Task specs keyed by ModelTask, normally loaded from YAML."""

    def __init__(self, specs: dict[ModelTask, TaskSpec]):
        missing = [t.value for t in ModelTask if t not in specs]
        if missing:
            raise ValueError(f"Model registry missing tasks: {', '.join(missing)}")
        self.specs = specs

    @classmethod
    def from_yaml(cls, config_path: Path | str) -> "ModelRegistry":
        with open(config_path) as f:
            data = yaml.safe_load(f)

        specs: dict[ModelTask, TaskSpec] = {}
        for entry in data["models"]:
            task = resolve_task(entry["task"])
            specs[task] = TaskSpec(
                task=task,
                pipeline_task=entry.get("pipeline_task", task.value),
                model_id=entry["model_id"],
                options=dict(entry.get("options") or {}),
                notes=entry.get("notes", ""),
            )

        logger.debug(f"Loaded {len(specs)} task specs from {config_path}")
        return cls(specs)

    def get(self, task: ModelTask | str) -> TaskSpec:
        return self.specs[resolve_task(task)]

    def with_overrides(self, overrides: dict[str, str]) -> "ModelRegistry":
        """Return a copy with model ids replaced for the given task values."""
        specs = dict(self.specs)
        for task_name, model_id in overrides.items():
            task = resolve_task(task_name)
            specs[task] = replace(specs[task], model_id=model_id)
            logger.info(f"Model override for {task.value}: {model_id}")
        return ModelRegistry(specs)

    @property
    def model_map(self) -> dict[ModelTask, str]:
        return {task: spec.model_id for task, spec in self.specs.items()}


def default_registry() -> ModelRegistry:
    """Create registry from the bundled models.yaml."""
    config_path = Path(__file__).parent.parent / "configs" / "models.yaml"

    if not config_path.exists():
        raise FileNotFoundError(f"Model registry not found at {config_path}")

    return ModelRegistry.from_yaml(config_path)
