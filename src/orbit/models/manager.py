"""Model manager - lazy pipeline cache, task dispatch and retrieval-augmented ask."""

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from orbit.core.logging import get_logger
from orbit.models.base import (
    InferenceBackend,
    ModelNotLoadedError,
    ModelRegistry,
    ModelTask,
    PipelineHandle,
    ProgressCallback,
    default_registry,
    resolve_task,
)

if TYPE_CHECKING:
    from orbit.memory.base import SearchResult
    from orbit.memory.store import MemoryStore

logger = get_logger("models.manager")

FALLBACK_ANSWER = "I couldn't generate an answer."


def build_prompt(question: str, facts: Sequence["SearchResult"]) -> str:
    """Render retrieved facts and the question into the generation prompt."""
    context = "\n".join(f"- {fact.text}" for fact in facts)
    return f"Question: {question}\nContext:\n{context}\nAnswer:"


def extract_answer(result: Any) -> str:
    """Pull generated_text out of a text2text result, or fall back."""
    if isinstance(result, (list, tuple)) and result:
        first = result[0]
        if isinstance(first, dict) and first.get("generated_text"):
            return first["generated_text"]
    logger.warning(f"Unexpected generation output, using fallback: {result!r:.200}")
    return FALLBACK_ANSWER


class ModelManager:
    """Owns one pipeline per task, loaded on demand and never unloaded."""

    def __init__(
        self,
        backend: InferenceBackend,
        registry: ModelRegistry | None = None,
        ask_top_k: int = 3,
    ):
        self.backend = backend
        self.registry = registry or default_registry()
        self.ask_top_k = ask_top_k
        self._pipelines: dict[ModelTask, PipelineHandle] = {}
        self._pending: dict[ModelTask, asyncio.Task] = {}
        self._memory: "MemoryStore | None" = None

    def attach_memory(self, memory: "MemoryStore") -> None:
        """Set the memory store used by ask()."""
        self._memory = memory

    def is_loaded(self, task: ModelTask | str) -> bool:
        return resolve_task(task) in self._pipelines

    @property
    def loaded_tasks(self) -> list[ModelTask]:
        return list(self._pipelines.keys())

    async def load_model(
        self,
        task: ModelTask | str,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineHandle:
        """Return the pipeline for a task, creating it on first use.

        Concurrent first-time callers share a single in-flight load; only the
        caller that starts the load receives progress events.

        Args:
            task: Task enum or its string value
            on_progress: Optional callback for load progress events

        Returns:
            Cached pipeline handle

        Raises:
            UnknownTaskError: task is not one of the supported tasks
            Exception: any backend failure, unmodified
        """
        task = resolve_task(task)

        handle = self._pipelines.get(task)
        if handle is not None:
            logger.debug(f"Pipeline cache hit: {task.value}")
            return handle

        pending = self._pending.get(task)
        if pending is None:
            pending = asyncio.ensure_future(self._create(task, on_progress))
            self._pending[task] = pending
        else:
            logger.debug(f"Joining in-flight load: {task.value}")

        # Shielded so a cancelled waiter does not abort the shared load
        return await asyncio.shield(pending)

    async def _create(
        self, task: ModelTask, on_progress: ProgressCallback | None
    ) -> PipelineHandle:
        spec = self.registry.get(task)
        logger.info(f"Loading {task.value} model: {spec.model_id} ({spec.pipeline_task})")
        try:
            handle = await self.backend.create(spec.pipeline_task, spec.model_id, on_progress)
        finally:
            self._pending.pop(task, None)

        self._pipelines[task] = handle
        logger.info(f"Model ready: {task.value}")
        return handle

    async def run(self, task: ModelTask | str, text: str) -> Any:
        """Run text through a loaded pipeline with the task's fixed options.

        Returns the raw pipeline result unmodified.
        """
        task = resolve_task(task)
        handle = self._pipelines.get(task)
        if handle is None:
            raise ModelNotLoadedError(task)

        options = dict(self.registry.get(task).options)
        logger.debug(f"Run {task.value} ({len(text)} chars) options={options}")

        try:
            return await handle(text, **options)
        except Exception as e:
            logger.error(f"{task.value} inference failed: {e}")
            raise

    async def embed(self, text: str) -> list[float]:
        """Embed text with the feature-extraction pipeline, loading it if needed."""
        await self.load_model(ModelTask.FEATURE_EXTRACTION)
        output = await self.run(ModelTask.FEATURE_EXTRACTION, text)
        return [float(x) for x in output.data]

    async def ask(self, question: str) -> str:
        """Answer a question from the most similar stored facts."""
        if self._memory is None:
            raise RuntimeError("No memory store attached. Call attach_memory() first.")

        facts = await self._memory.search(question, self.ask_top_k)
        logger.debug(f"Retrieved {len(facts)} facts for question: {question[:80]}")
        prompt = build_prompt(question, facts)

        await self.load_model(ModelTask.GENERATION)
        result = await self.run(ModelTask.GENERATION, prompt)
        return extract_answer(result)
