"""Inference backend - transformers pipelines behind an async handle."""

import asyncio
from dataclasses import dataclass
from typing import Any

import numpy as np

from orbit.core.logging import get_logger
from orbit.models.base import PipelineHandle, ProgressCallback

logger = get_logger("models.backend")


@dataclass
class FeatureTensor:
    """Pooled embedding output: flat data buffer plus its shape."""

    data: np.ndarray
    dims: list[int]


def _notify(on_progress: ProgressCallback | None, event: dict[str, Any]) -> None:
    if on_progress is None:
        return
    try:
        on_progress(event)
    except Exception as e:
        logger.warning(f"Progress callback raised: {e}")


def pool_features(
    token_embeddings: Any, pooling: str | None = "mean", normalize: bool = False
) -> FeatureTensor:
    """Pool per-token hidden states into one sentence vector.

    Args:
        token_embeddings: Nested list or array shaped [1, tokens, dim] or [tokens, dim]
        pooling: "mean", "cls", or None to keep the token matrix flattened
        normalize: Apply L2 normalization to the pooled vector

    Returns:
        FeatureTensor with a flat float32 buffer
    """
    arr = np.asarray(token_embeddings, dtype=np.float32)
    if arr.ndim == 3:
        arr = arr[0]

    if pooling == "mean":
        vec = arr.mean(axis=0)
    elif pooling == "cls":
        vec = arr[0]
    elif pooling in (None, "none"):
        vec = arr
    else:
        raise ValueError(f"Unsupported pooling mode: {pooling!r}")

    if normalize:
        norm = np.linalg.norm(vec, axis=-1, keepdims=True)
        vec = np.divide(vec, norm, out=np.zeros_like(vec), where=norm > 0)

    dims = [1, *vec.shape]
    return FeatureTensor(data=vec.reshape(-1), dims=dims)


class TransformersPipeline:
    """Async wrapper over a loaded transformers pipeline."""

    def __init__(self, pipeline_task: str, model_id: str, pipe: Any):
        self.pipeline_task = pipeline_task
        self.model_id = model_id
        self._pipe = pipe

    async def __call__(self, text: str, **options: Any) -> Any:
        if self.pipeline_task == "feature-extraction":
            pooling = options.pop("pooling", None)
            normalize = options.pop("normalize", False)
            raw = await asyncio.to_thread(self._pipe, text, **options)
            return pool_features(raw, pooling=pooling, normalize=normalize)

        return await asyncio.to_thread(self._pipe, text, **options)


class TransformersBackend:
    """Creates pipelines with transformers.pipeline() off the event loop."""

    def __init__(self, device: int = -1):
        self.device = device

    async def create(
        self,
        pipeline_task: str,
        model_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineHandle:
        # Heavy import, deferred until the first load
        from transformers import pipeline

        _notify(on_progress, {"status": "initiate", "task": pipeline_task, "name": model_id})
        logger.info(f"Creating {pipeline_task} pipeline: {model_id} (device={self.device})")

        try:
            pipe = await asyncio.to_thread(
                pipeline, pipeline_task, model=model_id, device=self.device
            )
        except Exception as e:
            logger.error(f"Failed to create {pipeline_task} pipeline for {model_id}: {e}")
            raise

        _notify(on_progress, {"status": "ready", "task": pipeline_task, "name": model_id})
        return TransformersPipeline(pipeline_task, model_id, pipe)
