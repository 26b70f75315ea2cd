"""Shared fixtures: fake inference backend with deterministic outputs."""

import asyncio
import hashlib
import re
from collections.abc import Callable
from typing import Any

import numpy as np
import pytest

# Importing transformers.pipelines re-executes transformers/__init__ and swaps
# sys.modules["transformers"]; do it up front so monkeypatch.setattr("transformers.pipeline")
# patches the module object that `from transformers import pipeline` later reads.
import transformers.pipelines  # noqa: F401

from orbit.memory.kv import InMemoryKeyValueStore
from orbit.memory.store import MemoryStore
from orbit.models.backend import FeatureTensor
from orbit.models.manager import ModelManager

EMBED_DIM = 32


def hashed_embedding(text: str, dim: int = EMBED_DIM) -> FeatureTensor:
    """Bag-of-words vector: each lowercase word hashes into one bucket."""
    vec = np.zeros(dim, dtype=np.float32)
    for word in re.findall(r"\w+", text.lower()):
        bucket = int(hashlib.md5(word.encode()).hexdigest(), 16) % dim
        vec[bucket] += 1.0
    norm = np.linalg.norm(vec)
    if norm > 0:
        vec = vec / norm
    return FeatureTensor(data=vec, dims=[1, dim])


def echo_generation(text: str, options: dict) -> list[dict]:
    return [{"generated_text": text}]


def fixed_sentiment(text: str, options: dict) -> list[dict]:
    return [{"label": "POSITIVE", "score": 0.99}]


def embed_features(text: str, options: dict) -> FeatureTensor:
    return hashed_embedding(text)


DEFAULT_RESPONDERS: dict[str, Callable[[str, dict], Any]] = {
    "sentiment-analysis": fixed_sentiment,
    "text2text-generation": echo_generation,
    "feature-extraction": embed_features,
}


class FakePipeline:
    """Records calls and answers through a responder function."""

    def __init__(self, pipeline_task: str, model_id: str, responder: Callable[[str, dict], Any]):
        self.pipeline_task = pipeline_task
        self.model_id = model_id
        self.responder = responder
        self.calls: list[tuple[str, dict]] = []

    async def __call__(self, text: str, **options: Any) -> Any:
        self.calls.append((text, options))
        return self.responder(text, options)


class FakeBackend:
    """In-process stand-in for TransformersBackend."""

    def __init__(self, responders: dict[str, Callable[[str, dict], Any]] | None = None):
        self.responders = {**DEFAULT_RESPONDERS, **(responders or {})}
        self.created: list[tuple[str, str]] = []
        self.pipelines: dict[str, FakePipeline] = {}
        self.fail_with: Exception | None = None

    async def create(self, pipeline_task, model_id, on_progress=None):
        self.created.append((pipeline_task, model_id))
        if on_progress:
            on_progress({"status": "initiate", "task": pipeline_task, "name": model_id})
        # Yield so concurrent loaders can observe the in-flight load
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        pipe = FakePipeline(pipeline_task, model_id, self.responders[pipeline_task])
        self.pipelines[pipeline_task] = pipe
        if on_progress:
            on_progress({"status": "ready", "task": pipeline_task, "name": model_id})
        return pipe


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def manager(backend: FakeBackend) -> ModelManager:
    return ModelManager(backend)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
async def memory(manager: ModelManager, kv: InMemoryKeyValueStore) -> MemoryStore:
    store = MemoryStore(manager, kv)
    await store.start()
    manager.attach_memory(store)
    return store
