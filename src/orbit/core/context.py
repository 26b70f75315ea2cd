"""
Runtime context.

Builds the model manager, memory store and key/value slot once, wires them
together, and owns their startup and teardown.
"""

from types import TracebackType

from orbit.core.config import Settings, get_settings
from orbit.core.logging import get_logger
from orbit.memory.kv import KeyValueStore, SQLiteKeyValueStore
from orbit.memory.store import MemoryStore
from orbit.models.base import InferenceBackend, ModelRegistry, default_registry
from orbit.models.manager import ModelManager

logger = get_logger("core.context")


class Orbit:
    """Explicitly constructed SDK instance.

    Usage:
        async with Orbit() as orbit:
            await orbit.memory.add("Paris is the capital of France.")
            answer = await orbit.models.ask("What is the capital of France?")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        backend: InferenceBackend | None = None,
        kv: KeyValueStore | None = None,
        registry: ModelRegistry | None = None,
    ):
        self.settings = settings or get_settings()

        if backend is None:
            from orbit.models.backend import TransformersBackend

            backend = TransformersBackend(device=self.settings.device)

        registry = registry or default_registry()
        overrides = self.settings.model_overrides()
        if overrides:
            registry = registry.with_overrides(overrides)

        self.kv = kv or SQLiteKeyValueStore(self.settings.db_path)
        self.models = ModelManager(
            backend, registry=registry, ask_top_k=self.settings.ask_top_k
        )
        self.memory = MemoryStore(
            self.models, self.kv, storage_key=self.settings.storage_key
        )
        self.models.attach_memory(self.memory)
        self._started = False

    async def start(self) -> None:
        """Connect storage and load the memory snapshot."""
        if self._started:
            return
        await self.kv.connect()
        await self.memory.start()
        self._started = True
        logger.info("Orbit started")

    async def close(self) -> None:
        """Release storage. Loaded pipelines are dropped with the instance."""
        if not self._started:
            return
        await self.kv.close()
        self._started = False
        logger.info("Orbit closed")

    async def __aenter__(self) -> "Orbit":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
