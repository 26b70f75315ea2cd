"""
Orbit - client-side SDK for local transformer pipelines with a small vector memory.

Package structure:
- core: Config, logging, runtime context
- models: Task registry, inference backend, model manager
- memory: Records, similarity, key/value persistence, memory store
"""

__version__ = "0.1.0"
