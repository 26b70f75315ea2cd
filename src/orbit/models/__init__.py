"""
Models module - task pipelines over a local inference library.

Components:
- base: Task enum, model registry (configs/models.yaml), errors
- backend: transformers-backed pipeline factory
- manager: Lazy pipeline cache, run dispatch, retrieval-augmented ask
"""

from orbit.models.base import ModelNotLoadedError, ModelTask, UnknownTaskError
from orbit.models.manager import ModelManager

__all__ = ["ModelManager", "ModelTask", "ModelNotLoadedError", "UnknownTaskError"]
