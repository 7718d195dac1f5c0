"""Saga framework for multi-record status transitions."""

from .base_step import SagaStep
from .context import SagaContext
from .saga import Saga

__all__ = ["Saga", "SagaStep", "SagaContext"]
