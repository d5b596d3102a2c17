"""Base class for export steps.

Every step declares typed Input, Output, Config via Pydantic models so the
CLI can validate inputs and print JSON schemas without running anything.
"""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar, ClassVar

from pydantic import BaseModel

from .contracts import StepMeta

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for export steps.

    Subclasses set ``input_type``, ``output_type`` and ``config_type`` and
    implement run() and validate_inputs().
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT, data_root: Path):
        self.config = config
        self.data_root = Path(data_root)
        self.elapsed_seconds = 0.0

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Execute this step. Returns output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Check that all required input artifacts exist and are valid."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Run with logging, timing, and validation."""
        step_name = self.name or self.__class__.__name__
        logger.info(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise ValueError(f"[{step_name}] Input validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.perf_counter()
        result = self.run(inputs)
        self.elapsed_seconds = time.perf_counter() - t0
        logger.info(f"[{step_name}] Done in {self.elapsed_seconds:.2f}s")

        meta = getattr(result, "meta", None)
        if isinstance(meta, StepMeta):
            meta.elapsed_seconds = self.elapsed_seconds
        return result

    @classmethod
    def get_input_schema(cls) -> dict:
        return cls.input_type.model_json_schema()

    @classmethod
    def get_output_schema(cls) -> dict:
        return cls.output_type.model_json_schema()

    @classmethod
    def get_config_schema(cls) -> dict:
        return cls.config_type.model_json_schema()
