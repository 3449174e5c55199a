"""
JSON Diagram Accessor Adapter

Implements IGraphAccessor by reading a diagram file exported by the
editor. The file is re-read on every call.
"""

import json
import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from archsim.application.ports.outbound.graph_accessor import IGraphAccessor
from archsim.domain.models import DiagramSnapshot
from .documents import DiagramDocument


class DiagramLoadError(Exception):
    """Raised when a diagram file cannot be read or does not validate."""


class JsonDiagramAccessor(IGraphAccessor):
    """File-backed adapter implementing IGraphAccessor."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = logging.getLogger(__name__)

    def get_snapshot(self) -> DiagramSnapshot:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise DiagramLoadError(f"Cannot read diagram '{self.path}': {e}") from e
        except json.JSONDecodeError as e:
            raise DiagramLoadError(f"Diagram '{self.path}' is not valid JSON: {e}") from e

        try:
            document = DiagramDocument.model_validate(raw)
        except ValidationError as e:
            raise DiagramLoadError(f"Diagram '{self.path}' does not match the diagram schema: {e}") from e

        snapshot = document.to_snapshot()
        self.logger.debug(
            f"Loaded diagram '{self.path}': {len(snapshot.nodes)} nodes, {len(snapshot.edges)} edges"
        )
        return snapshot
