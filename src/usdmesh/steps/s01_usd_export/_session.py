"""Per-export-session state shared by all mesh writes of one USD stage."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ._materials import MaterialRegistry

if TYPE_CHECKING:
    from pxr import Usd

logger = logging.getLogger(__name__)


class ExportSession:
    """Stage, material registry, current time sample and the written-once flag.

    ``frame_has_been_written`` is False until every object of the first time
    sample has been written; mesh writers only bind materials while it is
    False. Material and face-group assignment is assumed not to change
    between time samples of one session.
    """

    def __init__(
        self,
        stage: Usd.Stage,
        *,
        materials_scope: str = "/Root/Looks",
        animated: bool = True,
        export_materials: bool = True,
    ):
        self.stage = stage
        self.registry = MaterialRegistry(stage, materials_scope)
        self.animated = animated
        self.export_materials = export_materials
        self.frame: float = 0.0
        self.frame_has_been_written = False

    @property
    def time_code(self) -> Usd.TimeCode:
        from pxr import Usd

        if not self.animated:
            return Usd.TimeCode.Default()
        return Usd.TimeCode(self.frame)

    def set_frame(self, frame: float) -> None:
        self.frame = float(frame)

    def mark_frame_written(self) -> None:
        if not self.frame_has_been_written:
            logger.debug(f"First time sample written at frame {self.frame}")
        self.frame_has_been_written = True
