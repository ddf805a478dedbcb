"""Base planner interface."""

from abc import ABC, abstractmethod

from ..source import SourceAccessor
from ..types import PlanMeta, PlanType


class Planner(ABC):
    """Base planner class: detection plus PlanMeta assembly for one ecosystem."""

    plan_type: PlanType
    display_name: str = 'Base'

    @abstractmethod
    def detect(self, src: SourceAccessor) -> bool:
        """
        Check if this planner applies to the project.

        Args:
            src: Accessor for the project tree

        Returns:
            True when the project belongs to this ecosystem
        """

    @abstractmethod
    def get_meta(self, src: SourceAccessor) -> PlanMeta:
        """
        Inspect the project and assemble its PlanMeta.

        Args:
            src: Accessor for the project tree

        Returns:
            Flat string-to-string plan metadata
        """

    def _file_exists(self, src: SourceAccessor, *paths: str) -> bool:
        """Check if any of the given files exists in the project."""
        for path in paths:
            if src.exists(path):
                return True
        return False
