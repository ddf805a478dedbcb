"""Static site planner."""

from ..source import SourceAccessor
from ..types import PlanMeta, PlanType
from .base import Planner


class StaticPlanner(Planner):
    """Serve the project files as they are. Used as the fallback."""

    plan_type = PlanType.STATIC
    display_name = 'Static Site'

    def detect(self, src: SourceAccessor) -> bool:
        return True

    def get_meta(self, src: SourceAccessor) -> PlanMeta:
        return {}
