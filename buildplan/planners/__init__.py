"""
Ecosystem planners.

Each planner can tell whether a project belongs to its ecosystem and
turn the project into a PlanMeta record for the matching generator.
"""

from dataclasses import dataclass
from typing import Dict, Optional
import logging

from ..source import SourceAccessor
from ..types import PlanMeta, PlanType
from .base import Planner
from .java import JavaPlanner
from .nodejs import NodeJSPlanner
from .python import PythonPlanner
from .static import StaticPlanner

logger = logging.getLogger(__name__)

__all__ = [
    'Planner',
    'JavaPlanner',
    'NodeJSPlanner',
    'PythonPlanner',
    'StaticPlanner',
    'ALL_PLANNERS',
    'Plan',
    'detect_plan_type',
    'get_planner',
    'plan_project',
]

# Planners in priority order (more specific first)
ALL_PLANNERS = [
    NodeJSPlanner(),
    JavaPlanner(),
    PythonPlanner(),
    StaticPlanner(),    # Lowest priority - fallback
]

_PLANNERS_BY_TYPE: Dict[PlanType, Planner] = {planner.plan_type: planner for planner in ALL_PLANNERS}


@dataclass
class Plan:
    """Detected ecosystem together with its plan metadata."""

    plan_type: PlanType
    meta: PlanMeta


def get_planner(plan_type: PlanType) -> Planner:
    """Return the planner registered for a plan type."""
    return _PLANNERS_BY_TYPE[plan_type]


def detect_plan_type(src: SourceAccessor) -> PlanType:
    """
    Detect the project ecosystem.

    Args:
        src: Accessor for the project tree

    Returns:
        Plan type of the first planner that claims the project
    """
    for planner in ALL_PLANNERS:
        if planner.detect(src):
            logger.info(f"Detected {planner.display_name} project")
            return planner.plan_type

    return PlanType.STATIC


def plan_project(src: SourceAccessor, plan_type: Optional[PlanType] = None) -> Plan:
    """
    Plan a project, detecting its ecosystem unless one is given.

    Args:
        src: Accessor for the project tree
        plan_type: Skip detection and use this ecosystem

    Returns:
        Plan with the ecosystem and its PlanMeta
    """
    if plan_type is None:
        plan_type = detect_plan_type(src)

    meta = get_planner(plan_type).get_meta(src)
    return Plan(plan_type=plan_type, meta=meta)
