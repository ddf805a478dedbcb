"""
Dockerfile planner for source projects.

Inspects a project tree, works out its ecosystem and framework, and
renders a Dockerfile that builds a runnable image for it.
"""

from .types import PlanMeta, PlanType
from .source import DirEntry, LocalSource, SourceAccessor
from .planners import Plan, detect_plan_type, plan_project
from .generators import generate_dockerfile

__version__ = '0.1.0'

__all__ = [
    'PlanMeta',
    'PlanType',
    'DirEntry',
    'LocalSource',
    'SourceAccessor',
    'Plan',
    'detect_plan_type',
    'plan_project',
    'generate_dockerfile',
]
