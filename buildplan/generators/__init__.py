"""
Dockerfile generators.

Each generator is a pure function from PlanMeta to Dockerfile text; it
never touches the project files.
"""

from typing import Callable, Dict

from ..errors import UnknownPlanTypeError
from ..types import PlanMeta, PlanType
from . import java, nodejs, python, static

__all__ = ['GENERATORS', 'generate_dockerfile']

GENERATORS: Dict[PlanType, Callable[[PlanMeta], str]] = {
    PlanType.PYTHON: python.generate_dockerfile,
    PlanType.NODEJS: nodejs.generate_dockerfile,
    PlanType.JAVA: java.generate_dockerfile,
    PlanType.STATIC: static.generate_dockerfile,
}


def generate_dockerfile(plan_type: PlanType, meta: PlanMeta) -> str:
    """
    Render the Dockerfile for a plan.

    Args:
        plan_type: Ecosystem of the plan
        meta: Plan metadata produced by the matching planner

    Returns:
        Dockerfile text

    Raises:
        UnknownPlanTypeError: If no generator is registered for plan_type
    """
    generator = GENERATORS.get(plan_type)
    if generator is None:
        raise UnknownPlanTypeError(
            f"No Dockerfile generator for plan type: {plan_type}",
            [f"Use one of: {', '.join(t.value for t in PlanType)}"]
        )
    return generator(meta)
