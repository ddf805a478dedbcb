"""Helpers shared by the Dockerfile generators."""

from typing import Dict, Mapping
import logging

from ..types import PlanMeta

logger = logging.getLogger(__name__)

# Port every generated image listens on.
EXPOSED_PORT = 8080


def resolve_meta(meta: PlanMeta, defaults: Mapping[str, str], ecosystem: str) -> Dict[str, str]:
    """
    Fill absent keys from an ecosystem's defaults table.

    Keys outside the table are dropped. They are logged because a
    misspelled key would otherwise fall back to its default unnoticed.

    Args:
        meta: Plan metadata from a planner
        defaults: Key to default value, one entry per recognized key
        ecosystem: Name used in the warning

    Returns:
        Mapping with exactly the keys of ``defaults``
    """
    unknown = sorted(set(meta) - set(defaults))
    if unknown:
        logger.warning(f"Ignoring unrecognized {ecosystem} plan keys: {', '.join(unknown)}")

    return {key: meta.get(key, default) for key, default in defaults.items()}
