"""Dockerfile generator for static sites."""

from typing import Dict

from ..types import PlanMeta
from .base import EXPOSED_PORT, resolve_meta

# No keys are recognized; passing meta through resolve_meta only reports
# stray keys, the resolved values are not used.
DEFAULTS: Dict[str, str] = {}


def generate_dockerfile(meta: PlanMeta) -> str:
    """Render an nginx image serving the project files."""
    resolve_meta(meta, DEFAULTS, 'static')

    root = '/usr/share/nginx/html/static'
    lines = [
        'FROM docker.io/library/nginx:alpine as runtime',
        f'WORKDIR {root}',
        'COPY . .',
        f'RUN echo "server {{ listen {EXPOSED_PORT}; root {root}; }}"> /etc/nginx/conf.d/default.conf',
        f'EXPOSE {EXPOSED_PORT}',
    ]
    return '\n'.join(lines)
