"""Dockerfile generator for Python projects."""

from dataclasses import dataclass

from ..types import PlanMeta
from .base import EXPOSED_PORT, resolve_meta

BASE_IMAGE = 'docker.io/library/python:3.8.2-slim-buster'

DEFAULTS = {
    'framework': '',
    'install': 'echo "skip install"',
    'start': 'python main.py',
    'apt-deps': '',
}


@dataclass(frozen=True)
class PythonDockerfileOptions:
    """Typed view of a Python PlanMeta."""

    install: str
    start: str
    apt_deps: str

    @classmethod
    def from_meta(cls, meta: PlanMeta) -> 'PythonDockerfileOptions':
        values = resolve_meta(meta, DEFAULTS, 'python')
        return cls(
            install=values['install'],
            start=values['start'],
            apt_deps=values['apt-deps'],
        )


def generate_dockerfile(meta: PlanMeta) -> str:
    """Render the Dockerfile for a Python project."""
    options = PythonDockerfileOptions.from_meta(meta)

    lines = [
        f'FROM {BASE_IMAGE}',
        'WORKDIR /app',
        'RUN apt-get update',
        f'RUN apt-get install {options.apt_deps} gcc -y',
        'RUN rm -rf /var/lib/apt/lists/*',
        'COPY . .',
        f'RUN {options.install}',
        f'EXPOSE {EXPOSED_PORT}',
        f'CMD {options.start}',
    ]
    return '\n'.join(lines)
