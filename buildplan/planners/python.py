"""
Python planner.

Detection works on a shared :class:`PythonPlanContext`. Each
``determine_*`` function memoizes its answer on the context, so a fact
needed by several others (the framework, for the WSGI reference and the
install command) is probed once per planning run.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import logging
import re

from ..source import SourceAccessor
from ..types import PlanMeta, PlanType, PythonFramework
from ..utils import first_existing, has_file, weak_contains
from .base import Planner

logger = logging.getLogger(__name__)

ENTRY_CANDIDATES = ('main.py', 'app.py', 'manage.py')
DEFAULT_ENTRY = 'main.py'

DEPENDENCY_FILES = ('requirements.txt', 'Pipfile', 'pyproject.toml')
DEFAULT_DEPENDENCY_FILE = 'requirements.txt'

# Files scanned by has_dependency, lock files included.
DEPENDENCY_SCAN_FILES = (
    'requirements.txt',
    'Pipfile',
    'pyproject.toml',
    'Pipfile.lock',
    'poetry.lock',
)

# Native libraries needed to build some database drivers.
APT_DEPENDENCIES = [
    ('mysqlclient', ['libmariadb-dev', 'build-essential']),
    ('psycopg2', ['libpq-dev']),
]

SERVER_PORT = 8080

# `app = Flask(__name__)` style assignments. Misses calls whose arguments
# contain a ")", aliased imports and application factories.
_APP_ASSIGNMENT_PATTERNS = {
    PythonFramework.FLASK: re.compile(r'(\w+)\s*=\s*Flask\([^)]*\)'),
    PythonFramework.FASTAPI: re.compile(r'(\w+)\s*=\s*FastAPI\([^)]*\)'),
}


@dataclass
class PythonPlanContext:
    """Detection state for one Python planning run."""

    src: SourceAccessor
    framework: Optional[PythonFramework] = None
    entry: Optional[str] = None
    dependency_file: Optional[str] = None
    wsgi: Optional[str] = None


FrameworkRule = Tuple[Callable[[PythonPlanContext, str], bool], PythonFramework]


def _requires(package: str) -> Callable[[PythonPlanContext, str], bool]:
    def rule(ctx: PythonPlanContext, requirements: str) -> bool:
        return weak_contains(requirements, package)
    rule.__name__ = f'requires_{package}'
    return rule


def _has_manage_py(ctx: PythonPlanContext, requirements: str) -> bool:
    return has_file(ctx.src, 'manage.py')


# Evaluated in order, first match wins.
FRAMEWORK_RULES: List[FrameworkRule] = [
    (_requires('django'), PythonFramework.DJANGO),
    (_has_manage_py, PythonFramework.DJANGO),
    (_requires('flask'), PythonFramework.FLASK),
    (_requires('fastapi'), PythonFramework.FASTAPI),
]


def determine_framework(ctx: PythonPlanContext) -> PythonFramework:
    """Determine the web framework of the project from requirements.txt."""
    if ctx.framework is not None:
        return ctx.framework

    requirements = ctx.src.read_text('requirements.txt')
    if requirements is None:
        ctx.framework = PythonFramework.NONE
        return ctx.framework

    ctx.framework = PythonFramework.NONE
    for predicate, framework in FRAMEWORK_RULES:
        if predicate(ctx, requirements):
            logger.debug(f"Framework rule {predicate.__name__} matched: {framework.value}")
            ctx.framework = framework
            break

    return ctx.framework


def determine_entry(ctx: PythonPlanContext) -> str:
    """Determine the file the interpreter runs when no web server is used."""
    if ctx.entry is None:
        ctx.entry = first_existing(ctx.src, ENTRY_CANDIDATES) or DEFAULT_ENTRY
    return ctx.entry


def determine_dependency_policy(ctx: PythonPlanContext) -> str:
    """Determine the manifest file that governs dependency installation."""
    if ctx.dependency_file is None:
        ctx.dependency_file = first_existing(ctx.src, DEPENDENCY_FILES) or DEFAULT_DEPENDENCY_FILE
    return ctx.dependency_file


def determine_wsgi(ctx: PythonPlanContext) -> str:
    """
    Determine the application reference a WSGI/ASGI server should serve.

    Returns:
        ``<dir>.wsgi`` for Django, ``<module>:<name>`` for Flask and
        FastAPI, or an empty string when nothing applicable is found
    """
    if ctx.wsgi is not None:
        return ctx.wsgi

    framework = determine_framework(ctx)
    if framework == PythonFramework.DJANGO:
        ctx.wsgi = _find_django_wsgi(ctx.src)
    elif framework in _APP_ASSIGNMENT_PATTERNS:
        ctx.wsgi = _find_app_assignment(ctx, _APP_ASSIGNMENT_PATTERNS[framework])
    else:
        ctx.wsgi = ''

    return ctx.wsgi


def _find_django_wsgi(src: SourceAccessor) -> str:
    entries = src.list_dir('')
    if entries is None:
        return ''

    for entry in entries:
        if entry.is_dir and has_file(src, f'{entry.name}/wsgi.py'):
            return f'{entry.name}.wsgi'

    logger.debug("Django project without a <dir>/wsgi.py module")
    return ''


def _find_app_assignment(ctx: PythonPlanContext, pattern: re.Pattern) -> str:
    entry = determine_entry(ctx)
    content = ctx.src.read_text(entry)
    if content is None:
        return ''

    match = pattern.search(content)
    if not match:
        return ''

    module = entry.replace('.py', '', 1)
    return f'{module}:{match.group(1)}'


def has_dependency(src: SourceAccessor, *dependencies: str) -> bool:
    """
    Check if any of the dependencies is mentioned in a manifest or lock file.

    Plain case-sensitive substring match over requirements.txt, Pipfile,
    pyproject.toml, Pipfile.lock and poetry.lock.
    """
    for path in DEPENDENCY_SCAN_FILES:
        content = src.read_text(path)
        if content is None:
            continue
        if any(dependency in content for dependency in dependencies):
            return True
    return False


def determine_install_command(ctx: PythonPlanContext) -> str:
    """
    Pick the dependency install command from policy, wsgi and framework.

    The policy rows only apply when the manifest is really there; the
    defaulted ``requirements.txt`` of a project without one falls through
    to the manifest-less rows.
    """
    policy = determine_dependency_policy(ctx)
    wsgi = determine_wsgi(ctx)
    framework = determine_framework(ctx)

    if not has_file(ctx.src, policy):
        policy = ''

    if policy == 'requirements.txt':
        if wsgi:
            return 'pip install -r requirements.txt && pip install gunicorn'
        if framework == PythonFramework.FASTAPI:
            return 'pip install -r requirements.txt && pip install uvicorn'
        return 'pip install -r requirements.txt'
    if policy == 'Pipfile':
        if wsgi:
            return 'pipenv install && pipenv install gunicorn'
        return 'pipenv install'
    if policy == 'pyproject.toml':
        if wsgi:
            return 'poetry install && poetry install gunicorn'
        return 'poetry install'

    if wsgi:
        return 'pip install gunicorn'
    return 'echo "skip install"'


def determine_start_command(ctx: PythonPlanContext) -> str:
    """Pick the start command: ASGI server, WSGI server, or plain interpreter."""
    wsgi = determine_wsgi(ctx)
    if wsgi:
        if determine_framework(ctx) == PythonFramework.FASTAPI:
            return f'uvicorn {wsgi} --host 0.0.0.0 --port {SERVER_PORT}'
        return f'gunicorn --bind :{SERVER_PORT} {wsgi}'

    return f'python {determine_entry(ctx)}'


def determine_apt_dependencies(ctx: PythonPlanContext) -> List[str]:
    """System packages needed to build native dependencies; first matching driver wins."""
    for dependency, apt_packages in APT_DEPENDENCIES:
        if has_dependency(ctx.src, dependency):
            return list(apt_packages)
    return []


def get_meta(src: SourceAccessor) -> PlanMeta:
    """Assemble the PlanMeta of a Python project."""
    ctx = PythonPlanContext(src=src)
    meta: PlanMeta = {}

    framework = determine_framework(ctx)
    if framework != PythonFramework.NONE:
        meta['framework'] = framework.value

    meta['install'] = determine_install_command(ctx)
    meta['start'] = determine_start_command(ctx)

    apt_deps = determine_apt_dependencies(ctx)
    if apt_deps:
        meta['apt-deps'] = ' '.join(apt_deps)

    logger.debug(f"Python plan for {src!r}: {meta}")
    return meta


class PythonPlanner(Planner):
    """Plan Python projects (Django, Flask, FastAPI or plain scripts)."""

    plan_type = PlanType.PYTHON
    display_name = 'Python'

    def detect(self, src: SourceAccessor) -> bool:
        if self._file_exists(src, *DEPENDENCY_FILES):
            return True

        entries = src.list_dir('') or []
        return any(not entry.is_dir and entry.name.endswith('.py') for entry in entries)

    def get_meta(self, src: SourceAccessor) -> PlanMeta:
        return get_meta(src)
