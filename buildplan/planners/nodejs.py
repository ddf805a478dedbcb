"""Node.js planner."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import json
import logging
import re

from ..source import SourceAccessor
from ..types import NodePackageManager, NodeProjectFramework, PlanMeta, PlanType
from ..utils import first_existing
from .base import Planner

logger = logging.getLogger(__name__)

# Lock file to package manager, checked in order.
LOCK_FILES = [
    ('pnpm-lock.yaml', NodePackageManager.PNPM),
    ('yarn.lock', NodePackageManager.YARN),
    ('package-lock.json', NodePackageManager.NPM),
]

MAIN_FILE_CANDIDATES = ('index.js', 'main.js', 'app.js', 'server.js')


@dataclass
class NodePlanContext:
    """Detection state for one Node.js planning run."""

    src: SourceAccessor
    package_json: Optional[Dict[str, Any]] = None
    package_manager: Optional[NodePackageManager] = None
    framework: Optional[NodeProjectFramework] = None
    dependencies: Optional[Dict[str, Any]] = field(default=None, repr=False)


def _depends_on(*packages: str) -> Callable[[Dict[str, Any]], bool]:
    def rule(deps: Dict[str, Any]) -> bool:
        return any(package in deps for package in packages)
    rule.__name__ = f"depends_on_{'_'.join(packages)}"
    return rule


# Evaluated in order, first match wins. Site generators and meta-frameworks
# come before the bundlers and servers they are built on.
FRAMEWORK_RULES: List[Tuple[Callable[[Dict[str, Any]], bool], NodeProjectFramework]] = [
    (_depends_on('astro'), NodeProjectFramework.ASTRO),
    (_depends_on('vitepress'), NodeProjectFramework.VITEPRESS),
    (_depends_on('hexo'), NodeProjectFramework.HEXO),
    (_depends_on('next'), NodeProjectFramework.NEXT),
    (_depends_on('nuxt', 'nuxt3'), NodeProjectFramework.NUXT),
    (_depends_on('@remix-run/react'), NodeProjectFramework.REMIX),
    (_depends_on('umi'), NodeProjectFramework.UMI),
    (_depends_on('vite'), NodeProjectFramework.VITE),
    (_depends_on('react-scripts'), NodeProjectFramework.CREATE_REACT_APP),
    (_depends_on('@vue/cli-service'), NodeProjectFramework.VUE_CLI),
    (_depends_on('@nestjs/core'), NodeProjectFramework.NEST),
    (_depends_on('express'), NodeProjectFramework.EXPRESS),
    (_depends_on('koa'), NodeProjectFramework.KOA),
]


def read_package_json(ctx: NodePlanContext) -> Dict[str, Any]:
    """Read package.json, treating a missing or malformed file as empty."""
    if ctx.package_json is not None:
        return ctx.package_json

    ctx.package_json = {}
    content = ctx.src.read_text('package.json')
    if content is not None:
        try:
            data = json.loads(content)
        except ValueError:
            logger.warning("package.json is not valid JSON, ignoring it")
            data = None
        if isinstance(data, dict):
            ctx.package_json = data

    return ctx.package_json


def _dependencies(ctx: NodePlanContext) -> Dict[str, Any]:
    if ctx.dependencies is None:
        package_data = read_package_json(ctx)
        deps: Dict[str, Any] = {}
        for key in ('dependencies', 'devDependencies'):
            section = package_data.get(key)
            if isinstance(section, dict):
                deps.update(section)
        ctx.dependencies = deps
    return ctx.dependencies


def _scripts(ctx: NodePlanContext) -> Dict[str, Any]:
    scripts = read_package_json(ctx).get('scripts')
    return scripts if isinstance(scripts, dict) else {}


def determine_package_manager(ctx: NodePlanContext) -> NodePackageManager:
    """Detect package manager from the lock file present."""
    if ctx.package_manager is None:
        ctx.package_manager = NodePackageManager.UNKNOWN
        for lock_file, manager in LOCK_FILES:
            if ctx.src.exists(lock_file):
                ctx.package_manager = manager
                break
    return ctx.package_manager


def determine_framework(ctx: NodePlanContext) -> NodeProjectFramework:
    """Detect the framework from dependencies and devDependencies."""
    if ctx.framework is not None:
        return ctx.framework

    deps = _dependencies(ctx)
    ctx.framework = NodeProjectFramework.NONE
    for predicate, framework in FRAMEWORK_RULES:
        if predicate(deps):
            ctx.framework = framework
            break

    return ctx.framework


def determine_build_command(ctx: NodePlanContext) -> str:
    """Name of the build script, or empty when there is none."""
    return 'build' if 'build' in _scripts(ctx) else ''


def determine_start_command(ctx: NodePlanContext) -> str:
    """Name of the start script, or empty when there is none."""
    return 'start' if 'start' in _scripts(ctx) else ''


def determine_main_file(ctx: NodePlanContext) -> str:
    """The ``main`` field of package.json, else a conventional entry file."""
    main = read_package_json(ctx).get('main')
    if isinstance(main, str) and main:
        return main
    return first_existing(ctx.src, MAIN_FILE_CANDIDATES) or ''


def determine_node_version(ctx: NodePlanContext) -> str:
    """Major Node.js version required by ``engines.node``, or empty."""
    engines = read_package_json(ctx).get('engines')
    if not isinstance(engines, dict):
        return ''
    constraint = engines.get('node')
    if not isinstance(constraint, str):
        return ''
    match = re.search(r'\d+', constraint)
    return match.group(0) if match else ''


def determine_need_puppeteer(ctx: NodePlanContext) -> bool:
    """Check if the project drives a headless browser through puppeteer."""
    return 'puppeteer' in _dependencies(ctx)


def get_meta(src: SourceAccessor) -> PlanMeta:
    """Assemble the PlanMeta of a Node.js project."""
    ctx = NodePlanContext(src=src)

    meta: PlanMeta = {
        'packageManager': determine_package_manager(ctx).value,
        'framework': determine_framework(ctx).value,
        'buildCommand': determine_build_command(ctx),
        'startCommand': determine_start_command(ctx),
        'mainFile': determine_main_file(ctx),
        'needPuppeteer': 'true' if determine_need_puppeteer(ctx) else 'false',
    }

    node_version = determine_node_version(ctx)
    if node_version:
        meta['nodeVersion'] = node_version

    logger.debug(f"Node.js plan for {src!r}: {meta}")
    return meta


class NodeJSPlanner(Planner):
    """Plan Node.js projects."""

    plan_type = PlanType.NODEJS
    display_name = 'Node.js'

    def detect(self, src: SourceAccessor) -> bool:
        return self._file_exists(src, 'package.json')

    def get_meta(self, src: SourceAccessor) -> PlanMeta:
        return get_meta(src)
