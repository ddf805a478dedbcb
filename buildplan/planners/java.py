"""Java planner."""

from dataclasses import dataclass
from typing import Dict, List, Optional
import logging
import re

from ..source import SourceAccessor
from ..types import JavaFramework, JavaProjectType, PlanMeta, PlanType
from .base import Planner

logger = logging.getLogger(__name__)

GRADLE_FILES = ('build.gradle', 'build.gradle.kts')
DEFAULT_JDK = '17'

_POM_VERSION_PATTERNS = [
    re.compile(r'<java\.version>\s*([\d.]+)\s*</java\.version>'),
    re.compile(r'<maven\.compiler\.source>\s*([\d.]+)\s*</maven\.compiler\.source>'),
]
_GRADLE_VERSION_PATTERN = re.compile(
    r'sourceCompatibility\s*=\s*(?:JavaVersion\.VERSION_)?["\']?([\d._]+)["\']?'
)


@dataclass
class JavaPlanContext:
    """Detection state for one Java planning run."""

    src: SourceAccessor
    project_type: Optional[JavaProjectType] = None
    project_type_known: bool = False
    build_files: Optional[Dict[str, str]] = None
    framework: Optional[JavaFramework] = None
    jdk: Optional[str] = None


def determine_project_type(ctx: JavaPlanContext) -> Optional[JavaProjectType]:
    """Maven when pom.xml exists, Gradle when a gradle build file exists."""
    if ctx.project_type_known:
        return ctx.project_type

    ctx.project_type_known = True
    if ctx.src.exists('pom.xml'):
        ctx.project_type = JavaProjectType.MAVEN
    elif any(ctx.src.exists(path) for path in GRADLE_FILES):
        ctx.project_type = JavaProjectType.GRADLE
    return ctx.project_type


def _build_files(ctx: JavaPlanContext) -> List[str]:
    """Contents of the build files relevant to the project type, read once."""
    if ctx.build_files is None:
        paths = ('pom.xml',) if determine_project_type(ctx) == JavaProjectType.MAVEN else GRADLE_FILES
        ctx.build_files = {}
        for path in paths:
            content = ctx.src.read_text(path)
            if content is not None:
                ctx.build_files[path] = content
    return list(ctx.build_files.values())


def determine_framework(ctx: JavaPlanContext) -> JavaFramework:
    """Detect Spring Boot from the build file."""
    if ctx.framework is not None:
        return ctx.framework

    is_maven = determine_project_type(ctx) == JavaProjectType.MAVEN
    marker = 'spring-boot' if is_maven else 'org.springframework.boot'
    ctx.framework = JavaFramework.NONE
    if any(marker in content for content in _build_files(ctx)):
        ctx.framework = JavaFramework.SPRING_BOOT
    return ctx.framework


def _normalize_jdk(version: str) -> str:
    # 1.8 and VERSION_1_8 both mean Java 8.
    version = version.replace('_', '.')
    if version.startswith('1.'):
        version = version[2:]
    return version.split('.')[0]


def determine_jdk(ctx: JavaPlanContext) -> str:
    """Detect the Java version, defaulting to the current LTS."""
    if ctx.jdk is not None:
        return ctx.jdk

    is_maven = determine_project_type(ctx) == JavaProjectType.MAVEN
    patterns = _POM_VERSION_PATTERNS if is_maven else [_GRADLE_VERSION_PATTERN]
    ctx.jdk = DEFAULT_JDK
    for content in _build_files(ctx):
        for pattern in patterns:
            match = pattern.search(content)
            if match:
                ctx.jdk = _normalize_jdk(match.group(1))
                return ctx.jdk
    return ctx.jdk


def get_meta(src: SourceAccessor) -> PlanMeta:
    """Assemble the PlanMeta of a Java project."""
    ctx = JavaPlanContext(src=src)
    meta: PlanMeta = {}

    project_type = determine_project_type(ctx)
    if project_type is not None:
        meta['type'] = project_type.value

    framework = determine_framework(ctx)
    if framework != JavaFramework.NONE:
        meta['framework'] = framework.value

    meta['jdk'] = determine_jdk(ctx)

    logger.debug(f"Java plan for {src!r}: {meta}")
    return meta


class JavaPlanner(Planner):
    """Plan Java projects built with Maven or Gradle."""

    plan_type = PlanType.JAVA
    display_name = 'Java'

    def detect(self, src: SourceAccessor) -> bool:
        return self._file_exists(src, 'pom.xml', *GRADLE_FILES)

    def get_meta(self, src: SourceAccessor) -> PlanMeta:
        return get_meta(src)
