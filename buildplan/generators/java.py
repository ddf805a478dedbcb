"""Dockerfile generator for Java projects."""

from dataclasses import dataclass

from ..types import JavaFramework, JavaProjectType, PlanMeta
from .base import resolve_meta

DEFAULTS = {
    'type': JavaProjectType.MAVEN.value,
    'framework': JavaFramework.NONE.value,
    'jdk': '17',
}

JAR_PATHS = {
    JavaProjectType.MAVEN.value: 'target/*.jar',
    JavaProjectType.GRADLE.value: 'build/libs/*.jar',
}


@dataclass(frozen=True)
class JavaDockerfileOptions:
    """Typed view of a Java PlanMeta."""

    project_type: str
    framework: str
    jdk: str

    @classmethod
    def from_meta(cls, meta: PlanMeta) -> 'JavaDockerfileOptions':
        values = resolve_meta(meta, DEFAULTS, 'java')
        return cls(project_type=values['type'], framework=values['framework'], jdk=values['jdk'])

    @property
    def is_maven(self) -> bool:
        return self.project_type == JavaProjectType.MAVEN.value

    @property
    def is_gradle(self) -> bool:
        return self.project_type == JavaProjectType.GRADLE.value

    @property
    def is_spring_boot(self) -> bool:
        return self.framework == JavaFramework.SPRING_BOOT.value


def _build_stage(options: JavaDockerfileOptions) -> str:
    if options.is_maven:
        return (
            f'FROM docker.io/library/openjdk:{options.jdk}-jdk-slim\n'
            'RUN apt-get update && apt-get install -y maven\n'
            'WORKDIR /src\n'
            'COPY . .\n'
            'RUN mvn clean dependency:list install\n'
        )
    if options.is_gradle:
        return (
            f'FROM docker.io/library/gradle:8.1.0-jdk{options.jdk}-alpine\n'
            'WORKDIR /src\n'
            'COPY . .\n'
            'RUN gradle build\n'
        )
    return ''


def _start_command(options: JavaDockerfileOptions) -> str:
    jar = JAR_PATHS.get(options.project_type)
    if jar is None:
        return ''
    if options.is_spring_boot:
        # Spring Boot reads its listen port from a system property.
        return f'CMD java -Dserver.port=$PORT -jar {jar}'
    return f'CMD java -jar {jar}'


def generate_dockerfile(meta: PlanMeta) -> str:
    """Render the Dockerfile for a Maven or Gradle project."""
    options = JavaDockerfileOptions.from_meta(meta)
    return _build_stage(options) + _start_command(options)
