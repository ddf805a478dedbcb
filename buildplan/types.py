"""Shared plan types: the PlanMeta record and per-ecosystem enumerations."""

from enum import Enum
from typing import Dict

# Flat configuration record handed from a planner to a generator.
# Absent keys mean "use the generator default", never an error.
PlanMeta = Dict[str, str]


class PlanType(Enum):
    """Ecosystems the planner knows how to containerize."""
    PYTHON = 'python'
    NODEJS = 'nodejs'
    JAVA = 'java'
    STATIC = 'static'


class PythonFramework(Enum):
    """Python web frameworks recognized by the Python planner."""
    DJANGO = 'django'
    FLASK = 'flask'
    FASTAPI = 'fastapi'
    NONE = 'none'


class JavaProjectType(Enum):
    """Java build tools."""
    MAVEN = 'maven'
    GRADLE = 'gradle'


class JavaFramework(Enum):
    """Java frameworks that change how the jar is started."""
    SPRING_BOOT = 'springboot'
    NONE = 'none'


class NodePackageManager(Enum):
    """Node.js package managers, picked from the lock file present."""
    NPM = 'npm'
    YARN = 'yarn'
    PNPM = 'pnpm'
    UNKNOWN = 'unknown'


class NodeProjectFramework(Enum):
    """Node.js frameworks recognized from package.json dependencies."""
    NEXT = 'next.js'
    NUXT = 'nuxt.js'
    REMIX = 'remix'
    ASTRO = 'astro'
    VITEPRESS = 'vitepress'
    HEXO = 'hexo'
    UMI = 'umi'
    VITE = 'vite'
    CREATE_REACT_APP = 'create-react-app'
    VUE_CLI = 'vue-cli'
    NEST = 'nest.js'
    EXPRESS = 'express'
    KOA = 'koa'
    NONE = 'none'
