"""
Dockerfile generator for Node.js projects.

Frameworks that compile to static files get a two-stage image: the site
is built with Node.js and served by nginx. Everything else runs as a
single-stage Node.js server.
"""

from dataclasses import dataclass

from ..types import NodePackageManager, NodeProjectFramework, PlanMeta
from .base import EXPOSED_PORT, resolve_meta

DEFAULTS = {
    'packageManager': NodePackageManager.UNKNOWN.value,
    'framework': '',
    'buildCommand': '',
    'startCommand': '',
    'mainFile': '',
    'nodeVersion': '18',
    'needPuppeteer': 'false',
}

# Frameworks whose build output is a static site, with their output dir.
STATIC_OUTPUT_DIRS = {
    NodeProjectFramework.VITE.value: 'dist',
    NodeProjectFramework.UMI.value: 'dist',
    NodeProjectFramework.CREATE_REACT_APP.value: 'build',
    NodeProjectFramework.VUE_CLI.value: 'dist',
    NodeProjectFramework.HEXO.value: 'public',
    NodeProjectFramework.VITEPRESS.value: 'docs/.vitepress/dist',
    NodeProjectFramework.ASTRO.value: 'dist',
}

# Static-output frameworks served as multi-page sites, without the
# single-page-app fallback to index.html. Fixed per framework; the
# project layout is not inspected.
MULTI_PAGE_FRAMEWORKS = frozenset({
    NodeProjectFramework.HEXO.value,
    NodeProjectFramework.VITEPRESS.value,
    NodeProjectFramework.ASTRO.value,
})

INSTALL_COMMANDS = {
    NodePackageManager.NPM.value: 'RUN npm install',
    NodePackageManager.YARN.value: 'RUN yarn install',
    NodePackageManager.PNPM.value: '\nRUN npm install -g pnpm\nRUN pnpm install\n',
}
DEFAULT_INSTALL_COMMAND = 'RUN yarn'

# Prefixes for running a package.json script.
BUILD_PREFIXES = {
    NodePackageManager.NPM.value: 'RUN npm run ',
    NodePackageManager.YARN.value: 'RUN yarn ',
    NodePackageManager.PNPM.value: 'RUN pnpm run ',
}
START_PREFIXES = {
    NodePackageManager.NPM.value: 'CMD npm run ',
    NodePackageManager.YARN.value: 'CMD yarn ',
    NodePackageManager.PNPM.value: 'CMD pnpm ',
}

PUPPETEER_LIBRARIES = (
    'libnss3 libatk1.0-0 libatk-bridge2.0-0 libcups2 libgbm1 libasound2 '
    'libpangocairo-1.0-0 libxss1 libgtk-3-0 libxshmfence1 libglu1'
)

PUPPETEER_SETUP = (
    '\n'
    f'RUN apt-get update && apt-get install -y {PUPPETEER_LIBRARIES}\n'
    'RUN groupadd -r puppeteer\n'
    'RUN useradd -r -g puppeteer -G audio,video puppeteer\n'
    'RUN chown -R puppeteer:puppeteer /src\n'
    'RUN mkdir /home/puppeteer && chown -R puppeteer:puppeteer /home/puppeteer\n'
    'USER puppeteer\n'
)


@dataclass(frozen=True)
class NodeDockerfileOptions:
    """Typed view of a Node.js PlanMeta."""

    package_manager: str
    framework: str
    build_command: str
    start_command: str
    main_file: str
    node_version: str
    need_puppeteer: bool

    @classmethod
    def from_meta(cls, meta: PlanMeta) -> 'NodeDockerfileOptions':
        values = resolve_meta(meta, DEFAULTS, 'nodejs')
        return cls(
            package_manager=values['packageManager'],
            framework=values['framework'],
            build_command=values['buildCommand'],
            start_command=values['startCommand'],
            main_file=values['mainFile'],
            node_version=values['nodeVersion'],
            need_puppeteer=values['needPuppeteer'] == 'true',
        )

    @property
    def is_static_output(self) -> bool:
        return self.framework in STATIC_OUTPUT_DIRS

    @property
    def is_single_page_app(self) -> bool:
        return self.framework not in MULTI_PAGE_FRAMEWORKS


def _install_command(options: NodeDockerfileOptions) -> str:
    return INSTALL_COMMANDS.get(options.package_manager, DEFAULT_INSTALL_COMMAND)


def _build_command(options: NodeDockerfileOptions) -> str:
    if not options.build_command:
        return ''
    prefix = BUILD_PREFIXES.get(options.package_manager, 'RUN yarn ')
    return prefix + options.build_command


def _start_command(options: NodeDockerfileOptions) -> str:
    if options.start_command:
        prefix = START_PREFIXES.get(options.package_manager, 'CMD yarn ')
        return prefix + options.start_command
    if options.main_file:
        return f'CMD node {options.main_file}'
    if options.framework == NodeProjectFramework.NUXT.value:
        return 'CMD node .output/server/index.mjs'
    return 'CMD node index.js'


def _static_dockerfile(options: NodeDockerfileOptions) -> str:
    output_dir = STATIC_OUTPUT_DIRS[options.framework]
    lines = [
        f'FROM node:{options.node_version} as build',
        'WORKDIR /src',
        'COPY . .',
        _install_command(options),
        _build_command(options),
        '',
        'FROM nginx:alpine',
    ]
    if options.is_single_page_app:
        lines += [
            f'COPY --from=build /src/{output_dir} /static',
            f'RUN echo "server {{ listen {EXPOSED_PORT}; root /static; '
            'location / {try_files \\$uri /index.html; }}"> /etc/nginx/conf.d/default.conf',
        ]
    else:
        lines += [
            f'COPY --from=build /src/{output_dir} /usr/share/nginx/html',
            f'RUN echo "server {{ listen {EXPOSED_PORT}; root /usr/share/nginx/html; }}"'
            '> /etc/nginx/conf.d/default.conf',
        ]
    lines += [f'EXPOSE {EXPOSED_PORT}', '']
    return '\n'.join(lines)


def _server_dockerfile(options: NodeDockerfileOptions) -> str:
    start = _start_command(options)
    puppeteer = ''
    if options.need_puppeteer:
        puppeteer = PUPPETEER_SETUP
        start = 'CMD node node_modules/puppeteer/install.js && ' + start[len('CMD '):]

    lines = [
        f'FROM node:{options.node_version}',
        f'ENV PORT={EXPOSED_PORT}',
        'WORKDIR /src',
        'COPY . .',
        _install_command(options),
        _build_command(options),
        puppeteer,
        f'EXPOSE {EXPOSED_PORT}',
        start,
    ]
    return '\n'.join(lines)


def generate_dockerfile(meta: PlanMeta) -> str:
    """Render the Dockerfile for a Node.js project."""
    options = NodeDockerfileOptions.from_meta(meta)
    if options.is_static_output:
        return _static_dockerfile(options)
    return _server_dockerfile(options)
