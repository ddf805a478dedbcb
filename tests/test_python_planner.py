"""Tests for the Python planner."""

import tempfile
import unittest
from pathlib import Path

from buildplan.planners.python import (
    FRAMEWORK_RULES,
    PythonPlanContext,
    PythonPlanner,
    determine_apt_dependencies,
    determine_dependency_policy,
    determine_entry,
    determine_framework,
    determine_install_command,
    determine_start_command,
    determine_wsgi,
    get_meta,
    has_dependency,
)
from buildplan.source import LocalSource
from buildplan.types import PythonFramework

from tests.helpers import CountingSource, create_test_repo


class PythonPlannerTestCase(unittest.TestCase):
    """Base test case with a throwaway project directory."""

    def setUp(self) -> None:
        """Set up test fixtures."""
        self._tmp = tempfile.TemporaryDirectory()
        self.repo_path = Path(self._tmp.name)

    def tearDown(self) -> None:
        """Clean up the project directory."""
        self._tmp.cleanup()

    def make_context(self, files: dict) -> PythonPlanContext:
        create_test_repo(self.repo_path, files)
        return PythonPlanContext(src=LocalSource(self.repo_path))


class TestDetermineFramework(PythonPlannerTestCase):
    """Test cases for framework classification."""

    def test_missing_requirements_is_none(self) -> None:
        """Test that no requirements.txt means no framework, even with manage.py."""
        ctx = self.make_context({'manage.py': '', 'Pipfile': 'django = "*"'})
        self.assertEqual(determine_framework(ctx), PythonFramework.NONE)
        self.assertEqual(determine_wsgi(ctx), '')

    def test_django_in_requirements(self) -> None:
        """Test Django detection from requirements.txt."""
        ctx = self.make_context({'requirements.txt': 'Django==4.2\n'})
        self.assertEqual(determine_framework(ctx), PythonFramework.DJANGO)

    def test_manage_py_means_django(self) -> None:
        """Test that manage.py classifies Django even without the package listed."""
        ctx = self.make_context({'requirements.txt': 'flask\n', 'manage.py': ''})
        self.assertEqual(determine_framework(ctx), PythonFramework.DJANGO)

    def test_flask(self) -> None:
        """Test Flask detection."""
        ctx = self.make_context({'requirements.txt': 'Flask==2.0\n'})
        self.assertEqual(determine_framework(ctx), PythonFramework.FLASK)

    def test_fastapi(self) -> None:
        """Test FastAPI detection."""
        ctx = self.make_context({'requirements.txt': 'fastapi==0.104.0\nuvicorn\n'})
        self.assertEqual(determine_framework(ctx), PythonFramework.FASTAPI)

    def test_flask_wins_over_fastapi(self) -> None:
        """Test that rule order decides when several frameworks are listed."""
        ctx = self.make_context({'requirements.txt': 'fastapi\nflask\n'})
        self.assertEqual(determine_framework(ctx), PythonFramework.FLASK)

    def test_weak_contains_matches_substrings(self) -> None:
        """Test that matching is a case-insensitive substring test."""
        ctx = self.make_context({'requirements.txt': 'djangorestframework\n'})
        self.assertEqual(determine_framework(ctx), PythonFramework.DJANGO)

    def test_plain_requirements(self) -> None:
        """Test that unrelated requirements give no framework."""
        ctx = self.make_context({'requirements.txt': 'requests\nnumpy\n'})
        self.assertEqual(determine_framework(ctx), PythonFramework.NONE)

    def test_rules_are_ordered(self) -> None:
        """Test the priority order of the framework rules."""
        frameworks = [framework for _, framework in FRAMEWORK_RULES]
        self.assertEqual(frameworks, [
            PythonFramework.DJANGO,
            PythonFramework.DJANGO,
            PythonFramework.FLASK,
            PythonFramework.FASTAPI,
        ])


class TestDetermineEntryAndPolicy(PythonPlannerTestCase):
    """Test cases for entry file and dependency policy selection."""

    def test_entry_prefers_main_py(self) -> None:
        """Test that main.py wins over app.py."""
        ctx = self.make_context({'main.py': '', 'app.py': ''})
        self.assertEqual(determine_entry(ctx), 'main.py')

    def test_entry_manage_py_only(self) -> None:
        """Test manage.py as the only candidate."""
        ctx = self.make_context({'manage.py': ''})
        self.assertEqual(determine_entry(ctx), 'manage.py')

    def test_entry_default(self) -> None:
        """Test the default entry when no candidate exists."""
        ctx = self.make_context({})
        self.assertEqual(determine_entry(ctx), 'main.py')

    def test_policy_order(self) -> None:
        """Test that Pipfile wins over pyproject.toml."""
        ctx = self.make_context({'Pipfile': '', 'pyproject.toml': ''})
        self.assertEqual(determine_dependency_policy(ctx), 'Pipfile')

    def test_policy_default(self) -> None:
        """Test the default dependency policy."""
        ctx = self.make_context({})
        self.assertEqual(determine_dependency_policy(ctx), 'requirements.txt')


class TestDetermineWsgi(PythonPlannerTestCase):
    """Test cases for the web application reference."""

    def test_django_wsgi_module(self) -> None:
        """Test Django reference from <dir>/wsgi.py."""
        ctx = self.make_context({
            'requirements.txt': 'django\n',
            'manage.py': '',
            'mysite/wsgi.py': 'application = None\n',
            'static/style.css': '',
        })
        self.assertEqual(determine_wsgi(ctx), 'mysite.wsgi')

    def test_django_without_wsgi(self) -> None:
        """Test that Django without a wsgi.py has no reference."""
        ctx = self.make_context({'requirements.txt': 'django\n', 'mysite/settings.py': ''})
        self.assertEqual(determine_wsgi(ctx), '')

    def test_flask_app_assignment(self) -> None:
        """Test Flask reference from the entry file."""
        ctx = self.make_context({
            'requirements.txt': 'Flask==2.0\n',
            'app.py': 'from flask import Flask\n\nserver = Flask(__name__)\n',
        })
        self.assertEqual(determine_wsgi(ctx), 'app:server')

    def test_first_assignment_wins(self) -> None:
        """Test that the first matching assignment is used."""
        ctx = self.make_context({
            'requirements.txt': 'flask\n',
            'main.py': 'app = Flask(__name__)\nother = Flask("other")\n',
        })
        self.assertEqual(determine_wsgi(ctx), 'main:app')

    def test_fastapi_app_assignment(self) -> None:
        """Test FastAPI reference from the entry file."""
        ctx = self.make_context({
            'requirements.txt': 'fastapi\n',
            'main.py': 'from fastapi import FastAPI\napp = FastAPI(title="api")\n',
        })
        self.assertEqual(determine_wsgi(ctx), 'main:app')

    def test_missing_entry_file(self) -> None:
        """Test that an unreadable entry file gives no reference."""
        ctx = self.make_context({'requirements.txt': 'flask\n'})
        self.assertEqual(determine_wsgi(ctx), '')

    def test_aliased_import_is_not_detected(self) -> None:
        """Test the documented false negative for aliased constructors."""
        ctx = self.make_context({
            'requirements.txt': 'flask\n',
            'app.py': 'from flask import Flask as F\napp = F(__name__)\n',
        })
        self.assertEqual(determine_wsgi(ctx), '')


class TestMemoization(PythonPlannerTestCase):
    """Test cases for per-context memoization."""

    def test_facts_probe_once(self) -> None:
        """Test that repeated calls do not touch the source again."""
        create_test_repo(self.repo_path, {
            'requirements.txt': 'flask\n',
            'app.py': 'app = Flask(__name__)\n',
        })
        src = CountingSource(self.repo_path)
        ctx = PythonPlanContext(src=src)

        for determine in (determine_framework, determine_entry, determine_dependency_policy, determine_wsgi):
            first = determine(ctx)
            calls = len(src.calls)
            second = determine(ctx)
            self.assertEqual(first, second)
            self.assertEqual(len(src.calls), calls, determine.__name__)

    def test_empty_reference_is_memoized(self) -> None:
        """Test that an empty reference is cached like any other value."""
        create_test_repo(self.repo_path, {'requirements.txt': 'django\n'})
        src = CountingSource(self.repo_path)
        ctx = PythonPlanContext(src=src)

        self.assertEqual(determine_wsgi(ctx), '')
        calls = len(src.calls)
        self.assertEqual(determine_wsgi(ctx), '')
        self.assertEqual(len(src.calls), calls)


class TestHasDependency(PythonPlannerTestCase):
    """Test cases for the dependency presence probe."""

    def test_found_in_lock_file(self) -> None:
        """Test that lock files are scanned."""
        create_test_repo(self.repo_path, {'poetry.lock': 'name = "psycopg2-binary"\n'})
        self.assertTrue(has_dependency(LocalSource(self.repo_path), 'psycopg2'))

    def test_any_of_several_names(self) -> None:
        """Test that any supplied name is enough."""
        create_test_repo(self.repo_path, {'Pipfile': 'mysqlclient = "*"\n'})
        self.assertTrue(has_dependency(LocalSource(self.repo_path), 'psycopg2', 'mysqlclient'))

    def test_no_files(self) -> None:
        """Test that a project without manifests has no dependencies."""
        self.assertFalse(has_dependency(LocalSource(self.repo_path), 'psycopg2'))

    def test_name_absent(self) -> None:
        """Test that manifests without the name report False."""
        create_test_repo(self.repo_path, {
            'requirements.txt': 'flask\n',
            'pyproject.toml': '[tool.poetry]\n',
        })
        self.assertFalse(has_dependency(LocalSource(self.repo_path), 'mysqlclient'))


class TestCommands(PythonPlannerTestCase):
    """Test cases for the install/start decision tables."""

    def test_fastapi_without_reference_installs_uvicorn(self) -> None:
        """Test FastAPI fallback when the app object is not found."""
        ctx = self.make_context({'requirements.txt': 'fastapi\n', 'main.py': 'print("hi")\n'})
        self.assertEqual(determine_install_command(ctx), 'pip install -r requirements.txt && pip install uvicorn')
        self.assertEqual(determine_start_command(ctx), 'python main.py')

    def test_fastapi_with_reference_uses_uvicorn(self) -> None:
        """Test the ASGI start command."""
        ctx = self.make_context({'requirements.txt': 'fastapi\n', 'main.py': 'app = FastAPI()\n'})
        self.assertEqual(determine_start_command(ctx), 'uvicorn main:app --host 0.0.0.0 --port 8080')

    def test_pipfile(self) -> None:
        """Test Pipfile projects install with pipenv."""
        ctx = self.make_context({'Pipfile': '[packages]\n'})
        self.assertEqual(determine_install_command(ctx), 'pipenv install')

    def test_pyproject(self) -> None:
        """Test pyproject.toml projects install with poetry."""
        ctx = self.make_context({'pyproject.toml': '[tool.poetry]\n', 'main.py': ''})
        self.assertEqual(determine_install_command(ctx), 'poetry install')

    def test_django_with_pipfile_and_requirements(self) -> None:
        """Test Django install adds gunicorn."""
        ctx = self.make_context({
            'requirements.txt': 'Django\n',
            'Pipfile': '',
            'mysite/wsgi.py': '',
        })
        self.assertEqual(determine_install_command(ctx), 'pip install -r requirements.txt && pip install gunicorn')
        self.assertEqual(determine_start_command(ctx), 'gunicorn --bind :8080 mysite.wsgi')

    def test_first_matching_driver_wins(self) -> None:
        """Test that MySQL packages take precedence over PostgreSQL ones."""
        ctx = self.make_context({'requirements.txt': 'mysqlclient\npsycopg2\n'})
        self.assertEqual(determine_apt_dependencies(ctx), ['libmariadb-dev', 'build-essential'])
        self.assertEqual(get_meta(ctx.src)['apt-deps'], 'libmariadb-dev build-essential')


class TestGetMeta(PythonPlannerTestCase):
    """End-to-end planning scenarios."""

    def test_flask_project(self) -> None:
        """Test a Flask project with its app object in app.py."""
        create_test_repo(self.repo_path, {
            'requirements.txt': 'Flask==2.0\n',
            'app.py': 'from flask import Flask\napp = Flask(__name__)\n',
        })
        meta = get_meta(LocalSource(self.repo_path))

        self.assertEqual(meta, {
            'framework': 'flask',
            'install': 'pip install -r requirements.txt && pip install gunicorn',
            'start': 'gunicorn --bind :8080 app:app',
        })

    def test_symlinked_requirements(self) -> None:
        """Test a monorepo app whose requirements.txt links to a shared file."""
        shared = Path(self._tmp.name) / 'shared'
        create_test_repo(shared, {'requirements.txt': 'Flask==2.0\n'})
        app_path = create_test_repo(Path(self._tmp.name) / 'app', {
            'app.py': 'from flask import Flask\napp = Flask(__name__)\n',
        })
        (app_path / 'requirements.txt').symlink_to(shared / 'requirements.txt')

        meta = get_meta(LocalSource(app_path))

        self.assertEqual(meta['framework'], 'flask')
        self.assertEqual(meta['start'], 'gunicorn --bind :8080 app:app')

    def test_empty_project(self) -> None:
        """Test a project with no manifest and no entry candidates."""
        meta = get_meta(LocalSource(self.repo_path))

        self.assertEqual(meta, {
            'install': 'echo "skip install"',
            'start': 'python main.py',
        })

    def test_postgres_project(self) -> None:
        """Test that apt-deps is set for database drivers."""
        create_test_repo(self.repo_path, {
            'requirements.txt': 'psycopg2==2.9\n',
            'main.py': '',
        })
        meta = get_meta(LocalSource(self.repo_path))

        self.assertEqual(meta['apt-deps'], 'libpq-dev')
        self.assertNotIn('framework', meta)


class TestPythonPlannerDetect(PythonPlannerTestCase):
    """Test cases for Python project detection."""

    def test_detects_manifest(self) -> None:
        """Test detection from a dependency manifest."""
        create_test_repo(self.repo_path, {'pyproject.toml': ''})
        self.assertTrue(PythonPlanner().detect(LocalSource(self.repo_path)))

    def test_detects_root_script(self) -> None:
        """Test detection from a Python file at the root."""
        create_test_repo(self.repo_path, {'bot.py': ''})
        self.assertTrue(PythonPlanner().detect(LocalSource(self.repo_path)))

    def test_ignores_other_projects(self) -> None:
        """Test that non-Python projects are not claimed."""
        create_test_repo(self.repo_path, {'index.html': '', 'scripts/build.py': ''})
        self.assertFalse(PythonPlanner().detect(LocalSource(self.repo_path)))
