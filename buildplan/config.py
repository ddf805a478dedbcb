"""Project configuration loaded from buildplan.json."""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Self

from .errors import ConfigurationError
from .source import SourceAccessor
from .types import PlanMeta, PlanType

CONFIG_FILENAME = 'buildplan.json'


class Config:
    """Validated project configuration.

    Every key is optional; an empty configuration leaves detection and
    the generator defaults untouched.
    """

    # Configuration schema for validation
    CONFIG_SCHEMA = {
        'plan_type': {'type': str, 'required': False, 'choices': [t.value for t in PlanType]},
        'output': {'type': str, 'required': False, 'default': 'Dockerfile'},
        'meta': {'type': dict, 'required': False, 'validator': 'validate_meta', 'default': {}},
    }

    def __init__(self: Self, data: Optional[Dict[str, Any]] = None) -> None:
        """Initialize configuration from already-parsed data.

        Args:
            data: Parsed buildplan.json contents.

        Raises:
            ConfigurationError: If the data does not match the schema.
        """
        data = data or {}
        self._validate_config_schema(data)
        self.data = data

    @classmethod
    def from_source(cls, src: SourceAccessor, filename: str = CONFIG_FILENAME) -> 'Config':
        """Load the configuration file from the project, if it has one."""
        content = src.read_text(filename)
        if content is None:
            return cls()
        return cls(cls._parse(content, filename))

    @classmethod
    def from_path(cls, path: Path) -> 'Config':
        """Load configuration from an explicit file path."""
        try:
            content = Path(path).read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read configuration file {path}: {e}",
                ["Check that the --config path exists and is readable"]
            ) from e
        return cls(cls._parse(content, str(path)))

    @staticmethod
    def _parse(content: str, name: str) -> Dict[str, Any]:
        try:
            data = json.loads(content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid JSON in {name}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{name} must contain a JSON object",
                ['Wrap the settings in braces, e.g. {"plan_type": "python"}']
            )
        return data

    def _validate_config_schema(self: Self, config: Dict[str, Any]) -> None:
        """Validate configuration against schema.

        Args:
            config: Configuration dictionary to validate.

        Raises:
            ConfigurationError: If validation fails.
        """
        errors = []

        unknown = sorted(set(config) - set(self.CONFIG_SCHEMA))
        if unknown:
            errors.append(f"Unknown field(s): {', '.join(unknown)}")

        for key, schema in self.CONFIG_SCHEMA.items():
            value = config.get(key)

            if schema['required'] and value is None:
                errors.append(f"Required field '{key}' is missing")
                continue

            if value is None:
                continue

            if not isinstance(value, schema['type']):
                errors.append(f"Field '{key}' must be of type {schema['type'].__name__}")
                continue

            if 'choices' in schema and value not in schema['choices']:
                errors.append(f"Field '{key}' must be one of: {', '.join(schema['choices'])}")

            if 'validator' in schema:
                validator = getattr(self, schema['validator'])
                if not validator(value):
                    errors.append(f"Field '{key}' failed validation")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                [f"Allowed fields: {', '.join(self.CONFIG_SCHEMA)}"]
            )

    def validate_meta(self: Self, meta: Dict[str, Any]) -> bool:
        """Plan metadata overrides must map strings to strings."""
        return all(isinstance(key, str) and isinstance(value, str) for key, value in meta.items())

    def get(self: Self, key: str, default: Any = None) -> Any:
        """Get a configuration value, falling back to the schema default."""
        if key in self.data:
            return self.data[key]
        return self.CONFIG_SCHEMA.get(key, {}).get('default', default)

    @property
    def plan_type(self: Self) -> Optional[PlanType]:
        value = self.get('plan_type')
        return PlanType(value) if value else None

    @property
    def output(self: Self) -> str:
        return self.get('output')

    @property
    def meta_overrides(self: Self) -> PlanMeta:
        return dict(self.get('meta'))

    def apply(self: Self, meta: PlanMeta) -> PlanMeta:
        """Return the plan metadata with configured overrides merged in."""
        merged = dict(meta)
        merged.update(self.meta_overrides)
        return merged
