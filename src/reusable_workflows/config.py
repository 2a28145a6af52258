"""Generator configuration.

Configuration is layered, lowest priority first:

    built-in defaults  <  YAML file  <  environment variables

Environment variables use the ``REUSABLE_WORKFLOWS_`` prefix and map onto
top-level keys, e.g. ``REUSABLE_WORKFLOWS_DEFAULT_REF=v2`` or
``REUSABLE_WORKFLOWS_ORG=acme``.

Usage:
    >>> from reusable_workflows.config import load_config
    >>> config = load_config("generator.yaml")
    >>> config.components.workflow.dir
    '.github/workflows'
"""

from __future__ import annotations

import copy
import json
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from reusable_workflows.errors import AssetParseError, ConfigurationError
from reusable_workflows.presets import DEFAULT_ACRONYMS
from reusable_workflows.yaml_io import read_yaml_file

ENV_PREFIX = "REUSABLE_WORKFLOWS"


@dataclass(frozen=True)
class ComponentSpec:
    """Location of one template asset kind inside a catalog."""

    dir: str
    ext: str


@dataclass(frozen=True)
class Components:
    """The three assets every template must provide."""

    workflow: ComponentSpec = ComponentSpec(".github/workflows", ".yml")
    docs: ComponentSpec = ComponentSpec("docs", ".md")
    example: ComponentSpec = ComponentSpec("examples", ".yml")


def _default_permissions() -> dict[str, Any]:
    return {"contents": "write", "id-token": "write"}


def _default_triggers() -> dict[str, Any]:
    return {"push": {"branches": ["main"]}, "workflow_dispatch": None}


def _default_acronyms() -> list[str]:
    return sorted(DEFAULT_ACRONYMS)


@dataclass
class GeneratorConfig:
    """Settings shared by the catalog, miners and synthesizer.

    Attributes:
        components: Asset directories and extensions.
        docs_short_description: Marker holding a template's one-line summary.
        input_prefix_pattern: Label convention used to group input fields.
        org: Owner of the reusable workflows repository.
        repo: Name of the reusable workflows repository.
        job_name: Name of the single job in generated manifests.
        default_ref: Ref pinned in ``uses`` when none is given.
        default_permissions: Permissions used when the example declares none.
        default_triggers: Triggers used when the example declares none.
        acronyms: Words kept uppercase in preset names.
        box_width: Width of section rules in the terminal.
    """

    components: Components = field(default_factory=Components)
    docs_short_description: str = r"<!--\s*short:\s*(.+?)\s*-->"
    input_prefix_pattern: str = r"^([A-Z][A-Za-z\s]+):\s"
    org: str = "udx"
    repo: str = "reusable-workflows"
    job_name: str = "release"
    default_ref: str = "master"
    default_permissions: dict[str, Any] = field(default_factory=_default_permissions)
    default_triggers: dict[str, Any] = field(default_factory=_default_triggers)
    acronyms: list[str] = field(default_factory=_default_acronyms)
    box_width: int = 50

    def __post_init__(self) -> None:
        for name in ("docs_short_description", "input_prefix_pattern"):
            try:
                re.compile(getattr(self, name))
            except re.error as e:
                raise ConfigurationError(f"Invalid pattern for {name}: {e}") from e

    @property
    def prefix_pattern(self) -> re.Pattern[str]:
        return re.compile(self.input_prefix_pattern)

    @property
    def short_description_pattern(self) -> re.Pattern[str]:
        return re.compile(self.docs_short_description)

    def uses_reference(self, template_id: str, ref: str) -> str:
        """Build the ``uses`` value pinning a template to a ref."""
        return f"{self.org}/{self.repo}/.github/workflows/{template_id}.yml@{ref}"

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: Path | str | None = None) -> GeneratorConfig:
        """Create a configuration from a mapping of overrides.

        Raises:
            ConfigurationError: On unknown keys or malformed components.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                config_path=source,
            )

        values = dict(data)
        if "components" in values:
            values["components"] = _parse_components(values["components"], source)
        return cls(**values)


def _parse_components(data: Any, source: Path | str | None) -> Components:
    if isinstance(data, Components):
        return data
    if not isinstance(data, dict):
        raise ConfigurationError("'components' must be a mapping", config_path=source)

    defaults = Components()
    parts: dict[str, ComponentSpec] = {}
    for kind in ("workflow", "docs", "example"):
        spec = data.get(kind, {})
        if not isinstance(spec, dict):
            raise ConfigurationError(
                f"'components.{kind}' must be a mapping", config_path=source
            )
        base = getattr(defaults, kind)
        parts[kind] = ComponentSpec(
            dir=str(spec.get("dir", base.dir)),
            ext=str(spec.get("ext", base.ext)),
        )
    return Components(**parts)


def _parse_env_value(value: str) -> Any:
    """Parse an environment string into a typed value."""
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def _env_overrides(prefix: str) -> dict[str, Any]:
    result: dict[str, Any] = {}
    marker = f"{prefix}_"
    defaults = GeneratorConfig()
    known = {f.name for f in fields(GeneratorConfig)}

    for key, value in os.environ.items():
        if not key.startswith(marker):
            continue
        name = key[len(marker):].lower()
        if name not in known:
            continue
        if isinstance(getattr(defaults, name), str):
            result[name] = value
        else:
            result[name] = _parse_env_value(value)
    return result


def load_config(
    path: str | Path | None = None,
    env_prefix: str = ENV_PREFIX,
) -> GeneratorConfig:
    """Load configuration from defaults, an optional YAML file and the environment.

    Args:
        path: Optional YAML file with top-level overrides.
        env_prefix: Prefix of environment variables to read.

    Returns:
        The merged configuration.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid.
    """
    data: dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}", config_path=path)
        try:
            loaded = read_yaml_file(path)
        except AssetParseError as e:
            raise ConfigurationError(e.message, config_path=path) from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError("Configuration root must be a mapping", config_path=path)
        data.update(copy.deepcopy(loaded or {}))

    data.update(_env_overrides(env_prefix))
    return GeneratorConfig.from_dict(data, source=path)
