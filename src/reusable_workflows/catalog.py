"""Template catalog.

A catalog is a directory holding, for every template id ``T``::

    .github/workflows/T.yml   reusable workflow (declares inputs and secrets)
    docs/T.md                 documentation
    examples/T.yml            example caller, with commented usage scenarios

Templates missing an asset, or whose workflow does not parse or is not
callable (no ``on.workflow_call``), are skipped with a warning.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any

from reusable_workflows.config import GeneratorConfig
from reusable_workflows.errors import (
    AssetMissingError,
    AssetParseError,
    CatalogError,
    PresetNotFoundError,
    TemplateNotFoundError,
)
from reusable_workflows.grouping import PrefixGrouper
from reusable_workflows.presets import PresetMiner
from reusable_workflows.schema import load_schema, workflow_call
from reusable_workflows.types import FieldSpec, Group, Preset, SecretSpec
from reusable_workflows.yaml_io import read_yaml_file

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Reusable workflow template"
MAX_DESCRIPTION_LENGTH = 60


class _NotCallable(Exception):
    """A workflow file that is not a reusable (``workflow_call``) workflow."""


def _normalize_query(value: str) -> str:
    return re.sub(r"[-_]", " ", value.lower()).strip()


@dataclass
class Template:
    """A reusable workflow together with its docs and example.

    Presets and groups are derived on first access and cached.
    """

    id: str
    display_name: str
    short_description: str
    workflow_path: Path
    docs_path: Path
    example_path: Path
    schema: dict[str, FieldSpec] = field(default_factory=dict)
    secret_schema: dict[str, SecretSpec] = field(default_factory=dict)
    base_triggers: Any = field(default_factory=dict)
    permissions: Any = field(default_factory=dict)
    config: GeneratorConfig = field(default_factory=GeneratorConfig, repr=False)

    @cached_property
    def presets(self) -> list[Preset]:
        try:
            text = self.example_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", self.example_path, e)
            return []
        return PresetMiner(self.config.acronyms).extract_presets(text, self.id)

    @cached_property
    def grouper(self) -> PrefixGrouper:
        return PrefixGrouper(self.config.prefix_pattern)

    @cached_property
    def groups(self) -> dict[str, Group]:
        return self.grouper.group(self.schema)

    @property
    def all_fields(self) -> dict[str, FieldSpec]:
        """Inputs and secrets together, secrets taking precedence."""
        return {**self.schema, **self.secret_schema}

    @property
    def required_fields(self) -> list[str]:
        return [name for name, spec in self.all_fields.items() if spec.required]

    def is_secret(self, name: str) -> bool:
        return name in self.secret_schema

    def find_preset(self, query: str) -> Preset:
        """Find a preset by exact id or by fuzzy match on id or name.

        The fuzzy match ignores case and treats ``-``/``_`` as spaces.

        Raises:
            PresetNotFoundError: If nothing matches.
        """
        for preset in self.presets:
            if preset.id == query:
                return preset

        search = _normalize_query(query)
        if search:
            for preset in self.presets:
                if search in _normalize_query(preset.id) or search in _normalize_query(preset.name):
                    return preset

        raise PresetNotFoundError(query, self.id)


class TemplateCatalog:
    """Loads and indexes the templates of a catalog directory."""

    def __init__(self, root: Path | str, config: GeneratorConfig | None = None) -> None:
        self.root = Path(root)
        self.config = config or GeneratorConfig()
        self._templates: dict[str, Template] | None = None

    @property
    def workflows_dir(self) -> Path:
        return self.root / self.config.components.workflow.dir

    def _asset_path(self, kind: str, template_id: str) -> Path:
        spec = getattr(self.config.components, kind)
        return self.root / spec.dir / f"{template_id}{spec.ext}"

    def load(self) -> list[Template]:
        """Load every complete template.

        Raises:
            CatalogError: If the workflows directory is missing or no
                template is usable.
        """
        if not self.workflows_dir.is_dir():
            raise CatalogError(f"Workflows directory not found: {self.workflows_dir}", self.workflows_dir)

        ext = self.config.components.workflow.ext
        files = sorted(
            path
            for path in self.workflows_dir.iterdir()
            if path.is_file() and path.name.endswith(ext) and not path.name.startswith("_")
        )

        templates: dict[str, Template] = {}
        for path in files:
            template_id = path.name[: -len(ext)]
            try:
                templates[template_id] = self._load_template(template_id, path)
            except AssetMissingError as e:
                logger.warning(e.message)
            except AssetParseError as e:
                logger.warning("Could not parse %s: %s", path.name, e.message)
            except _NotCallable:
                logger.warning("Skipping %s: not a reusable workflow", path.name)

        if not templates:
            raise CatalogError(
                "No valid templates found. Each template requires: workflow.yml + docs.md + example.yml",
                self.root,
            )

        self._templates = templates
        return list(templates.values())

    @property
    def templates(self) -> dict[str, Template]:
        if self._templates is None:
            self.load()
        assert self._templates is not None
        return self._templates

    def get(self, template_id: str) -> Template:
        """Return a template by id.

        Raises:
            TemplateNotFoundError: If the id is not in the catalog.
        """
        try:
            return self.templates[template_id]
        except KeyError:
            raise TemplateNotFoundError(template_id, sorted(self.templates)) from None

    def __iter__(self):
        return iter(self.templates.values())

    def __len__(self) -> int:
        return len(self.templates)

    def _load_template(self, template_id: str, workflow_path: Path) -> Template:
        docs_path = self._asset_path("docs", template_id)
        example_path = self._asset_path("example", template_id)

        for path in (docs_path, example_path):
            if not path.is_file():
                raise AssetMissingError(template_id, path.relative_to(self.root))

        workflow = read_yaml_file(workflow_path)
        if workflow_call(workflow) is None:
            raise _NotCallable(template_id)

        schema, secret_schema = load_schema(workflow)
        triggers, permissions = self._example_structure(example_path)

        return Template(
            id=template_id,
            display_name=str(workflow.get("name") or template_id),
            short_description=self._short_description(docs_path),
            workflow_path=workflow_path,
            docs_path=docs_path,
            example_path=example_path,
            schema=schema,
            secret_schema=secret_schema,
            base_triggers=triggers,
            permissions=permissions,
            config=self.config,
        )

    def _example_structure(self, example_path: Path) -> tuple[Any, Any]:
        """Triggers and permissions declared by the example, or the defaults.

        Any form GitHub accepts is kept as written: ``on: push``,
        ``on: [push, pull_request]``, a mapping, or ``permissions: read-all``.
        """
        try:
            example = read_yaml_file(example_path)
        except AssetParseError as e:
            logger.debug("Using default triggers for %s: %s", example_path.name, e.message)
            example = None

        triggers = self.config.default_triggers
        permissions = self.config.default_permissions
        if isinstance(example, dict):
            if example.get("on") is not None:
                triggers = example["on"]
            if example.get("permissions") is not None:
                permissions = example["permissions"]
        return copy.deepcopy(triggers), copy.deepcopy(permissions)

    def _short_description(self, docs_path: Path) -> str:
        try:
            content = docs_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return DEFAULT_DESCRIPTION

        match = self.config.short_description_pattern.search(content)
        if match:
            return match.group(1).strip()

        found_title = False
        for line in content.splitlines():
            if line.startswith("# "):
                found_title = True
                continue
            if found_title and line.strip() and not line.startswith(("#", "```", "<!--")):
                desc = line.strip()
                if len(desc) > MAX_DESCRIPTION_LENGTH:
                    return desc[: MAX_DESCRIPTION_LENGTH - 3] + "..."
                return desc
        return DEFAULT_DESCRIPTION


def load_templates(root: Path | str, config: GeneratorConfig | None = None) -> list[Template]:
    """Load all templates of a catalog directory."""
    return TemplateCatalog(root, config).load()
