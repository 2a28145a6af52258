"""YAML reading and writing for workflow documents.

PyYAML follows YAML 1.1, where ``on``, ``off``, ``yes`` and ``no`` are
booleans. GitHub Actions reads workflows as YAML 1.2, so the loader and
dumper here only treat ``true``/``false`` as booleans. That keeps the
``on:`` trigger key a string on the way in and unquoted on the way out.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from reusable_workflows.errors import AssetParseError

_BOOL_TAG = "tag:yaml.org,2002:bool"
_YAML12_BOOL = re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$")


def _without_yaml11_bools(resolvers: dict[str, list[Any]]) -> dict[str, list[Any]]:
    return {
        first: [(tag, regexp) for tag, regexp in entries if tag != _BOOL_TAG]
        for first, entries in resolvers.items()
    }


class WorkflowLoader(yaml.SafeLoader):
    """Safe loader with YAML 1.2 boolean resolution."""


class WorkflowDumper(yaml.SafeDumper):
    """Safe dumper with YAML 1.2 boolean resolution and no aliases."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


for _cls in (WorkflowLoader, WorkflowDumper):
    _cls.yaml_implicit_resolvers = _without_yaml11_bools(
        yaml.SafeLoader.yaml_implicit_resolvers
    )
    _cls.add_implicit_resolver(_BOOL_TAG, _YAML12_BOOL, list("tTfF"))


def load_yaml(text: str, source: Path | str | None = None) -> Any:
    """Parse YAML text.

    Args:
        text: Document text.
        source: Where the text came from, for error messages.

    Returns:
        Parsed data (``None`` for an empty document).

    Raises:
        AssetParseError: If the text is not valid YAML.
    """
    try:
        return yaml.load(text, Loader=WorkflowLoader)
    except yaml.YAMLError as e:
        where = f" in {source}" if source else ""
        raise AssetParseError(f"Invalid YAML{where}: {e}", path=source) from e


def read_yaml_file(path: Path) -> Any:
    """Read and parse a YAML file.

    Raises:
        AssetParseError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise AssetParseError(f"Could not read {path}: {e}", path=path) from e
    return load_yaml(text, source=path)


def dump_yaml(data: Any) -> str:
    """Serialize data as block-style YAML in insertion order."""
    return yaml.dump(
        data,
        Dumper=WorkflowDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
    )
