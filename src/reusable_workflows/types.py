"""Core data types shared by the loader, miners and synthesizer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

COMMON_GROUP = "common"


@dataclass(frozen=True)
class FieldSpec:
    """A declared workflow input.

    The default keeps the type it was declared with, so a boolean input
    stays a boolean when it reaches the manifest.
    """

    name: str
    description: str = ""
    required: bool = False
    default: Any = None
    type: str = "string"

    @classmethod
    def from_dict(cls, name: str, data: Any) -> FieldSpec:
        data = data if isinstance(data, dict) else {}
        return cls(
            name=name,
            description=str(data.get("description") or ""),
            required=bool(data.get("required", False)),
            default=data.get("default"),
            type=str(data.get("type", "string")),
        )


@dataclass(frozen=True)
class SecretSpec(FieldSpec):
    """A declared workflow secret."""


@dataclass
class Group:
    """Fields sharing a description label, e.g. ``"Docker Hub: ..."``."""

    key: str
    label: str
    fields: list[FieldSpec] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def has_required(self) -> bool:
        return any(f.required for f in self.fields)


@dataclass(frozen=True)
class Preset:
    """A usage scenario recovered from a template's example file.

    Attributes:
        id: Job key the scenario was found under.
        name: Human-readable form of the id.
        values: The job's ``with`` mapping.
        secret_values: The job's ``secrets`` mapping.
    """

    id: str
    name: str
    values: dict[str, Any] = field(default_factory=dict)
    secret_values: dict[str, Any] = field(default_factory=dict)

    def answers(self) -> dict[str, Any]:
        """Values and secret values as one answer mapping."""
        return {**self.values, **self.secret_values}
