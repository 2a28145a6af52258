"""Input grouping by description label.

Inputs whose description starts with a label such as ``"Docker Hub: "`` or
``"GCP: "`` are clustered under that label; everything else lands in the
``common`` group. Labels are discovered from the schema itself, so no
provider names are hard-coded here.
"""

from __future__ import annotations

import re
from typing import Mapping

from reusable_workflows.types import COMMON_GROUP, FieldSpec, Group

DEFAULT_PREFIX_PATTERN = re.compile(r"^([A-Z][A-Za-z\s]+):\s")


def group_key(label: str) -> str:
    """Normalize a label into a group key (``"Docker Hub"`` -> ``"docker-hub"``)."""
    return re.sub(r"\s+", "-", label.strip().lower())


class PrefixGrouper:
    """Clusters schema fields into groups by their description label."""

    def __init__(self, pattern: re.Pattern[str] | str = DEFAULT_PREFIX_PATTERN) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def _label(self, description: str) -> str | None:
        match = self.pattern.match(description or "")
        if match:
            return match.group(1).strip()
        return None

    def group(self, schema: Mapping[str, FieldSpec]) -> dict[str, Group]:
        """Partition fields into groups.

        The ``common`` group always comes first and is always present.
        Other groups follow in the order their label first appears. A label
        such as ``"Common: "`` names the ungrouped bucket itself, so its fields
        stay in ``common`` rather than forming a group of their own.

        Args:
            schema: Field specs keyed by name.

        Returns:
            Groups keyed by normalized label.
        """
        groups: dict[str, Group] = {COMMON_GROUP: Group(COMMON_GROUP, "Common")}
        specs = list(schema.values())

        # First pass: discover labels
        for spec in specs:
            label = self._label(spec.description)
            if label is not None:
                key = group_key(label)
                if key != COMMON_GROUP and key not in groups:
                    groups[key] = Group(key, label)

        # Second pass: assign fields
        for spec in specs:
            label = self._label(spec.description)
            key = group_key(label) if label is not None else COMMON_GROUP
            groups[key].fields.append(spec)

        return groups

    def extract_prompt(self, description: str) -> str:
        """Turn a field description into question text.

        ``"Docker Hub: Username (required)"`` becomes ``"Username"``.
        """
        prompt = description or ""
        match = self.pattern.match(prompt)
        if match:
            prompt = prompt[match.end():].strip()
        return prompt.split("(")[0].strip()
