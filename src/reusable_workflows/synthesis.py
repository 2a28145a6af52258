"""Manifest synthesis.

A generated manifest calls exactly one template::

    name: Docker Ops
    on: {...}            # copied from the template's example
    permissions: {...}   # copied from the template's example
    jobs:
      release:
        uses: udx/reusable-workflows/.github/workflows/docker-ops.yml@master
        with: {...}      # omitted when empty
        secrets: {...}   # omitted when empty

Synthesis is a pure function of ``(template, answers, ref)``: the same
inputs always serialize to the same bytes.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Mapping

from reusable_workflows.answers import AnswerSet
from reusable_workflows.errors import ValidationError
from reusable_workflows.yaml_io import dump_yaml

if TYPE_CHECKING:
    from reusable_workflows.catalog import Template


def _ordered(values: dict[str, Any], order: list[str]) -> dict[str, Any]:
    """Order keys by declaration, then any undeclared keys as given."""
    result = {name: values[name] for name in order if name in values}
    for name, value in values.items():
        if name not in result:
            result[name] = value
    return result


def partition_answers(
    template: Template,
    answers: Mapping[str, Any],
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split answers into ``with`` values and ``secrets`` values.

    A key declared as a secret always goes to secrets. ``None`` values are
    dropped.
    """
    with_values: dict[str, Any] = {}
    secret_values: dict[str, Any] = {}

    for key, value in answers.items():
        if value is None:
            continue
        if template.is_secret(key):
            secret_values[key] = value
        else:
            with_values[key] = value

    return (
        _ordered(with_values, list(template.schema)),
        _ordered(secret_values, list(template.secret_schema)),
    )


def missing_required(template: Template, answers: Mapping[str, Any]) -> list[str]:
    """Required inputs and secrets without a usable value."""
    return AnswerSet(answers).missing(template.required_fields)


class ManifestSynthesizer:
    """Builds caller manifests for templates."""

    def build(
        self,
        template: Template,
        answers: Mapping[str, Any],
        ref: str,
    ) -> dict[str, Any]:
        """Build the manifest structure without serializing it."""
        with_values, secret_values = partition_answers(template, answers)

        job: dict[str, Any] = {"uses": template.config.uses_reference(template.id, ref)}
        if with_values:
            job["with"] = with_values
        if secret_values:
            job["secrets"] = secret_values

        return {
            "name": template.display_name,
            "on": copy.deepcopy(template.base_triggers),
            "permissions": copy.deepcopy(template.permissions),
            "jobs": {template.config.job_name: job},
        }

    def synthesize(
        self,
        template: Template,
        answers: Mapping[str, Any],
        ref: str,
        *,
        validate: bool = True,
    ) -> str:
        """Render the manifest for a template as YAML.

        Args:
            template: Template to call.
            answers: Resolved answers.
            ref: Ref pinned in the ``uses`` reference.
            validate: Check that every required field has a value.

        Returns:
            Manifest YAML.

        Raises:
            ValidationError: If ``validate`` is set and required values are
                missing.
        """
        if validate:
            missing = missing_required(template, answers)
            if missing:
                raise ValidationError(missing, template.id)
        return dump_yaml(self.build(template, answers, ref))


def synthesize(
    template: Template,
    answers: Mapping[str, Any],
    ref: str,
    *,
    validate: bool = True,
) -> str:
    """Render a manifest with the default synthesizer."""
    return ManifestSynthesizer().synthesize(template, answers, ref, validate=validate)
