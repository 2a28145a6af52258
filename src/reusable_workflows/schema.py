"""Reading a template's declared inputs and secrets."""

from __future__ import annotations

from typing import Any

from reusable_workflows.types import FieldSpec, SecretSpec


def workflow_call(workflow: Any) -> dict[str, Any] | None:
    """Return the ``on.workflow_call`` section of a workflow, if declared."""
    if not isinstance(workflow, dict):
        return None
    triggers = workflow.get("on")
    if not isinstance(triggers, dict) or "workflow_call" not in triggers:
        return None
    return triggers.get("workflow_call") or {}


def load_schema(workflow: Any) -> tuple[dict[str, FieldSpec], dict[str, SecretSpec]]:
    """Read field and secret specs from a reusable workflow.

    A name declared both as an input and as a secret is kept as a secret.

    Args:
        workflow: Parsed workflow document.

    Returns:
        ``(fields, secrets)`` keyed by name, in declaration order.
    """
    call = workflow_call(workflow) or {}
    inputs = call.get("inputs") or {}
    secrets = call.get("secrets") or {}
    if not isinstance(inputs, dict):
        inputs = {}
    if not isinstance(secrets, dict):
        secrets = {}

    secret_specs = {
        str(name): SecretSpec.from_dict(str(name), data) for name, data in secrets.items()
    }
    field_specs = {
        str(name): FieldSpec.from_dict(str(name), data)
        for name, data in inputs.items()
        if str(name) not in secret_specs
    }
    return field_specs, secret_specs
