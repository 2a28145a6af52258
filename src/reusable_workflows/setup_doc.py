"""Setup guide rendering.

The guide tells a repository owner what was generated and what they still
have to configure. Its secrets and permissions sections are copied from the
template's documentation.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Mapping, Sequence

if TYPE_CHECKING:
    from reusable_workflows.catalog import Template

SECRETS_HEADING = re.compile(r"^##\s+(Secrets|Configuration|Inputs)", re.IGNORECASE)
PERMISSIONS_HEADING = re.compile(r"^##\s+Permissions", re.IGNORECASE)
ANY_HEADING = re.compile(r"^##\s+")

SECRET_MASK = "********"


def extract_section(docs: str, heading: re.Pattern[str]) -> str:
    """Return the body of the first ``##`` section matching ``heading``."""
    collected: list[str] = []
    inside = False
    for line in docs.splitlines():
        if not inside:
            inside = bool(heading.match(line))
            continue
        if ANY_HEADING.match(line):
            break
        collected.append(line)
    return "\n".join(collected).strip()


def render_setup_doc(
    template: Template,
    answers: Mapping[str, Any],
    selected_groups: Sequence[str] = (),
    manifest_path: str | None = None,
) -> str:
    """Render the Markdown setup guide for a generated manifest."""
    docs = template.docs_path.read_text(encoding="utf-8")
    location = manifest_path or f"{template.config.components.workflow.dir}/{template.id}.yml"
    docs_link = f"{template.config.components.docs.dir}/{template.id}.md"

    lines = [
        f"# Setup Guide: {template.display_name}",
        "",
        "This guide will help you configure the workflow in your repository.",
        "",
    ]
    sections: list[tuple[str, list[str]]] = []

    sections.append((
        "Workflow File",
        ["The workflow manifest has been generated at:", "```", location, "```"],
    ))

    summary = ["Your configuration:", ""]
    for key, value in answers.items():
        shown = SECRET_MASK if template.is_secret(key) else value
        summary.append(f"- **{key}**: `{shown}`")
    sections.append(("Configuration Summary", summary))

    if selected_groups:
        groups = template.groups
        components = ["You have enabled the following optional components:", ""]
        for key in selected_groups:
            label = groups[key].label if key in groups else key
            components.append(f"- {label}")
        sections.append(("Selected Components", components))

    secrets = extract_section(docs, SECRETS_HEADING)
    sections.append((
        "GitHub Secrets & Variables",
        [
            "Configure the following in your repository settings:",
            "",
            "**Settings → Secrets and variables → Actions**",
            "",
            secrets or "See documentation for required secrets and variables.",
        ],
    ))

    permissions = extract_section(docs, PERMISSIONS_HEADING)
    sections.append((
        "Permissions",
        [
            "Ensure your workflow has the required permissions:",
            "",
            permissions or "See documentation for required permissions.",
        ],
    ))

    sections.append((
        "Complete Documentation",
        [f"For detailed information, see: [`{docs_link}`]({docs_link})"],
    ))

    for number, (title, body) in enumerate(sections, start=1):
        lines.append(f"## {number}. {title}")
        lines.append("")
        lines.extend(body)
        lines.append("")

    return "\n".join(lines)
