"""Preset mining from example workflows.

Example files are written for people: narrative comments explain each
scenario, and ready-to-uncomment job snippets show how to call the
template. A typical file looks like::

    # Deploy to AWS
    # aws-deploy:
    #   uses: udx/reusable-workflows/.github/workflows/docker-ops.yml@master
    #   with:
    #     region: us-east-1

Mining works in five steps:

    1. Uncomment structural lines (``key:``, ``key: value``, ``- item``)
       while leaving prose comments alone.
    2. Find anchor lines containing ``<template>.yml@``.
    3. Backtrack from each anchor to the job key that owns it.
    4. Collect the job's indented block and parse it as YAML.
    5. Keep jobs whose ``uses`` names the template, deduplicated by name.

Any block that fails along the way is dropped without affecting the others.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

from reusable_workflows.errors import AssetParseError
from reusable_workflows.types import Preset
from reusable_workflows.yaml_io import load_yaml

logger = logging.getLogger(__name__)

_COMMENT = re.compile(r"^(\s*)#(.*)$")
_MAPPING_KEY = re.compile(r"^[\w.-]+:(?:\s.*)?$")
_SEQUENCE_ITEM = re.compile(r"^-(?:\s.*)?$")
_BARE_KEY = re.compile(r"^(\s*)([\w-]+):\s*$")

DEFAULT_ACRONYMS = frozenset(
    {
        "ACR", "AKS", "API", "AWS", "CDN", "ECR", "ECS", "EKS",
        "GAR", "GCP", "GCR", "GCS", "GKE", "HTTP", "K8S", "NPM", "SSH",
    }
)


# =============================================================================
# Line classification
# =============================================================================


def indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def is_structural(content: str) -> bool:
    """Check whether text reads as a YAML mapping key or sequence item."""
    content = content.strip()
    return bool(_MAPPING_KEY.match(content) or _SEQUENCE_ITEM.match(content))


def uncomment_line(line: str) -> str:
    """Uncomment a structural comment line, keeping its indentation.

    Prose comments and ordinary lines come back unchanged. An empty comment
    (a lone ``#``) becomes a blank line, and an indented comment inside a
    commented snippet becomes an ordinary indented comment.
    """
    match = _COMMENT.match(line)
    if not match:
        return line

    leading, rest = match.groups()
    content = rest[1:] if rest.startswith(" ") else rest
    if not content.strip():
        return ""
    if is_structural(content) or _is_nested_comment(content):
        return leading + content.rstrip()
    return line


def _is_nested_comment(content: str) -> bool:
    # "#   # note" inside a commented snippet keeps its place in the block
    return content[:1].isspace() and content.lstrip().startswith("#")


def normalize_lines(text: str) -> list[str]:
    return [uncomment_line(line) for line in text.splitlines()]


# =============================================================================
# Job-boundary backtracking
# =============================================================================


class ScanState(Enum):
    """States of the backward scan for an anchor's owning job key."""

    SEEKING_KEY = "seeking_key"
    FOUND = "found"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ScanResult:
    """Outcome of a backward scan."""

    state: ScanState
    job_id: str | None = None
    start: int = -1
    indent: int = -1


def find_owning_job(lines: Sequence[str], anchor: int) -> ScanResult:
    """Scan backward from an anchor line for the job key that owns it.

    The owning key is the nearest bare ``key:`` line above the anchor with a
    strictly smaller indentation. The scan aborts on unindented prose, which
    marks the end of the snippet the anchor belongs to.

    Args:
        lines: Normalized lines of the example file.
        anchor: Index of the anchor line.

    Returns:
        ``FOUND`` with the job key, start index and indentation, or
        ``ABORTED`` when no owning key exists.
    """
    anchor_indent = indent_of(lines[anchor])
    state = ScanState.SEEKING_KEY
    index = anchor - 1

    while state is ScanState.SEEKING_KEY:
        if index < 0:
            state = ScanState.ABORTED
            break

        line = lines[index]
        match = _BARE_KEY.match(line)
        if match and len(match.group(1)) < anchor_indent:
            return ScanResult(ScanState.FOUND, match.group(2), index, len(match.group(1)))

        if line.strip() and indent_of(line) == 0 and not is_structural(line):
            state = ScanState.ABORTED
            break

        index -= 1

    return ScanResult(state)


def collect_block(lines: Sequence[str], start: int, indent: int) -> list[str]:
    """Collect a job key line and every line nested under it.

    Blank lines are kept while the block continues; trailing blanks are
    dropped.
    """
    block = [lines[start]]
    for line in lines[start + 1:]:
        if not line.strip():
            block.append("")
            continue
        if indent_of(line) > indent:
            block.append(line)
        else:
            break

    while block and not block[-1].strip():
        block.pop()
    return block


# =============================================================================
# Preset naming
# =============================================================================


def format_preset_name(job_id: str, acronyms: Iterable[str] = DEFAULT_ACRONYMS) -> str:
    """Turn a job key into a display name.

    ``"aws-deploy"`` becomes ``"AWS Deploy"``; ``"build_and_push"`` becomes
    ``"Build And Push"``.
    """
    known = {a.upper() for a in acronyms}
    words = []
    for word in re.split(r"[-_]", job_id):
        if not word:
            continue
        if word.upper() in known:
            words.append(word.upper())
        else:
            words.append(word[0].upper() + word[1:])
    return " ".join(words)


def dedupe_presets(presets: Iterable[Preset]) -> list[Preset]:
    """Keep the first preset of each name, in order."""
    seen: set[str] = set()
    result = []
    for preset in presets:
        if preset.name not in seen:
            seen.add(preset.name)
            result.append(preset)
    return result


# =============================================================================
# Miner
# =============================================================================


class PresetMiner:
    """Recovers presets from commented usage blocks in an example file."""

    def __init__(self, acronyms: Iterable[str] = DEFAULT_ACRONYMS) -> None:
        self.acronyms = frozenset(a.upper() for a in acronyms)

    def extract_presets(self, text: str, template_id: str) -> list[Preset]:
        """Extract presets for a template from example text.

        Never raises on malformed content; blocks that cannot be recovered
        are skipped.

        Args:
            text: Example file contents.
            template_id: Template the usage blocks must reference.

        Returns:
            Presets in order of appearance, deduplicated by name.
        """
        lines = normalize_lines(text)
        anchor_marker = f"{template_id}.yml@"
        presets = []

        for index, line in enumerate(lines):
            if anchor_marker not in line:
                continue

            scan = find_owning_job(lines, index)
            if scan.state is not ScanState.FOUND:
                continue

            block = collect_block(lines, scan.start, scan.indent)
            preset = self._parse_block(block, scan.job_id, scan.indent, template_id)
            if preset is not None:
                presets.append(preset)

        return dedupe_presets(presets)

    def _parse_block(
        self,
        block: list[str],
        job_id: str,
        indent: int,
        template_id: str,
    ) -> Preset | None:
        # Dedent so a nested job parses as a top-level mapping
        text = "\n".join(line[indent:] if line.strip() else "" for line in block)
        try:
            data = load_yaml(text)
        except AssetParseError:
            logger.debug("Discarded unparsable block for job %s", job_id)
            return None

        job: Any = data.get(job_id) if isinstance(data, dict) else None
        if not isinstance(job, dict):
            return None

        uses = job.get("uses")
        if not isinstance(uses, str) or template_id not in uses:
            return None

        values = job.get("with")
        secrets = job.get("secrets")
        return Preset(
            id=job_id,
            name=format_preset_name(job_id, self.acronyms),
            values=dict(values) if isinstance(values, dict) else {},
            secret_values=dict(secrets) if isinstance(secrets, dict) else {},
        )


def extract_presets(text: str, template_id: str) -> list[Preset]:
    """Extract presets with the default acronym list."""
    return PresetMiner().extract_presets(text, template_id)
