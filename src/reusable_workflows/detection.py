"""Detection of existing template usage in a target repository.

When a repository already calls a template from one of its workflows, the
``with`` values of that call make good defaults for regenerating it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from reusable_workflows.errors import AssetParseError
from reusable_workflows.yaml_io import read_yaml_file

logger = logging.getLogger(__name__)

MANIFEST_SUFFIXES = (".yml", ".yaml")


class ConfigDetector:
    """Scans a workflow directory for jobs that call a given template."""

    def __init__(self, suffixes: tuple[str, ...] = MANIFEST_SUFFIXES) -> None:
        self.suffixes = suffixes

    def _manifest_files(self, workflow_dir: Path) -> list[Path]:
        return sorted(
            path
            for path in workflow_dir.iterdir()
            if path.is_file() and path.suffix in self.suffixes
        )

    def detect(self, workflow_dir: Path | str, template_id: str) -> dict[str, Any]:
        """Collect ``with`` values from existing calls to a template.

        Files are read in name order. Within a file the first matching job
        is used; a later file overwrites values found in an earlier one.

        Args:
            workflow_dir: Directory holding the target's workflow files.
            template_id: Template to look for.

        Returns:
            Detected values, empty when the directory is missing, empty, or
            holds no call to the template.
        """
        workflow_dir = Path(workflow_dir)
        if not workflow_dir.is_dir():
            return {}

        try:
            files = self._manifest_files(workflow_dir)
        except OSError as e:
            logger.warning("Could not list %s: %s", workflow_dir, e)
            return {}

        marker = f"{template_id}.yml"
        detected: dict[str, Any] = {}

        for path in files:
            try:
                manifest = read_yaml_file(path)
            except AssetParseError as e:
                logger.debug("Skipping %s: %s", path.name, e.message)
                continue

            if not isinstance(manifest, dict):
                continue
            jobs = manifest.get("jobs")
            if not isinstance(jobs, dict):
                continue

            for job in jobs.values():
                if not isinstance(job, dict):
                    continue
                uses = job.get("uses")
                if isinstance(uses, str) and marker in uses:
                    values = job.get("with")
                    if isinstance(values, dict):
                        detected.update(values)
                    logger.debug("Detected %s usage in %s", template_id, path.name)
                    break

        return detected


def detect_existing_config(workflow_dir: Path | str, template_id: str) -> dict[str, Any]:
    """Detect values with a default detector."""
    return ConfigDetector().detect(workflow_dir, template_id)
