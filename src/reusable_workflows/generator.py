"""Workflow generation.

The generator ties the pieces together for one run:

    1. Pick the template
    2. Detect values from the target's existing workflows
    3. Apply a preset (by query, or chosen interactively)
    4. Ask for the remaining values, group by group
    5. Validate, preview, and write the manifest (and optional setup guide)

Example:
    >>> generator = WorkflowGenerator(TemplateCatalog("catalog"))
    >>> result = generator.run(GenerateOptions(
    ...     template_id="docker-ops",
    ...     target_dir=Path("my-repo"),
    ...     interactive=False,
    ... ))
    >>> result.workflow_file
    PosixPath('my-repo/.github/workflows/docker-ops.yml')
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from reusable_workflows.answers import AnswerSet, is_unset
from reusable_workflows.catalog import Template, TemplateCatalog
from reusable_workflows.detection import MANIFEST_SUFFIXES, ConfigDetector
from reusable_workflows.errors import (
    ErrorCode,
    GeneratorError,
    PresetNotFoundError,
    ValidationError,
)
from reusable_workflows.setup_doc import render_setup_doc
from reusable_workflows.synthesis import ManifestSynthesizer, missing_required
from reusable_workflows.types import COMMON_GROUP, FieldSpec, Group, Preset
from reusable_workflows.ui import Prompter

logger = logging.getLogger(__name__)


@dataclass
class GenerateOptions:
    """Options for one generation run.

    Attributes:
        template_id: Template to generate; asked for when interactive.
        target_dir: Repository receiving the manifest.
        output: Custom manifest file or directory.
        ref: Ref pinned in ``uses``; defaults to the configured ref.
        preset: Preset id or name query.
        answers: Explicit answers, taking precedence over everything else.
        interactive: Ask questions; otherwise use detected values and defaults.
        setup_doc: Write a setup guide; ``None`` asks when interactive.
        dry_run: Build the manifest without writing anything.
    """

    template_id: str | None = None
    target_dir: Path = Path(".")
    output: Path | None = None
    ref: str | None = None
    preset: str | None = None
    answers: dict[str, Any] = field(default_factory=dict)
    interactive: bool = True
    setup_doc: bool | None = None
    dry_run: bool = False


@dataclass
class GenerationResult:
    """Outcome of a generation run."""

    template_id: str
    answers: dict[str, Any] = field(default_factory=dict)
    manifest: str = ""
    detected: dict[str, Any] = field(default_factory=dict)
    preset: Preset | None = None
    selected_groups: list[str] = field(default_factory=list)
    workflow_file: Path | None = None
    setup_file: Path | None = None
    cancelled: bool = False


def resolve_output_path(template_id: str, target_dir: Path, workflow_dir: str, output: Path | None) -> Path:
    """Where the manifest goes.

    A custom output ending in ``.yml``/``.yaml`` is a file; any other custom
    output is a directory receiving ``<id>.yml``.
    """
    if output is None:
        return target_dir / workflow_dir / f"{template_id}.yml"
    if output.suffix in MANIFEST_SUFFIXES:
        return output
    return output / f"{template_id}.yml"


class WorkflowGenerator:
    """Runs the generation flow against a catalog."""

    def __init__(
        self,
        catalog: TemplateCatalog,
        prompter: Prompter | None = None,
        detector: ConfigDetector | None = None,
        synthesizer: ManifestSynthesizer | None = None,
    ) -> None:
        self.catalog = catalog
        self.config = catalog.config
        self.prompter = prompter
        self.detector = detector or ConfigDetector()
        self.synthesizer = synthesizer or ManifestSynthesizer()

    def _require_prompter(self) -> Prompter:
        if self.prompter is None:
            raise GeneratorError(
                "Interactive mode needs a prompter",
                code=ErrorCode.USAGE_ERROR,
                hint="Pass --non-interactive together with a template id.",
            )
        return self.prompter

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def select_template(self, options: GenerateOptions) -> Template:
        if options.template_id:
            return self.catalog.get(options.template_id)
        if not options.interactive:
            raise GeneratorError(
                "No template given",
                code=ErrorCode.USAGE_ERROR,
                hint="Pass a template id when running non-interactively.",
            )
        templates = list(self.catalog)
        return self.catalog.get(self._require_prompter().choose_template(templates))

    def detect(self, template: Template, options: GenerateOptions) -> dict[str, Any]:
        workflow_dir = options.target_dir / self.config.components.workflow.dir
        detected = self.detector.detect(workflow_dir, template.id)
        if detected:
            logger.info("Detected existing configuration for %s", template.id)
            if self.prompter is not None:
                self.prompter.notice(f"✨ Auto-detected existing configuration from {workflow_dir}")
        return detected

    def select_preset(
        self,
        template: Template,
        options: GenerateOptions,
        detected: dict[str, Any],
    ) -> Preset | None:
        """Apply the requested preset, or offer one when nothing was detected."""
        if not template.presets:
            return None

        if options.preset:
            try:
                preset = template.find_preset(options.preset)
            except PresetNotFoundError as e:
                logger.warning("%s. Falling back to manual configuration.", e.message)
                return None
            logger.info("Applied preset %s", preset.name)
            return preset

        if detected or not options.interactive:
            return None
        return self._require_prompter().choose_preset(template.presets)

    def select_groups(
        self,
        template: Template,
        known: AnswerSet,
        interactive: bool,
    ) -> list[str]:
        """Choose the optional groups to configure.

        Groups holding a required field are always included.
        """
        optional = [g for key, g in template.groups.items() if key != COMMON_GROUP and g.fields]
        if not optional:
            return []

        resolved = {g.key for g in optional if any(n in known for n in g.field_names)}
        required = {g.key for g in optional if g.has_required}

        if interactive:
            chosen = set(self._require_prompter().select_groups(optional, resolved | required))
        else:
            chosen = resolved
        chosen |= required

        return [g.key for g in optional if g.key in chosen]

    def ask_fields(
        self,
        fields: list[FieldSpec],
        known: AnswerSet,
        template: Template,
        interactive: bool,
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """Resolve fields that no earlier source answered.

        Returns:
            ``(defaults, prompted)``: schema defaults used as fallback, and
            values the user typed.
        """
        defaults: dict[str, Any] = {}
        prompted: dict[str, Any] = {}

        for spec in fields:
            if spec.name in known:
                continue
            if not interactive:
                if spec.default is not None:
                    defaults[spec.name] = spec.default
                continue

            question = template.grouper.extract_prompt(spec.description) or spec.name
            value = self._require_prompter().ask(spec, question, spec.default)
            if not is_unset(value):
                prompted[spec.name] = value

        return defaults, prompted

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    def resolve_answers(
        self,
        template: Template,
        options: GenerateOptions,
        detected: dict[str, Any],
        preset: Preset | None,
    ) -> tuple[AnswerSet, list[str]]:
        """Merge every answer source for a template.

        Returns:
            The merged answers and the selected group keys.
        """
        preset_values = preset.answers() if preset else {}
        known = AnswerSet.layered(preset_values, detected, options.answers)

        groups = template.groups
        selected = self.select_groups(template, known, options.interactive)

        defaults: dict[str, Any] = {}
        prompted: dict[str, Any] = {}
        sections: list[tuple[str, Group]] = [("Configuration", groups[COMMON_GROUP])]
        sections += [(f"{groups[key].label} Configuration", groups[key]) for key in selected]

        for title, group in sections:
            pending = [f for f in group.fields if f.name not in known]
            if not pending:
                continue
            if options.interactive:
                self._require_prompter().section(title)
            group_defaults, group_prompted = self.ask_fields(pending, known, template, options.interactive)
            defaults.update(group_defaults)
            prompted.update(group_prompted)

        secrets = [s for s in template.secret_schema.values() if s.name not in known]
        if secrets and options.interactive:
            self._require_prompter().section("Secrets")
            secret_defaults, secret_prompted = self.ask_fields(secrets, known, template, True)
            defaults.update(secret_defaults)
            prompted.update(secret_prompted)

        answers = AnswerSet.layered(defaults, preset_values, detected, options.answers, prompted)
        return answers, selected

    def run(self, options: GenerateOptions) -> GenerationResult:
        """Run the full generation flow.

        Raises:
            TemplateNotFoundError: If the template id is unknown.
            ValidationError: If required values are still missing.
        """
        template = self.select_template(options)
        detected = self.detect(template, options)
        preset = self.select_preset(template, options, detected)
        if preset is not None and self.prompter is not None:
            self.prompter.notice(f"✅ Applied preset: {preset.name}")

        answers, selected = self.resolve_answers(template, options, detected, preset)

        missing = missing_required(template, answers)
        if missing:
            raise ValidationError(missing, template.id)

        ref = options.ref or self.config.default_ref
        manifest = self.synthesizer.synthesize(template, answers, ref, validate=False)
        result = GenerationResult(
            template_id=template.id,
            answers=answers.to_dict(),
            manifest=manifest,
            detected=detected,
            preset=preset,
            selected_groups=selected,
        )

        write_setup = bool(options.setup_doc)
        if options.interactive and not options.dry_run:
            prompter = self._require_prompter()
            prompter.preview(manifest)
            if not prompter.confirm("Proceed to generate/update workflow manifest?", default=True):
                result.cancelled = True
                return result
            if options.setup_doc is None:
                write_setup = prompter.confirm("Do you also need a setup guide (SETUP-*.md)?", default=False)

        if options.dry_run:
            return result

        return self.write(template, result, options, write_setup)

    def write(
        self,
        template: Template,
        result: GenerationResult,
        options: GenerateOptions,
        write_setup: bool,
    ) -> GenerationResult:
        """Write the manifest and, if requested, the setup guide."""
        workflow_file = resolve_output_path(
            template.id,
            options.target_dir,
            self.config.components.workflow.dir,
            options.output,
        )
        workflow_file.parent.mkdir(parents=True, exist_ok=True)
        workflow_file.write_text(result.manifest, encoding="utf-8")
        result.workflow_file = workflow_file
        logger.info("Wrote %s", workflow_file)

        if write_setup:
            setup_file = options.target_dir / f"SETUP-{template.id}.md"
            try:
                location = str(workflow_file.relative_to(options.target_dir))
            except ValueError:
                location = str(workflow_file)
            setup_file.write_text(
                render_setup_doc(template, result.answers, result.selected_groups, location),
                encoding="utf-8",
            )
            result.setup_file = setup_file
            logger.info("Wrote %s", setup_file)

        return result
