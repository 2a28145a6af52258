"""Reusable Workflows - manifest generation from shared workflow templates.

Given a catalog of templates (each a reusable workflow, its documentation
and an example caller), this package produces a filled-in caller manifest
for a project from interactive answers, detected configuration or a preset
mined from the example.
"""

from reusable_workflows.answers import AnswerSet, parse_assignments
from reusable_workflows.catalog import Template, TemplateCatalog, load_templates
from reusable_workflows.config import GeneratorConfig, load_config
from reusable_workflows.detection import ConfigDetector, detect_existing_config
from reusable_workflows.errors import (
    AssetMissingError,
    AssetParseError,
    CatalogError,
    GeneratorError,
    PresetNotFoundError,
    TemplateNotFoundError,
    ValidationError,
)
from reusable_workflows.generator import GenerateOptions, GenerationResult, WorkflowGenerator
from reusable_workflows.grouping import PrefixGrouper
from reusable_workflows.presets import PresetMiner, extract_presets
from reusable_workflows.schema import load_schema
from reusable_workflows.synthesis import ManifestSynthesizer, synthesize
from reusable_workflows.types import FieldSpec, Group, Preset, SecretSpec

__version__ = "0.4.0"

__all__ = [
    # Data types
    "FieldSpec",
    "SecretSpec",
    "Group",
    "Preset",
    "Template",
    "AnswerSet",
    # Components
    "TemplateCatalog",
    "PrefixGrouper",
    "PresetMiner",
    "ConfigDetector",
    "ManifestSynthesizer",
    "WorkflowGenerator",
    "GenerateOptions",
    "GenerationResult",
    "GeneratorConfig",
    # Functions
    "load_templates",
    "load_schema",
    "load_config",
    "extract_presets",
    "detect_existing_config",
    "synthesize",
    "parse_assignments",
    # Errors
    "GeneratorError",
    "CatalogError",
    "AssetMissingError",
    "AssetParseError",
    "TemplateNotFoundError",
    "PresetNotFoundError",
    "ValidationError",
]
