"""Error types and CLI error handling.

This module defines the error taxonomy used across the generator and the
helpers that turn those errors into CLI output and exit codes.

Taxonomy:
    - CatalogError: the template catalog cannot be used at all (fatal)
    - AssetMissingError: a template lacks one of its three assets (skipped)
    - AssetParseError: a document or mined block failed to parse (skipped)
    - TemplateNotFoundError: an unknown template id was requested
    - PresetNotFoundError: a preset query matched nothing (falls back)
    - ValidationError: required fields are unresolved at synthesis time
    - ConfigurationError: the generator configuration is invalid
"""

from __future__ import annotations

import functools
import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, TypeVar

import typer

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode(Enum):
    """Process exit codes for generator errors."""

    # General errors (1-9)
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    CANCELLED = 3

    # Catalog errors (10-19)
    CATALOG_NOT_FOUND = 10
    TEMPLATE_NOT_FOUND = 11
    ASSET_MISSING = 12
    ASSET_PARSE_ERROR = 13

    # Answer errors (20-29)
    VALIDATION_FAILED = 20
    PRESET_NOT_FOUND = 21

    # Configuration errors (30-39)
    CONFIG_INVALID = 30


# =============================================================================
# Exception Classes
# =============================================================================


class GeneratorError(Exception):
    """Base exception for generator errors.

    Attributes:
        message: Error message
        code: Error code
        details: Additional error details
        hint: Helpful hint for resolution
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.GENERAL_ERROR,
        details: dict[str, Any] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.hint = hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return "\n".join(parts)


class CatalogError(GeneratorError):
    """The template catalog is missing or holds no usable template."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.CATALOG_NOT_FOUND,
            details={"path": str(path) if path else None},
            hint="Point --catalog at a directory containing .github/workflows, docs and examples.",
        )
        self.path = path


class AssetMissingError(GeneratorError):
    """A template is missing its docs or example asset."""

    def __init__(self, template_id: str, path: Path | str) -> None:
        super().__init__(
            message=f"Skipping {template_id}: missing {path}",
            code=ErrorCode.ASSET_MISSING,
            details={"template_id": template_id, "path": str(path)},
        )
        self.template_id = template_id
        self.path = path


class AssetParseError(GeneratorError):
    """A structured document could not be read or parsed."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.ASSET_PARSE_ERROR,
            details={"path": str(path) if path else None},
        )
        self.path = path


class TemplateNotFoundError(GeneratorError):
    """An unknown template id was requested."""

    def __init__(self, template_id: str, available: list[str] | None = None) -> None:
        available = available or []
        super().__init__(
            message=f"Template not found: {template_id}",
            code=ErrorCode.TEMPLATE_NOT_FOUND,
            details={"template_id": template_id, "available": available},
            hint=f"Available templates: {', '.join(available)}" if available else None,
        )
        self.template_id = template_id


class PresetNotFoundError(GeneratorError):
    """A preset query matched no preset of the template."""

    def __init__(self, query: str, template_id: str) -> None:
        super().__init__(
            message=f'Preset "{query}" not found for {template_id}',
            code=ErrorCode.PRESET_NOT_FOUND,
            details={"query": query, "template_id": template_id},
        )
        self.query = query
        self.template_id = template_id


class ValidationError(GeneratorError):
    """Required fields have no resolved value."""

    def __init__(self, missing: list[str], template_id: str | None = None) -> None:
        super().__init__(
            message=f"Missing required values: {', '.join(missing)}",
            code=ErrorCode.VALIDATION_FAILED,
            details={"missing": missing, "template_id": template_id},
            hint="Provide them with --set KEY=VALUE or run without --non-interactive.",
        )
        self.missing = missing


class ConfigurationError(GeneratorError):
    """Error with the generator configuration."""

    def __init__(
        self,
        message: str,
        config_path: Path | str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.CONFIG_INVALID,
            details={"config_path": str(config_path) if config_path else None},
            hint=hint or "Check the configuration file format and values.",
        )
        self.config_path = config_path


# =============================================================================
# Error Handler
# =============================================================================


@dataclass
class ErrorContext:
    """Context for error handling.

    Attributes:
        verbose: Show error details
        debug: Show stack traces
        exit_on_error: Exit the process on error
    """

    verbose: bool = False
    debug: bool = False
    exit_on_error: bool = True


def handle_cli_error(
    error: Exception,
    context: ErrorContext | None = None,
) -> int:
    """Report an error on stderr and return (or exit with) its code.

    Args:
        error: The exception to handle
        context: Error handling context

    Returns:
        Exit code
    """
    context = context or ErrorContext()

    if isinstance(error, GeneratorError):
        typer.echo(typer.style(f"Error: {error.message}", fg="red"), err=True)

        if error.hint:
            typer.echo(typer.style(f"Hint: {error.hint}", fg="yellow"), err=True)

        if context.verbose and error.details:
            typer.echo("\nDetails:", err=True)
            for key, value in error.details.items():
                typer.echo(f"  {key}: {value}", err=True)

        exit_code = error.code.value

    elif isinstance(error, typer.Exit):
        raise error

    else:
        typer.echo(typer.style(f"Error: {error}", fg="red"), err=True)
        exit_code = ErrorCode.GENERAL_ERROR.value

    if context.debug:
        typer.echo("\nStack trace:", err=True)
        typer.echo(traceback.format_exc(), err=True)

    if context.exit_on_error:
        raise typer.Exit(exit_code)

    return exit_code


# =============================================================================
# Decorator
# =============================================================================


F = TypeVar("F", bound=Callable[..., Any])


def error_boundary(func: F) -> F:
    """Convert exceptions raised by a command into CLI errors.

    Args:
        func: Command function to wrap

    Returns:
        Wrapped function
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (typer.Exit, typer.Abort):
            raise
        except GeneratorError as e:
            handle_cli_error(e)
        except Exception as e:
            logger.exception("Unexpected error")
            typer.echo(typer.style(f"Error: {e}", fg="red"), err=True)
            raise typer.Exit(ErrorCode.GENERAL_ERROR.value)

    return wrapper  # type: ignore
