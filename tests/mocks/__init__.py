"""Test doubles for the generator."""

from tests.mocks.prompter_mocks import ScriptedPrompter

__all__ = ["ScriptedPrompter"]
