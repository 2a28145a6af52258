"""Answer merging.

Answers come from several sources. Later sources win:

    schema defaults  <  preset  <  detected  <  explicit (CLI or prompt)
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

from reusable_workflows.errors import ErrorCode, GeneratorError


def is_unset(value: Any) -> bool:
    return value is None or value == ""


class AnswerSet(Mapping[str, Any]):
    """An ordered mapping of field name to resolved value.

    ``None`` never overrides an existing value, so a source that only
    mentions a key without a value does not erase a lower layer.
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = {}
        if values:
            self.merge(values)

    @classmethod
    def layered(cls, *layers: Mapping[str, Any] | None) -> AnswerSet:
        """Merge layers given lowest precedence first."""
        answers = cls()
        for layer in layers:
            if layer:
                answers.merge(layer)
        return answers

    def merge(self, values: Mapping[str, Any]) -> AnswerSet:
        for key, value in values.items():
            if value is not None:
                self._values[key] = value
        return self

    def missing(self, required: Iterable[str]) -> list[str]:
        """Required names that have no usable value."""
        return [name for name in required if is_unset(self._values.get(name))]

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"AnswerSet({self._values!r})"


def parse_assignments(assignments: Iterable[str] | None) -> dict[str, str]:
    """Parse ``KEY=VALUE`` strings from the command line.

    Raises:
        GeneratorError: If an assignment has no ``=`` or an empty key.
    """
    result: dict[str, str] = {}
    for item in assignments or []:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise GeneratorError(
                f"Invalid assignment: {item!r}",
                code=ErrorCode.USAGE_ERROR,
                hint="Use --set KEY=VALUE.",
            )
        result[key] = value
    return result
