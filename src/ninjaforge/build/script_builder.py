"""Build script builders.

This module defines the abstract script builder protocol and the concrete
ninja serializer. Content is accumulated as typed records and only turned
into text by render(), so the same accumulated state always renders to the
same bytes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Union


@dataclass(frozen=True)
class Variable:
    name: str
    value: str


@dataclass(frozen=True)
class Rule:
    name: str
    command: str
    description: str = ""
    depfile: str = ""
    deps: str = ""


@dataclass(frozen=True)
class BuildStatement:
    output: str
    rule: str
    inputs: tuple


Record = Union[Variable, Rule, BuildStatement]


class ScriptBuilder(ABC):
    """Interface for build script builders.

    Accumulation is append-only. render() may be called any number of times
    and returns identical text for identical accumulated state.
    """

    def __init__(self):
        self._records: List[Record] = []

    @property
    def records(self) -> List[Record]:
        return list(self._records)

    def add_variable(self, name: str, value: str) -> None:
        self._records.append(Variable(name, value))

    def add_rule(
        self,
        name: str,
        command: str,
        description: str = "",
        depfile: str = "",
        deps: str = ""
    ) -> None:
        self._records.append(Rule(name, command, description, depfile, deps))

    def add_build_edge(self, output: str, rule: str, inputs: Union[str, Iterable[str]]) -> None:
        if isinstance(inputs, str):
            inputs = inputs.split()
        self._records.append(BuildStatement(output, rule, tuple(inputs)))

    @abstractmethod
    def render(self) -> str:
        """Serialize the accumulated records."""
        pass


def escape_path(path: str) -> str:
    """Escape a path for use in a ninja build statement."""
    return path.replace("$", "$$").replace(" ", "$ ").replace(":", "$:")


class NinjaScriptBuilder(ScriptBuilder):
    """Serializes records into ninja syntax."""

    def __init__(self, build_dir: str = ".ninjaforge"):
        """
        Args:
            build_dir: Directory ninja keeps its log and deps database in
        """
        super().__init__()
        self.build_dir = build_dir

    def render(self) -> str:
        lines = [f"builddir = {self.build_dir}"]

        for record in self._records:
            lines.append("")
            if isinstance(record, Variable):
                lines.append(f"{record.name} = {record.value}")
            elif isinstance(record, Rule):
                lines.extend(self._render_rule(record))
            elif isinstance(record, BuildStatement):
                inputs = " ".join(escape_path(i) for i in record.inputs)
                lines.append(f"build {escape_path(record.output)}: {record.rule} {inputs}".rstrip())

        return "\n".join(lines) + "\n"

    @staticmethod
    def _render_rule(rule: Rule) -> List[str]:
        lines = [f"rule {rule.name}", f"  command = {rule.command}"]
        if rule.description:
            lines.append(f"  description = {rule.description}")
        if rule.depfile:
            lines.append(f"  depfile = {rule.depfile}")
        if rule.deps:
            lines.append(f"  deps = {rule.deps}")
        return lines
