"""Solidity source generator.

This is the module you should call for previews and before compiling:

    from contract_builder import generate_solidity

It is a pure function of the ContractDescription: no I/O, no validation,
and the same description always renders to byte-identical text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from . import templates
from .catalog import import_path_for
from .models import ContractDescription


@dataclass
class GenerationResult:
    """Generated source plus the metadata the pipeline stores with it."""

    contract_name: str
    solidity_code: str
    imports_used: List[str]
    inheritance_chain: List[str]
    variable_count: int
    function_count: int
    event_count: int

    def to_metadata_dict(self) -> Dict:
        return {
            "contract_name": self.contract_name,
            "imports_used": self.imports_used,
            "inheritance_chain": self.inheritance_chain,
            "variables": self.variable_count,
            "functions": self.function_count,
            "events": self.event_count,
        }


def collect_imports(inherits_from) -> List[str]:
    """Import paths for recognized bases, in inheritance order, once each."""
    imports: List[str] = []
    for base in inherits_from:
        path = import_path_for(base)
        if path and path not in imports:
            imports.append(path)
    return imports


def _section(title: str, lines: List[str]) -> List[str]:
    return [templates.INDENT + title] + lines


def generate_contract(
    description: ContractDescription,
    license: str = templates.DEFAULT_LICENSE,
    pragma: str = templates.DEFAULT_PRAGMA,
) -> GenerationResult:
    imports = collect_imports(description.inherits_from)

    lines: List[str] = templates.preamble(license, pragma)
    lines.append("")

    if imports:
        lines.extend(templates.import_line(path) for path in imports)
        lines.append("")

    lines.append(templates.contract_open(description.name, description.inherits_from))

    sections: List[List[str]] = []

    if description.variables:
        sections.append(_section(
            templates.SECTION_VARIABLES,
            [templates.INDENT + templates.variable_line(v) for v in description.variables],
        ))

    if description.events:
        sections.append(_section(
            templates.SECTION_EVENTS,
            [templates.INDENT + templates.event_line(e) for e in description.events],
        ))

    if description.constructor is not None:
        sections.append(_section(
            templates.SECTION_CONSTRUCTOR,
            templates.constructor_block(description.constructor),
        ))

    if description.functions:
        function_lines: List[str] = []
        for i, function in enumerate(description.functions):
            if i > 0:
                function_lines.append("")
            function_lines.extend(templates.function_block(function))
        sections.append(_section(templates.SECTION_FUNCTIONS, function_lines))

    for i, section in enumerate(sections):
        if i > 0:
            lines.append("")
        lines.extend(section)

    lines.append(templates.CONTRACT_CLOSE)

    return GenerationResult(
        contract_name=description.name,
        solidity_code="\n".join(lines) + "\n",
        imports_used=imports,
        inheritance_chain=list(description.inherits_from),
        variable_count=len(description.variables),
        function_count=len(description.functions),
        event_count=len(description.events),
    )


def generate_solidity(description: ContractDescription) -> str:
    """Render a ContractDescription to Solidity source text."""
    return generate_contract(description).solidity_code
