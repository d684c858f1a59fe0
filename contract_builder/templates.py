"""Every text fragment the Solidity generator emits.

Keeping the fragments here (and only here) means the variable, function
and event grammar cannot drift between the live preview and the source
sent to the compiler.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from .catalog import Mutability, needs_data_location, normalize_type
from .models import (
    BaseConstructorCall,
    ConstructorDeclaration,
    EventDeclaration,
    EventParameter,
    FunctionDeclaration,
    Parameter,
    ReturnSlot,
    VariableDeclaration,
)

DEFAULT_LICENSE = "MIT"
DEFAULT_PRAGMA = "^0.8.20"

INDENT = "    "
BODY_PLACEHOLDER = "// implementation pending"

LICENSE_LINE = "// SPDX-License-Identifier: {license}"
PRAGMA_LINE = "pragma solidity {version};"
IMPORT_LINE = 'import "{path}";'

CONTRACT_OPEN = "contract {name}{inheritance} {{"
INHERITANCE_CLAUSE = " is {bases}"
CONTRACT_CLOSE = "}"

SECTION_VARIABLES = "// State variables"
SECTION_EVENTS = "// Events"
SECTION_CONSTRUCTOR = "// Constructor"
SECTION_FUNCTIONS = "// Functions"

VARIABLE_LINE = "{type} {visibility}{constant} {name}{default};"
EVENT_LINE = "event {name}({parameters});"
FUNCTION_OPEN = "function {name}({inputs}) {visibility}{mutability}{returns} {{"
RETURNS_CLAUSE = " returns ({outputs})"
CONSTRUCTOR_OPEN = "constructor({inputs}){base_calls}{payable} {{"
BLOCK_CLOSE = "}"

DATA_LOCATION = "memory"


def preamble(license: str = DEFAULT_LICENSE, version: str = DEFAULT_PRAGMA) -> List[str]:
    return [LICENSE_LINE.format(license=license), PRAGMA_LINE.format(version=version)]


def import_line(path: str) -> str:
    return IMPORT_LINE.format(path=path)


def contract_open(name: str, bases: Iterable[str]) -> str:
    bases = list(bases)
    inheritance = INHERITANCE_CLAUSE.format(bases=", ".join(bases)) if bases else ""
    return CONTRACT_OPEN.format(name=name, inheritance=inheritance)


def _typed(type_str: str, name: Optional[str], with_location: bool) -> str:
    parts = [normalize_type(type_str)]
    if with_location and needs_data_location(type_str):
        parts.append(DATA_LOCATION)
    if name:
        parts.append(name)
    return " ".join(parts)


def parameter(param: Parameter) -> str:
    return _typed(param.type, param.name, with_location=True)


def return_slot(slot: ReturnSlot) -> str:
    return _typed(slot.type, slot.name, with_location=True)


def event_parameter(param: EventParameter) -> str:
    type_str = normalize_type(param.type)
    if param.indexed:
        type_str += " indexed"
    return f"{type_str} {param.name}"


def variable_line(variable: VariableDeclaration) -> str:
    default = ""
    if variable.default_value:
        default = f" = {variable.default_value.strip()}"
    return VARIABLE_LINE.format(
        type=normalize_type(variable.type),
        visibility=variable.visibility.value,
        constant=" constant" if variable.constant else "",
        name=variable.name,
        default=default,
    )


def event_line(event: EventDeclaration) -> str:
    return EVENT_LINE.format(
        name=event.name,
        parameters=", ".join(event_parameter(p) for p in event.parameters),
    )


def body_lines(body: str, depth: int = 2) -> List[str]:
    """Indent a free-form body; empty bodies get the placeholder comment."""
    prefix = INDENT * depth
    if not body or not body.strip():
        return [prefix + BODY_PLACEHOLDER]

    lines = body.replace("\r\n", "\n").replace("\r", "\n").strip("\n").split("\n")
    return [prefix + line.rstrip() if line.strip() else "" for line in lines]


def function_block(function: FunctionDeclaration) -> List[str]:
    mutability = ""
    if function.mutability != Mutability.NONPAYABLE:
        mutability = f" {function.mutability.value}"

    returns = ""
    if function.outputs:
        returns = RETURNS_CLAUSE.format(
            outputs=", ".join(return_slot(o) for o in function.outputs)
        )

    header = FUNCTION_OPEN.format(
        name=function.name,
        inputs=", ".join(parameter(p) for p in function.inputs),
        visibility=function.visibility.value,
        mutability=mutability,
        returns=returns,
    )
    return [INDENT + header] + body_lines(function.body) + [INDENT + BLOCK_CLOSE]


def base_call(call: BaseConstructorCall) -> str:
    return f"{call.base}({', '.join(a.strip() for a in call.arguments)})"


def constructor_block(constructor: ConstructorDeclaration) -> List[str]:
    calls = "".join(f" {base_call(c)}" for c in constructor.base_calls)
    header = CONSTRUCTOR_OPEN.format(
        inputs=", ".join(parameter(p) for p in constructor.inputs),
        base_calls=calls,
        payable=" payable" if constructor.payable else "",
    )
    return [INDENT + header] + body_lines(constructor.body) + [INDENT + BLOCK_CLOSE]
