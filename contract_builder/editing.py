"""Edit operations on a ContractDescription.

Each operation returns a new description and leaves its input untouched.
The result is validated before it is returned, so a rejected edit raises
ValidationError and the caller simply keeps the previous value.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Tuple, TypeVar

from .models import (
    ConstructorDeclaration,
    ContractDescription,
    EventDeclaration,
    FunctionDeclaration,
    VariableDeclaration,
)
from .validator import ValidationError, validate_description

T = TypeVar("T")


def _checked(description: ContractDescription) -> ContractDescription:
    validate_description(description)
    return description


def _check_index(items: Tuple, index: int, field: str) -> None:
    if not 0 <= index < len(items):
        raise ValidationError(f"{field}[{index}]", f"no such entry (have {len(items)})")


def _replaced(items: Tuple[T, ...], index: int, item: T) -> Tuple[T, ...]:
    return items[:index] + (item,) + items[index + 1:]


def _removed(items: Tuple[T, ...], index: int) -> Tuple[T, ...]:
    return items[:index] + items[index + 1:]


def set_name(description: ContractDescription, name: str) -> ContractDescription:
    return _checked(replace(description, name=name.strip()))


def set_inheritance(description: ContractDescription, bases: Iterable[str]) -> ContractDescription:
    bases = tuple(b.strip() for b in bases if b and b.strip())
    constructor = description.constructor
    if constructor is not None:
        # Drop base calls for bases that are no longer inherited
        constructor = replace(
            constructor,
            base_calls=tuple(c for c in constructor.base_calls if c.base in bases),
        )
    return _checked(replace(description, inherits_from=bases, constructor=constructor))


# -- variables ---------------------------------------------------------------

def add_variable(description: ContractDescription, variable: VariableDeclaration) -> ContractDescription:
    return _checked(replace(description, variables=description.variables + (variable,)))


def update_variable(
    description: ContractDescription, index: int, variable: VariableDeclaration
) -> ContractDescription:
    _check_index(description.variables, index, "variables")
    return _checked(replace(description, variables=_replaced(description.variables, index, variable)))


def remove_variable(description: ContractDescription, index: int) -> ContractDescription:
    _check_index(description.variables, index, "variables")
    return replace(description, variables=_removed(description.variables, index))


# -- functions ---------------------------------------------------------------

def add_function(description: ContractDescription, function: FunctionDeclaration) -> ContractDescription:
    return _checked(replace(description, functions=description.functions + (function,)))


def update_function(
    description: ContractDescription, index: int, function: FunctionDeclaration
) -> ContractDescription:
    _check_index(description.functions, index, "functions")
    return _checked(replace(description, functions=_replaced(description.functions, index, function)))


def remove_function(description: ContractDescription, index: int) -> ContractDescription:
    _check_index(description.functions, index, "functions")
    return replace(description, functions=_removed(description.functions, index))


# -- events ------------------------------------------------------------------

def add_event(description: ContractDescription, event: EventDeclaration) -> ContractDescription:
    return _checked(replace(description, events=description.events + (event,)))


def update_event(
    description: ContractDescription, index: int, event: EventDeclaration
) -> ContractDescription:
    _check_index(description.events, index, "events")
    return _checked(replace(description, events=_replaced(description.events, index, event)))


def remove_event(description: ContractDescription, index: int) -> ContractDescription:
    _check_index(description.events, index, "events")
    return replace(description, events=_removed(description.events, index))


# -- constructor -------------------------------------------------------------

def set_constructor(
    description: ContractDescription, constructor: ConstructorDeclaration
) -> ContractDescription:
    return _checked(replace(description, constructor=constructor))


def clear_constructor(description: ContractDescription) -> ContractDescription:
    return replace(description, constructor=None)
