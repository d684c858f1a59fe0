"""
Structural validation of a ContractDescription.

Catches everything that would otherwise only show up as a compiler error
(bad identifiers, unknown types, duplicate declarations, qualifier
combinations the target language rejects) before any network call.
"""

import re
from typing import Dict, Iterable, List, Optional, Set

from .catalog import Visibility, Mutability, is_reserved, is_value_type
from .models import (
    ConstructorDeclaration,
    ContractDescription,
    EventDeclaration,
    FunctionDeclaration,
    VariableDeclaration,
)

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

MAX_INDEXED_EVENT_PARAMETERS = 3


class ValidationError(ValueError):
    """A malformed or missing field in a contract description."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")

    @property
    def hint(self) -> str:
        """Short field-level text for the form UI."""
        return self.message


def validate_identifier(name: Optional[str], field: str) -> None:
    if not name:
        raise ValidationError(field, "must not be empty")
    if not _IDENTIFIER.fullmatch(name):
        raise ValidationError(
            field,
            f"'{name}' is not a valid identifier (letters, digits and underscore, not starting with a digit)",
        )
    if is_reserved(name):
        raise ValidationError(field, f"'{name}' is a reserved word")


def validate_value_type(type_str: Optional[str], field: str) -> None:
    if not type_str:
        raise ValidationError(field, "type must not be empty")
    if not is_value_type(type_str):
        raise ValidationError(field, f"unsupported type '{type_str}'")


def _check_unique_names(names: Iterable[Optional[str]], field: str) -> None:
    seen: Set[str] = set()
    for name in names:
        if not name:
            continue
        if name in seen:
            raise ValidationError(field, f"duplicate name '{name}'")
        seen.add(name)


def validate_variable(variable: VariableDeclaration, field: str) -> None:
    validate_identifier(variable.name, f"{field}.name")
    validate_value_type(variable.type, f"{field}.type")
    if variable.visibility == Visibility.EXTERNAL:
        raise ValidationError(f"{field}.visibility", "state variables cannot be external")
    if variable.constant and not variable.default_value:
        raise ValidationError(f"{field}.defaultValue", "constant variables need a value")


def validate_function(function: FunctionDeclaration, field: str) -> None:
    validate_identifier(function.name, f"{field}.name")

    for i, param in enumerate(function.inputs):
        validate_identifier(param.name, f"{field}.inputs[{i}].name")
        validate_value_type(param.type, f"{field}.inputs[{i}].type")

    for i, slot in enumerate(function.outputs):
        if slot.name:
            validate_identifier(slot.name, f"{field}.outputs[{i}].name")
        validate_value_type(slot.type, f"{field}.outputs[{i}].type")

    _check_unique_names(
        [p.name for p in function.inputs] + [o.name for o in function.outputs],
        f"{field}.parameters",
    )

    if function.mutability == Mutability.PAYABLE and function.visibility in (
        Visibility.PRIVATE,
        Visibility.INTERNAL,
    ):
        raise ValidationError(
            f"{field}.stateMutability",
            "payable functions must be public or external",
        )


def validate_event(event: EventDeclaration, field: str) -> None:
    validate_identifier(event.name, f"{field}.name")
    for i, param in enumerate(event.parameters):
        validate_identifier(param.name, f"{field}.parameters[{i}].name")
        validate_value_type(param.type, f"{field}.parameters[{i}].type")

    _check_unique_names([p.name for p in event.parameters], f"{field}.parameters")

    indexed = sum(1 for p in event.parameters if p.indexed)
    if indexed > MAX_INDEXED_EVENT_PARAMETERS:
        raise ValidationError(
            f"{field}.parameters",
            f"at most {MAX_INDEXED_EVENT_PARAMETERS} parameters can be indexed (got {indexed})",
        )


def validate_constructor(
    constructor: ConstructorDeclaration, inherits_from: Iterable[str], field: str = "constructor"
) -> None:
    for i, param in enumerate(constructor.inputs):
        validate_identifier(param.name, f"{field}.inputs[{i}].name")
        validate_value_type(param.type, f"{field}.inputs[{i}].type")
    _check_unique_names([p.name for p in constructor.inputs], f"{field}.inputs")

    bases = set(inherits_from)
    called: Set[str] = set()
    for i, call in enumerate(constructor.base_calls):
        if call.base not in bases:
            raise ValidationError(
                f"{field}.baseCalls[{i}].base",
                f"'{call.base}' is not an inherited contract",
            )
        if call.base in called:
            raise ValidationError(f"{field}.baseCalls[{i}].base", f"'{call.base}' is called twice")
        called.add(call.base)


def validate_description(description: ContractDescription) -> None:
    """Raise ValidationError for the first problem found."""
    validate_identifier(description.name, "name")

    for i, base in enumerate(description.inherits_from):
        validate_identifier(base, f"inheritsFrom[{i}]")
        if base == description.name:
            raise ValidationError(f"inheritsFrom[{i}]", "a contract cannot inherit from itself")
    _check_unique_names(description.inherits_from, "inheritsFrom")

    variable_names: Dict[str, int] = {}
    for i, variable in enumerate(description.variables):
        validate_variable(variable, f"variables[{i}]")
        if variable.name in variable_names:
            raise ValidationError(f"variables[{i}].name", f"duplicate variable '{variable.name}'")
        variable_names[variable.name] = i

    signatures: Set[str] = set()
    for i, function in enumerate(description.functions):
        validate_function(function, f"functions[{i}]")
        if function.name == description.name:
            raise ValidationError(
                f"functions[{i}].name",
                f"'{function.name}' is the contract name; use constructor for initialization",
            )
        if function.name in variable_names:
            raise ValidationError(
                f"functions[{i}].name",
                f"'{function.name}' is already declared as a state variable",
            )
        if function.signature in signatures:
            raise ValidationError(f"functions[{i}].name", f"duplicate function {function.signature}")
        signatures.add(function.signature)

    function_names = {f.name for f in description.functions}
    event_signatures: Set[str] = set()
    for i, event in enumerate(description.events):
        validate_event(event, f"events[{i}]")
        if event.name in variable_names or event.name in function_names:
            raise ValidationError(f"events[{i}].name", f"'{event.name}' is already declared")
        if event.signature in event_signatures:
            raise ValidationError(f"events[{i}].name", f"duplicate event {event.signature}")
        event_signatures.add(event.signature)

    if description.constructor is not None:
        validate_constructor(description.constructor, description.inherits_from)


def collect_errors(description: ContractDescription) -> List[str]:
    """Every problem in the description, one message per offending field.

    Unlike `validate_description` this keeps going after the first error
    so a form can highlight all fields at once. Duplicate checks across
    declarations still stop at the first duplicate.
    """
    errors: List[str] = []

    def _run(check, *args) -> None:
        try:
            check(*args)
        except ValidationError as e:
            errors.append(str(e))

    _run(validate_identifier, description.name, "name")
    for i, base in enumerate(description.inherits_from):
        _run(validate_identifier, base, f"inheritsFrom[{i}]")
    for i, variable in enumerate(description.variables):
        _run(validate_variable, variable, f"variables[{i}]")
    for i, function in enumerate(description.functions):
        _run(validate_function, function, f"functions[{i}]")
    for i, event in enumerate(description.events):
        _run(validate_event, event, f"events[{i}]")
    if description.constructor is not None:
        _run(validate_constructor, description.constructor, description.inherits_from)

    if not errors:
        _run(validate_description, description)

    return errors
