"""Contract builder package.

Structured contract descriptions and the Solidity generator:

    from contract_builder import ContractDescription, generate_solidity

A description is an immutable value; edit it through `contract_builder.editing`
and render it with `generate_solidity` for previews or compilation.
"""

from . import editing, presets
from .catalog import Mutability, Visibility, COMMON_VALUE_TYPES, import_path_for, is_value_type
from .generator import GenerationResult, collect_imports, generate_contract, generate_solidity
from .models import (
    BaseConstructorCall,
    ConstructorDeclaration,
    ContractDescription,
    EventDeclaration,
    EventParameter,
    FunctionDeclaration,
    Parameter,
    ReturnSlot,
    VariableDeclaration,
)
from .validator import ValidationError, collect_errors, validate_description

__all__ = [
    "editing",
    "presets",
    "Mutability",
    "Visibility",
    "COMMON_VALUE_TYPES",
    "import_path_for",
    "is_value_type",
    "GenerationResult",
    "collect_imports",
    "generate_contract",
    "generate_solidity",
    "BaseConstructorCall",
    "ConstructorDeclaration",
    "ContractDescription",
    "EventDeclaration",
    "EventParameter",
    "FunctionDeclaration",
    "Parameter",
    "ReturnSlot",
    "VariableDeclaration",
    "ValidationError",
    "collect_errors",
    "validate_description",
]
