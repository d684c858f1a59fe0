"""Tests for contract description validation"""

import pytest

from contract_builder import (
    BaseConstructorCall,
    ConstructorDeclaration,
    ContractDescription,
    EventDeclaration,
    EventParameter,
    FunctionDeclaration,
    Mutability,
    Parameter,
    ValidationError,
    VariableDeclaration,
    Visibility,
    collect_errors,
    presets,
    validate_description,
)


def _raises_on(description, field_prefix):
    with pytest.raises(ValidationError) as exc:
        validate_description(description)
    assert exc.value.field.startswith(field_prefix), exc.value.field
    return exc.value


def test_valid_descriptions_pass(token_description):
    validate_description(token_description)
    validate_description(presets.default_contract())
    validate_description(presets.erc20_token("MyToken", "My Token", "MTK", 1))
    validate_description(ContractDescription(name="Empty"))


def test_bad_contract_name():
    error = _raises_on(ContractDescription(name="1Token"), "name")
    assert "not a valid identifier" in error.hint


def test_reserved_word_rejected():
    description = ContractDescription(name="C", variables=(VariableDeclaration("address", "uint256"),))
    _raises_on(description, "variables[0].name")


@pytest.mark.parametrize("name", ["let", "default", "static", "days", "ether", "wei"])
def test_future_keywords_and_units_rejected(name):
    description = ContractDescription(name="C", variables=(VariableDeclaration(name, "uint256"),))
    error = _raises_on(description, "variables[0].name")
    assert "reserved word" in error.hint


@pytest.mark.parametrize("name", ["Token\n", " Token", "Token ", "To ken"])
def test_contract_name_with_whitespace_rejected(name):
    error = _raises_on(ContractDescription(name=name), "name")
    assert "not a valid identifier" in error.hint


def test_unsupported_type_rejected():
    description = ContractDescription(name="C", variables=(VariableDeclaration("x", "uint7"),))
    _raises_on(description, "variables[0].type")


def test_external_variable_rejected():
    description = ContractDescription(
        name="C", variables=(VariableDeclaration("x", "uint256", Visibility.EXTERNAL),)
    )
    _raises_on(description, "variables[0].visibility")


def test_constant_needs_value():
    description = ContractDescription(
        name="C", variables=(VariableDeclaration("X", "uint256", constant=True),)
    )
    _raises_on(description, "variables[0].defaultValue")


def test_private_payable_rejected():
    description = ContractDescription(
        name="C",
        functions=(FunctionDeclaration("f", visibility=Visibility.PRIVATE, mutability=Mutability.PAYABLE),),
    )
    _raises_on(description, "functions[0].stateMutability")


def test_too_many_indexed_parameters():
    event = EventDeclaration("E", tuple(EventParameter(f"p{i}", "uint256", indexed=True) for i in range(4)))
    _raises_on(ContractDescription(name="C", events=(event,)), "events[0].parameters")


def test_duplicate_variables_rejected():
    description = ContractDescription(
        name="C",
        variables=(VariableDeclaration("x", "uint256"), VariableDeclaration("x", "bool")),
    )
    _raises_on(description, "variables[1].name")


def test_overloads_allowed_but_duplicate_signatures_rejected():
    overloads = ContractDescription(
        name="C",
        functions=(
            FunctionDeclaration("f", inputs=(Parameter("a", "uint256"),)),
            FunctionDeclaration("f", inputs=(Parameter("a", "address"),)),
        ),
    )
    validate_description(overloads)

    duplicate = ContractDescription(
        name="C",
        functions=(
            FunctionDeclaration("f", inputs=(Parameter("a", "uint256"),)),
            FunctionDeclaration("f", inputs=(Parameter("b", "uint256"),)),
        ),
    )
    _raises_on(duplicate, "functions[1].name")


def test_function_name_clashing_with_variable():
    description = ContractDescription(
        name="C",
        variables=(VariableDeclaration("total", "uint256"),),
        functions=(FunctionDeclaration("total"),),
    )
    _raises_on(description, "functions[0].name")


def test_function_named_after_contract_rejected():
    description = ContractDescription(name="Vault", functions=(FunctionDeclaration("Vault"),))
    error = _raises_on(description, "functions[0].name")
    assert "contract name" in error.hint


def test_self_inheritance_rejected():
    _raises_on(ContractDescription(name="C", inherits_from=("C",)), "inheritsFrom[0]")


def test_base_call_must_name_inherited_contract():
    description = ContractDescription(
        name="C",
        constructor=ConstructorDeclaration(base_calls=(BaseConstructorCall("ERC20", ('"A"', '"B"')),)),
    )
    _raises_on(description, "constructor.baseCalls[0].base")


def test_collect_errors_reports_every_field():
    description = ContractDescription(
        name="",
        variables=(VariableDeclaration("x", "float"),),
        functions=(FunctionDeclaration("9f"),),
    )
    errors = collect_errors(description)
    assert len(errors) == 3
    assert errors[0].startswith("name:")


def test_collect_errors_empty_for_valid(token_description):
    assert collect_errors(token_description) == []
