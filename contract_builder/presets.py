"""Starting points offered by the builder form.

- `default_contract()`: the description a new editing session opens with.
- `QUICK_FUNCTION_TEMPLATES`: one-click function templates.
- `blank_*()`: what "Add variable / function / event" inserts.
- `erc20_token()`: a ready-to-deploy ERC20 with its constructor wired up.
"""

from __future__ import annotations

from typing import Dict

from .catalog import Mutability, Visibility
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

TRANSFER_EVENT = EventDeclaration(
    name="Transfer",
    parameters=(
        EventParameter("from", "address", indexed=True),
        EventParameter("to", "address", indexed=True),
        EventParameter("amount", "uint256", indexed=False),
    ),
)


QUICK_FUNCTION_TEMPLATES: Dict[str, FunctionDeclaration] = {
    "mint": FunctionDeclaration(
        name="mint",
        inputs=(Parameter("to", "address"), Parameter("amount", "uint256")),
        visibility=Visibility.PUBLIC,
        mutability=Mutability.NONPAYABLE,
        body="// Mint tokens\n_mint(to, amount);",
    ),
    "transfer": FunctionDeclaration(
        name="transfer",
        inputs=(Parameter("to", "address"), Parameter("amount", "uint256")),
        outputs=(ReturnSlot("bool"),),
        visibility=Visibility.PUBLIC,
        mutability=Mutability.NONPAYABLE,
        body="// Transfer tokens\n_transfer(msg.sender, to, amount);\nreturn true;",
    ),
    "deposit": FunctionDeclaration(
        name="deposit",
        visibility=Visibility.PUBLIC,
        mutability=Mutability.PAYABLE,
        body='// Handle deposit\nrequire(msg.value > 0, "Must send ETH");',
    ),
    "withdraw": FunctionDeclaration(
        name="withdraw",
        inputs=(Parameter("amount", "uint256"),),
        visibility=Visibility.PUBLIC,
        mutability=Mutability.NONPAYABLE,
        body='// Handle withdrawal\nrequire(amount > 0, "Amount must be positive");',
    ),
}


def quick_function(name: str) -> FunctionDeclaration:
    """Look up a quick template by name (KeyError if unknown)."""
    return QUICK_FUNCTION_TEMPLATES[name]


def blank_variable(name: str, type: str = "uint256") -> VariableDeclaration:
    return VariableDeclaration(name=name, type=type, visibility=Visibility.PRIVATE)


def blank_function(name: str) -> FunctionDeclaration:
    return FunctionDeclaration(name=name, visibility=Visibility.PUBLIC)


def blank_event(name: str) -> EventDeclaration:
    return EventDeclaration(name=name, parameters=(EventParameter("value", "uint256"),))


def default_contract() -> ContractDescription:
    """The description a fresh builder session starts from."""
    return ContractDescription(
        name="MyToken",
        variables=(
            VariableDeclaration(
                name="supply",
                type="uint256",
                visibility=Visibility.PUBLIC,
                default_value="1000000",
            ),
        ),
        functions=(
            FunctionDeclaration(
                name="spend",
                inputs=(Parameter("to", "address"), Parameter("amount", "uint256")),
                visibility=Visibility.PUBLIC,
                mutability=Mutability.NONPAYABLE,
                body="require(amount <= supply);\nsupply -= amount;\nemit Transfer(msg.sender, to, amount);",
            ),
        ),
        events=(TRANSFER_EVENT,),
    )


def erc20_token(
    name: str,
    token_name: str,
    token_symbol: str,
    initial_supply: int,
) -> ContractDescription:
    """An ERC20 that mints `initial_supply` whole tokens to the deployer."""
    return ContractDescription(
        name=name,
        inherits_from=("ERC20",),
        constructor=ConstructorDeclaration(
            base_calls=(
                BaseConstructorCall("ERC20", (_quoted(token_name), _quoted(token_symbol))),
            ),
            body=f"_mint(msg.sender, {int(initial_supply)} * 10 ** decimals());",
        ),
    )


def _quoted(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
