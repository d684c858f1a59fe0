"""Shared fixtures: sample descriptions, a fake compiler backend, settings."""

import pytest

from contract_builder import (
    ContractDescription,
    EventDeclaration,
    EventParameter,
    FunctionDeclaration,
    Parameter,
    VariableDeclaration,
    Visibility,
)
from contract_pipeline.settings import Settings

TOKEN_ABI = [
    {
        "type": "function",
        "name": "send",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
]

# Any valid secp256k1 key; used only against fakes
TEST_KEY = "0x" + "4c" * 32


def solc_output(name="Token", abi=None, bytecode="6080604052", errors=None, filename=None):
    """Minimal solc standard-JSON output for one contract"""
    output = {
        "contracts": {
            filename or f"{name}.sol": {
                name: {
                    "abi": TOKEN_ABI if abi is None else abi,
                    "evm": {"bytecode": {"object": bytecode}},
                }
            }
        },
    }
    if errors:
        output["errors"] = errors
    return output


class FakeBackend:
    """Compiler backend returning canned output and recording its inputs"""

    name = "fake"

    def __init__(self, output=None, error=None):
        self.output = output if output is not None else solc_output()
        self.error = error
        self.calls = []

    def run(self, standard_input, timeout):
        self.calls.append((standard_input, timeout))
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def token_description():
    return ContractDescription(
        name="Token",
        variables=(
            VariableDeclaration("supply", "uint256", Visibility.PUBLIC, default_value="1000"),
        ),
        functions=(
            FunctionDeclaration(
                name="send",
                inputs=(Parameter("to", "address"), Parameter("amount", "uint256")),
                visibility=Visibility.PUBLIC,
                body="require(amount <= supply);\nsupply -= amount;\nemit Transfer(msg.sender, to, amount);",
            ),
        ),
        events=(
            EventDeclaration(
                "Transfer",
                (
                    EventParameter("from", "address", indexed=True),
                    EventParameter("to", "address", indexed=True),
                    EventParameter("amount", "uint256"),
                ),
            ),
        ),
    )


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def settings():
    return Settings(
        networks={
            "sepolia": "https://eth-sepolia.public.blastapi.io",
            "local": "http://127.0.0.1:8545",
        },
    )
