"""Type catalog for the contract builder.

Enumerates the value types, visibility and mutability qualifiers the
builder accepts, plus the standard-library base contracts the generator
knows how to import. This module has no dependencies on the rest of the
package so it can be imported everywhere.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, FrozenSet, List, Optional


class Visibility(Enum):
    """Visibility qualifier for state variables and functions."""

    PUBLIC = "public"
    PRIVATE = "private"
    INTERNAL = "internal"
    EXTERNAL = "external"

    @classmethod
    def from_string(cls, s: str) -> "Visibility":
        value = (s or "").strip().lower()
        for vis in cls:
            if vis.value == value:
                return vis
        raise ValueError(f"Unknown visibility '{s}'")


class Mutability(Enum):
    """State mutability of a function."""

    PURE = "pure"
    VIEW = "view"
    NONPAYABLE = "nonpayable"
    PAYABLE = "payable"

    @classmethod
    def default(cls) -> "Mutability":
        return cls.NONPAYABLE

    @classmethod
    def from_string(cls, s: str) -> "Mutability":
        value = (s or "").strip().lower()
        if not value:
            return cls.default()
        for mut in cls:
            if mut.value == value:
                return mut
        raise ValueError(f"Unknown state mutability '{s}'")


# Offered by the builder form, in display order
COMMON_VALUE_TYPES: List[str] = [
    "uint256",
    "int256",
    "address",
    "bool",
    "string",
    "bytes",
    "bytes32",
]

# Need an explicit data location as function parameters / return slots
DYNAMIC_TYPES: FrozenSet[str] = frozenset({"string", "bytes"})

_SIMPLE_TYPES: FrozenSet[str] = frozenset(
    {"uint", "int", "address", "address payable", "bool", "string", "bytes"}
)
_SIZED_INT = re.compile(r"u?int(\d+)")
_SIZED_BYTES = re.compile(r"bytes(\d+)")


def normalize_type(type_str: str) -> str:
    """Collapse whitespace so 'address  payable' compares equal."""
    return " ".join((type_str or "").split())


def is_value_type(type_str: str) -> bool:
    """Check whether a type name is one of the supported primitives."""
    name = normalize_type(type_str)
    if name in _SIMPLE_TYPES:
        return True

    match = _SIZED_INT.fullmatch(name)
    if match:
        bits = int(match.group(1))
        return 8 <= bits <= 256 and bits % 8 == 0

    match = _SIZED_BYTES.fullmatch(name)
    if match:
        return 1 <= int(match.group(1)) <= 32

    return False


def needs_data_location(type_str: str) -> bool:
    return normalize_type(type_str) in DYNAMIC_TYPES


# ---------------------------------------------------------------------------
# Standard-library (OpenZeppelin v5) base contracts
# ---------------------------------------------------------------------------

OPENZEPPELIN_PREFIX = "@openzeppelin/contracts"

STANDARD_LIBRARY_IMPORTS: Dict[str, str] = {
    # ERC20 family
    "ERC20": "token/ERC20/ERC20.sol",
    "ERC20Burnable": "token/ERC20/extensions/ERC20Burnable.sol",
    "ERC20Capped": "token/ERC20/extensions/ERC20Capped.sol",
    "ERC20Pausable": "token/ERC20/extensions/ERC20Pausable.sol",
    "ERC20Permit": "token/ERC20/extensions/ERC20Permit.sol",
    "ERC20Votes": "token/ERC20/extensions/ERC20Votes.sol",
    "ERC20FlashMint": "token/ERC20/extensions/ERC20FlashMint.sol",
    # ERC721 family
    "ERC721": "token/ERC721/ERC721.sol",
    "ERC721Burnable": "token/ERC721/extensions/ERC721Burnable.sol",
    "ERC721Enumerable": "token/ERC721/extensions/ERC721Enumerable.sol",
    "ERC721URIStorage": "token/ERC721/extensions/ERC721URIStorage.sol",
    "ERC721Pausable": "token/ERC721/extensions/ERC721Pausable.sol",
    # ERC1155 family
    "ERC1155": "token/ERC1155/ERC1155.sol",
    "ERC1155Burnable": "token/ERC1155/extensions/ERC1155Burnable.sol",
    "ERC1155Supply": "token/ERC1155/extensions/ERC1155Supply.sol",
    "ERC1155Pausable": "token/ERC1155/extensions/ERC1155Pausable.sol",
    # Access control
    "Ownable": "access/Ownable.sol",
    "Ownable2Step": "access/Ownable2Step.sol",
    "AccessControl": "access/AccessControl.sol",
    # Security utilities (moved to utils/ in v5)
    "Pausable": "utils/Pausable.sol",
    "ReentrancyGuard": "utils/ReentrancyGuard.sol",
}


def import_path_for(base: str) -> Optional[str]:
    """Import path for a recognized base contract, None for anything else."""
    relative = STANDARD_LIBRARY_IMPORTS.get(base)
    if relative is None:
        return None
    return f"{OPENZEPPELIN_PREFIX}/{relative}"


# ---------------------------------------------------------------------------
# Reserved words
# ---------------------------------------------------------------------------

RESERVED_WORDS: FrozenSet[str] = frozenset(
    {
        "abstract", "address", "anonymous", "as", "assembly", "bool", "break",
        "bytes", "calldata", "catch", "constant", "constructor", "continue",
        "contract", "delete", "do", "else", "emit", "enum", "error", "event",
        "external", "fallback", "false", "for", "function", "if", "immutable",
        "import", "indexed", "interface", "internal", "is", "library",
        "mapping", "memory", "modifier", "new", "override", "payable",
        "pragma", "private", "public", "pure", "receive", "return",
        "returns", "revert", "storage", "string", "struct", "this", "throw",
        "true", "try", "type", "uint", "int", "unchecked", "using", "var",
        "view", "virtual", "while",
        # Reserved for future use
        "after", "alias", "apply", "auto", "byte", "case", "copyof", "default",
        "define", "final", "implements", "in", "inline", "let", "macro",
        "match", "mutable", "null", "of", "partial", "promise", "reference",
        "relocatable", "sealed", "sizeof", "static", "supports", "switch",
        "typedef", "typeof",
        # Ether and time units
        "wei", "gwei", "ether", "seconds", "minutes", "hours", "days", "weeks",
        "years",
    }
)


def is_reserved(name: str) -> bool:
    """Keywords and elementary type names cannot be used as identifiers."""
    if name in RESERVED_WORDS:
        return True
    return is_value_type(name) and " " not in name
