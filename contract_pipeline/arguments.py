"""
Constructor arguments: parse the user's text, then check it against the ABI.
Both run before anything is sent to a node.
"""

import json
import re
from typing import Any, Dict, List

from eth_abi import is_encodable
from eth_utils import is_address, to_checksum_address

from .errors import ArgumentMismatchError, ArgumentParseError

_INT_TYPE = re.compile(r"u?int(\d*)")
_DECIMAL = re.compile(r"-?\d+")


def parse_constructor_args(text: str) -> List[Any]:
    """
    Parse constructor arguments typed as a JSON array

    Blank text means "no arguments".

    Raises:
        ArgumentParseError: text is not a JSON array
    """
    if text is None or not text.strip():
        return []
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise ArgumentParseError(f"Constructor arguments must be a JSON array: {e.msg}")
    if not isinstance(value, list):
        raise ArgumentParseError(
            f"Constructor arguments must be a JSON array, got {type(value).__name__}"
        )
    return value


def abi_type(entry: Dict) -> str:
    """Canonical type string for an ABI input, expanding tuples"""
    type_str = entry.get("type", "")
    if type_str.startswith("tuple"):
        inner = ",".join(abi_type(c) for c in entry.get("components", []))
        return f"({inner}){type_str[len('tuple'):]}"
    return type_str


def _coerce(type_str: str, value: Any) -> Any:
    # Integers arrive as decimal strings from text fields and as JSON numbers
    if _INT_TYPE.fullmatch(type_str) and isinstance(value, str) and _DECIMAL.fullmatch(value.strip()):
        return int(value.strip())
    if type_str == "address" and isinstance(value, str) and is_address(value):
        return to_checksum_address(value)
    return value


def check_constructor_args(abi: List[Dict], args: List[Any]) -> List[Any]:
    """
    Check args against the ABI constructor and return them ready to encode

    Raises:
        ArgumentMismatchError: wrong count, or a value that cannot be
            encoded as its declared type
    """
    inputs: List[Dict] = []
    for entry in abi or []:
        if entry.get("type") == "constructor":
            inputs = list(entry.get("inputs", []))
            break

    if len(args) != len(inputs):
        raise ArgumentMismatchError(
            f"Constructor expects {len(inputs)} argument(s), got {len(args)}"
        )

    coerced = []
    for position, (entry, value) in enumerate(zip(inputs, args)):
        type_str = abi_type(entry)
        value = _coerce(type_str, value)
        if not is_encodable(type_str, value):
            label = entry.get("name") or f"#{position}"
            raise ArgumentMismatchError(
                f"Constructor argument {label} ({type_str}) cannot take value {value!r}"
            )
        coerced.append(value)

    return coerced
