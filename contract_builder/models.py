"""Contract model: the structured description the builder edits.

All types are frozen dataclasses and every sequence is stored as a tuple,
so a ContractDescription can be treated as a plain value. Edits go through
`contract_builder.editing`, which always returns a new description.

`to_dict` / `from_dict` use the builder's JSON shape (camelCase keys).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from .catalog import Mutability, Visibility, normalize_type


def _visibility(value: Any, default: Visibility) -> Visibility:
    if isinstance(value, Visibility):
        return value
    if not value:
        return default
    return Visibility.from_string(str(value))


def _mutability(value: Any) -> Mutability:
    if isinstance(value, Mutability):
        return value
    return Mutability.from_string(str(value or ""))


@dataclass(frozen=True)
class VariableDeclaration:
    """A single state variable."""

    name: str
    type: str
    visibility: Visibility = Visibility.PRIVATE
    constant: bool = False
    default_value: Optional[str] = None

    def to_dict(self) -> Dict:
        data = {
            "name": self.name,
            "type": self.type,
            "visibility": self.visibility.value,
            "constant": self.constant,
        }
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "VariableDeclaration":
        default_value = data.get("defaultValue", data.get("default_value"))
        return cls(
            name=str(data.get("name", "")),
            type=normalize_type(str(data.get("type", ""))),
            visibility=_visibility(data.get("visibility"), Visibility.PRIVATE),
            constant=bool(data.get("constant", False)),
            default_value=None if default_value in (None, "") else str(default_value),
        )


@dataclass(frozen=True)
class Parameter:
    """Function input."""

    name: str
    type: str

    def to_dict(self) -> Dict:
        return {"name": self.name, "type": self.type}

    @classmethod
    def from_dict(cls, data: Dict) -> "Parameter":
        return cls(
            name=str(data.get("name", "")),
            type=normalize_type(str(data.get("type", ""))),
        )


@dataclass(frozen=True)
class ReturnSlot:
    """Function output; the name is optional."""

    type: str
    name: Optional[str] = None

    def to_dict(self) -> Dict:
        data: Dict[str, Any] = {"type": self.type}
        if self.name:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "ReturnSlot":
        return cls(
            type=normalize_type(str(data.get("type", ""))),
            name=data.get("name") or None,
        )


@dataclass(frozen=True)
class FunctionDeclaration:
    """A contract function. Input/output order defines its signature."""

    name: str
    inputs: Tuple[Parameter, ...] = ()
    outputs: Tuple[ReturnSlot, ...] = ()
    visibility: Visibility = Visibility.PUBLIC
    mutability: Mutability = Mutability.NONPAYABLE
    body: str = ""

    def __post_init__(self):
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(normalize_type(p.type) for p in self.inputs)})"

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "inputs": [p.to_dict() for p in self.inputs],
            "outputs": [o.to_dict() for o in self.outputs],
            "visibility": self.visibility.value,
            "stateMutability": self.mutability.value,
            "code": self.body,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "FunctionDeclaration":
        mutability = data.get("stateMutability", data.get("mutability"))
        body = data.get("code", data.get("body"))
        return cls(
            name=str(data.get("name", "")),
            inputs=tuple(Parameter.from_dict(p) for p in data.get("inputs", []) or []),
            outputs=tuple(ReturnSlot.from_dict(o) for o in data.get("outputs", []) or []),
            visibility=_visibility(data.get("visibility"), Visibility.PUBLIC),
            mutability=_mutability(mutability),
            body=str(body or ""),
        )


@dataclass(frozen=True)
class EventParameter:
    name: str
    type: str
    indexed: bool = False

    def to_dict(self) -> Dict:
        return {"name": self.name, "type": self.type, "indexed": self.indexed}

    @classmethod
    def from_dict(cls, data: Dict) -> "EventParameter":
        return cls(
            name=str(data.get("name", "")),
            type=normalize_type(str(data.get("type", ""))),
            indexed=bool(data.get("indexed", False)),
        )


@dataclass(frozen=True)
class EventDeclaration:
    name: str
    parameters: Tuple[EventParameter, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "parameters", tuple(self.parameters))

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(normalize_type(p.type) for p in self.parameters)})"

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "EventDeclaration":
        return cls(
            name=str(data.get("name", "")),
            parameters=tuple(
                EventParameter.from_dict(p) for p in data.get("parameters", []) or []
            ),
        )


@dataclass(frozen=True)
class BaseConstructorCall:
    """Arguments passed to an inherited contract's constructor.

    Arguments are source-language expressions, emitted verbatim
    (e.g. '"MyToken"', 'msg.sender').
    """

    base: str
    arguments: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "arguments", tuple(self.arguments))

    def to_dict(self) -> Dict:
        return {"base": self.base, "arguments": list(self.arguments)}

    @classmethod
    def from_dict(cls, data: Dict) -> "BaseConstructorCall":
        return cls(
            base=str(data.get("base", "")),
            arguments=tuple(str(a) for a in data.get("arguments", []) or []),
        )


@dataclass(frozen=True)
class ConstructorDeclaration:
    inputs: Tuple[Parameter, ...] = ()
    base_calls: Tuple[BaseConstructorCall, ...] = ()
    body: str = ""
    payable: bool = False

    def __post_init__(self):
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "base_calls", tuple(self.base_calls))

    def to_dict(self) -> Dict:
        return {
            "inputs": [p.to_dict() for p in self.inputs],
            "baseCalls": [c.to_dict() for c in self.base_calls],
            "code": self.body,
            "payable": self.payable,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ConstructorDeclaration":
        body = data.get("code", data.get("body"))
        return cls(
            inputs=tuple(Parameter.from_dict(p) for p in data.get("inputs", []) or []),
            base_calls=tuple(
                BaseConstructorCall.from_dict(c)
                for c in data.get("baseCalls", data.get("base_calls", [])) or []
            ),
            body=str(body or ""),
            payable=bool(data.get("payable", False)),
        )


@dataclass(frozen=True)
class ContractDescription:
    """Root aggregate: everything needed to render one contract.

    Owns its declarations exclusively; nothing is shared between
    descriptions.
    """

    name: str
    inherits_from: Tuple[str, ...] = ()
    variables: Tuple[VariableDeclaration, ...] = ()
    functions: Tuple[FunctionDeclaration, ...] = ()
    events: Tuple[EventDeclaration, ...] = ()
    constructor: Optional[ConstructorDeclaration] = None

    def __post_init__(self):
        object.__setattr__(self, "inherits_from", tuple(self.inherits_from))
        object.__setattr__(self, "variables", tuple(self.variables))
        object.__setattr__(self, "functions", tuple(self.functions))
        object.__setattr__(self, "events", tuple(self.events))

    @property
    def is_empty(self) -> bool:
        return not (self.variables or self.functions or self.events or self.constructor)

    def to_dict(self) -> Dict:
        data = {
            "name": self.name,
            "inheritsFrom": list(self.inherits_from),
            "variables": [v.to_dict() for v in self.variables],
            "functions": [f.to_dict() for f in self.functions],
            "events": [e.to_dict() for e in self.events],
        }
        if self.constructor is not None:
            data["constructor"] = self.constructor.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "ContractDescription":
        inherits = data.get("inheritsFrom", data.get("inherits", [])) or []
        constructor = data.get("constructor")
        return cls(
            name=str(data.get("name", "")),
            inherits_from=_strings(inherits),
            variables=tuple(VariableDeclaration.from_dict(v) for v in data.get("variables", []) or []),
            functions=tuple(FunctionDeclaration.from_dict(f) for f in data.get("functions", []) or []),
            events=tuple(EventDeclaration.from_dict(e) for e in data.get("events", []) or []),
            constructor=ConstructorDeclaration.from_dict(constructor) if constructor else None,
        )


def _strings(values: Iterable[Any]) -> Tuple[str, ...]:
    return tuple(str(v).strip() for v in values)
