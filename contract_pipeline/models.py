"""
Data Models for the compile/deploy pipeline
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import ErrorKind, PipelineError


@dataclass
class CompiledArtifact:
    """ABI + creation bytecode for one contract"""
    contract_name: str
    abi: List[Dict]
    bytecode: str
    source_hash: Optional[str] = None

    def constructor_inputs(self) -> List[Dict]:
        """Declared constructor inputs (empty when there is no constructor)"""
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return list(entry.get("inputs", []))
        return []

    def to_dict(self) -> Dict:
        """The record handed from the compile step to the deploy step"""
        return {
            "name": self.contract_name,
            "abi": self.abi,
            "bytecode": self.bytecode,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "CompiledArtifact":
        return cls(
            contract_name=data.get("name", ""),
            abi=list(data.get("abi") or []),
            bytecode=data.get("bytecode", ""),
        )


@dataclass
class CompileResult:
    """Outcome of one compile request"""
    success: bool
    contract_name: str
    artifact: Optional[CompiledArtifact] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls, artifact: CompiledArtifact, warnings: Optional[List[str]] = None) -> "CompileResult":
        return cls(
            success=True,
            contract_name=artifact.contract_name,
            artifact=artifact,
            message="Contract compiled successfully",
            warnings=list(warnings or []),
        )

    @classmethod
    def failed(cls, contract_name: str, kind: ErrorKind, message: str) -> "CompileResult":
        return cls(success=False, contract_name=contract_name, error_kind=kind, message=message)

    @classmethod
    def from_error(cls, contract_name: str, error: PipelineError) -> "CompileResult":
        return cls.failed(contract_name, error.kind, error.message)

    @property
    def retryable(self) -> bool:
        return bool(self.error_kind and self.error_kind.retryable)

    def to_dict(self) -> Dict:
        """Wire shape: {success, abi?, bytecode?, error?, errorKind?, warnings}"""
        data: Dict = {"success": self.success, "warnings": self.warnings}
        if self.success and self.artifact:
            data["abi"] = self.artifact.abi
            data["bytecode"] = self.artifact.bytecode
        else:
            data["error"] = self.message
            data["errorKind"] = self.error_kind.value if self.error_kind else None
        return data


@dataclass
class DeploymentResult:
    """Outcome of one deploy request, displayed once"""
    success: bool
    message: str
    contract_address: Optional[str] = None
    transaction_hash: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, contract_address: str, transaction_hash: str) -> "DeploymentResult":
        return cls(
            success=True,
            message="Contract deployed successfully",
            contract_address=contract_address,
            transaction_hash=transaction_hash,
        )

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> "DeploymentResult":
        return cls(success=False, message=message, error_kind=kind)

    @classmethod
    def from_error(cls, error: PipelineError) -> "DeploymentResult":
        return cls.failed(error.kind, error.message)

    @classmethod
    def unconfirmed(cls, transaction_hash: str, kind: ErrorKind, message: str) -> "DeploymentResult":
        """The creation transaction was sent but did not produce a contract"""
        return cls(success=False, message=message, transaction_hash=transaction_hash, error_kind=kind)

    @property
    def retryable(self) -> bool:
        # A sent transaction may still be mined; resending would deploy twice
        if self.transaction_hash:
            return False
        return bool(self.error_kind and self.error_kind.retryable)

    def to_dict(self) -> Dict:
        """Wire shape: {success, contractAddress?, transactionHash?, message, errorKind?}"""
        data: Dict = {"success": self.success, "message": self.message}
        if self.success:
            data["contractAddress"] = self.contract_address
            data["transactionHash"] = self.transaction_hash
        else:
            data["errorKind"] = self.error_kind.value if self.error_kind else None
            if self.transaction_hash:
                data["transactionHash"] = self.transaction_hash
        return data
