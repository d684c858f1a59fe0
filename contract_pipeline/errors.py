"""
Error taxonomy for the compile/deploy pipeline.

Clients raise these internally; every public entry point catches them and
returns a result object carrying the `ErrorKind` and message instead.
"""

from enum import Enum


class ErrorKind(Enum):
    """Why a compile or deploy attempt failed."""
    VALIDATION = "VALIDATION"
    COMPILE = "COMPILE"
    ARTIFACT_MISSING = "ARTIFACT_MISSING"
    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    DEPLOYMENT_REVERTED = "DEPLOYMENT_REVERTED"
    DEPLOYMENT_REJECTED = "DEPLOYMENT_REJECTED"
    ARGUMENT_PARSE = "ARGUMENT_PARSE"
    ARGUMENT_MISMATCH = "ARGUMENT_MISMATCH"
    BUSY = "BUSY"

    @property
    def retryable(self) -> bool:
        """Transient failures; safe to retry once the user confirms."""
        return self in (ErrorKind.NETWORK, ErrorKind.TIMEOUT)


class PipelineError(Exception):
    kind = ErrorKind.COMPILE

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CompileError(PipelineError):
    """The compiler reported one or more error-severity diagnostics."""
    kind = ErrorKind.COMPILE


class ArtifactMissingError(PipelineError):
    """Compilation succeeded but produced nothing for the requested contract."""
    kind = ErrorKind.ARTIFACT_MISSING


class NetworkError(PipelineError):
    """Compiler service or chain endpoint unreachable."""
    kind = ErrorKind.NETWORK


class RequestTimeoutError(NetworkError):
    kind = ErrorKind.TIMEOUT


class DeploymentRevertError(PipelineError):
    """The creation transaction was executed and reverted."""
    kind = ErrorKind.DEPLOYMENT_REVERTED


class DeploymentRejectedError(PipelineError):
    """The node refused the transaction (funds, nonce, gas...)."""
    kind = ErrorKind.DEPLOYMENT_REJECTED


class ArgumentParseError(PipelineError):
    """Constructor argument text is not a JSON array."""
    kind = ErrorKind.ARGUMENT_PARSE


class ArgumentMismatchError(PipelineError):
    """Constructor arguments do not match the ABI constructor inputs."""
    kind = ErrorKind.ARGUMENT_MISMATCH


class BusyError(PipelineError):
    """The same action is already in flight for this contract."""
    kind = ErrorKind.BUSY
