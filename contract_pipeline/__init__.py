"""
Compile & Deploy Pipeline
=========================

Compiles generated Solidity (py-solc-x, Docker or a remote compiler) and
deploys the resulting artifact through web3. Every public entry point
returns a result object; failures carry an ErrorKind instead of raising.
"""

from .arguments import check_constructor_args, parse_constructor_args
from .compiler import CompileClient, build_compile_client
from .deployer import DeployClient, DeployRequest
from .errors import ErrorKind, PipelineError
from .guard import InFlightGuard
from .models import CompiledArtifact, CompileResult, DeploymentResult
from .runner import SandboxSession
from .settings import Settings, load_settings, resolve_network

__all__ = [
    "check_constructor_args",
    "parse_constructor_args",
    "CompileClient",
    "build_compile_client",
    "DeployClient",
    "DeployRequest",
    "ErrorKind",
    "PipelineError",
    "InFlightGuard",
    "CompiledArtifact",
    "CompileResult",
    "DeploymentResult",
    "SandboxSession",
    "Settings",
    "load_settings",
    "resolve_network",
]
