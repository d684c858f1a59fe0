"""
Compile Client
==============

Sends generated Solidity to a compiler and returns a normalized
CompileResult for exactly the requested contract.

Backends all speak solc standard JSON, so diagnostics and artifact
selection are handled in one place:
- SolcxBackend: local solc managed by py-solc-x
- DockerSolcBackend: solc inside the ethereum/solc image
- RemoteCompilerBackend: a hosted compiler endpoint over HTTP
"""

import hashlib
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Callable, Dict, List, Optional, Tuple

import docker.errors
import requests
import solcx
from solcx.exceptions import SolcError

from contract_builder import ValidationError
from contract_builder.validator import validate_identifier

from .docker_executor import DockerExecutor, LIB_MOUNT, run_solc
from .errors import (
    ArtifactMissingError,
    CompileError,
    ErrorKind,
    NetworkError,
    PipelineError,
    RequestTimeoutError,
)
from .models import CompiledArtifact, CompileResult
from .settings import Settings

OUTPUT_SELECTION = ["abi", "evm.bytecode.object"]


def source_filename(contract_name: str) -> str:
    return f"{contract_name}.sol"


def source_hash(source_code: str) -> str:
    return hashlib.sha256(source_code.encode("utf-8")).hexdigest()


def build_standard_input(
    source_code: str,
    contract_name: str,
    remappings: Optional[List[str]] = None,
    optimize: bool = True,
    optimizer_runs: int = 200,
    evm_version: Optional[str] = None,
) -> Dict:
    """solc standard-JSON input with a single source file"""
    settings: Dict = {
        "optimizer": {"enabled": optimize, "runs": optimizer_runs},
        "outputSelection": {"*": {"*": list(OUTPUT_SELECTION)}},
    }
    if evm_version:
        settings["evmVersion"] = evm_version
    if remappings:
        settings["remappings"] = list(remappings)

    return {
        "language": "Solidity",
        "sources": {source_filename(contract_name): {"content": source_code}},
        "settings": settings,
    }


def _diagnostic_text(diagnostic: Dict) -> str:
    text = diagnostic.get("formattedMessage")
    if not text:
        text = f"{diagnostic.get('type', 'Error')}: {diagnostic.get('message', '')}"
    return text.strip()


def parse_compiler_output(
    output: Dict, contract_name: str, source_file: Optional[str] = None
) -> Tuple[CompiledArtifact, List[str]]:
    """
    Pick the named contract out of solc standard-JSON output

    Error-severity diagnostics become a single CompileError; warnings are
    returned alongside the artifact and never abort compilation.

    Returns:
        (artifact, warnings)
    """
    diagnostics = output.get("errors") or []
    errors = [d for d in diagnostics if d.get("severity") == "error"]
    warnings = [_diagnostic_text(d) for d in diagnostics if d.get("severity") != "error"]

    if errors:
        raise CompileError("\n\n".join(_diagnostic_text(d) for d in errors))

    contracts = output.get("contracts") or {}
    source_file = source_file or source_filename(contract_name)
    files = [source_file] + sorted(f for f in contracts if f != source_file)

    compiled = None
    for filename in files:
        compiled = (contracts.get(filename) or {}).get(contract_name)
        if compiled:
            break

    if not compiled:
        found = sorted({name for per_file in contracts.values() for name in per_file})
        raise ArtifactMissingError(
            f"Contract '{contract_name}' not found in compiler output "
            f"(found: {', '.join(found) or 'nothing'})"
        )

    bytecode = ((compiled.get("evm") or {}).get("bytecode") or {}).get("object") or ""
    if not bytecode:
        raise ArtifactMissingError(
            f"Contract '{contract_name}' has no bytecode; is it abstract or an interface?"
        )
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    artifact = CompiledArtifact(
        contract_name=contract_name,
        abi=list(compiled.get("abi") or []),
        bytecode=bytecode,
    )
    return artifact, warnings


def _call_with_timeout(fn: Callable[[], Dict], timeout: float) -> Dict:
    """Run fn, giving up (but not killing it) after timeout seconds"""
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(fn)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        raise RequestTimeoutError(f"Compiler timed out after {timeout:g}s")
    finally:
        executor.shutdown(wait=False)


# ============================================================================
# BACKENDS
# ============================================================================

class SolcxBackend:
    """Local solc through py-solc-x"""

    name = "solcx"

    def __init__(self, solc_version: str, allow_paths: Optional[str] = None, verbose: bool = False):
        self.solc_version = solc_version
        self.allow_paths = allow_paths
        self.verbose = verbose

    def _ensure_installed(self) -> None:
        installed = {str(v) for v in solcx.get_installed_solc_versions()}
        if self.solc_version in installed:
            return
        print(f"  📦 Installing solc {self.solc_version}")
        try:
            solcx.install_solc(self.solc_version)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not download solc {self.solc_version}: {e}")

    def _compile(self, standard_input: Dict) -> Dict:
        try:
            return solcx.compile_standard(
                standard_input,
                allow_paths=self.allow_paths,
                solc_version=self.solc_version,
            )
        except SolcError as e:
            # Error diagnostics are reported through the exception
            if getattr(e, "error_dict", None):
                return {"errors": e.error_dict}
            raise CompileError(getattr(e, "message", None) or str(e))

    def _install_and_compile(self, standard_input: Dict) -> Dict:
        self._ensure_installed()
        return self._compile(standard_input)

    def run(self, standard_input: Dict, timeout: float) -> Dict:
        # The timeout covers the solc download as well as the compile
        return _call_with_timeout(lambda: self._install_and_compile(standard_input), timeout)


class DockerSolcBackend:
    """solc --standard-json inside a container"""

    name = "docker"

    def __init__(self, image: str, lib_path: Optional[str] = None,
                 executor: Optional[DockerExecutor] = None, verbose: bool = False):
        self.image = image
        self.lib_path = lib_path
        self.executor = executor or DockerExecutor(verbose=verbose)

    def run(self, standard_input: Dict, timeout: float) -> Dict:
        try:
            return run_solc(self.executor, standard_input, self.image, timeout, self.lib_path)
        except docker.errors.DockerException as e:
            raise NetworkError(f"Docker error: {e}")
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Docker daemon unreachable: {e}")


class RemoteCompilerBackend:
    """Hosted compiler: POST standard JSON, receive standard JSON"""

    name = "remote"

    def __init__(self, url: str, session: Optional[requests.Session] = None):
        self.url = url
        self.session = session or requests.Session()

    def run(self, standard_input: Dict, timeout: float) -> Dict:
        try:
            response = self.session.post(self.url, json=standard_input, timeout=timeout)
        except requests.exceptions.Timeout:
            raise RequestTimeoutError(f"Compiler service timed out after {timeout:g}s")
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Compiler service unreachable: {e}")

        if response.status_code >= 500:
            raise NetworkError(f"Compiler service unavailable (HTTP {response.status_code})")
        if response.status_code >= 400:
            raise CompileError(
                f"Compiler service rejected the request (HTTP {response.status_code}): "
                f"{response.text[:500]}"
            )

        try:
            return response.json()
        except ValueError:
            raise NetworkError("Compiler service returned a non-JSON response")


# ============================================================================
# CLIENT
# ============================================================================

class CompileClient:
    """Compile generated source and return a CompileResult (never raises)"""

    def __init__(
        self,
        backend,
        timeout: float = 60,
        remappings: Optional[List[str]] = None,
        optimize: bool = True,
        optimizer_runs: int = 200,
        evm_version: Optional[str] = None,
        cache_size: int = 32,
        verbose: bool = False,
    ):
        self.backend = backend
        self.timeout = timeout
        self.remappings = list(remappings or [])
        self.optimize = optimize
        self.optimizer_runs = optimizer_runs
        self.evm_version = evm_version
        self.cache_size = cache_size
        self.verbose = verbose
        self._cache: "OrderedDict[Tuple[str, str], CompileResult]" = OrderedDict()

    def compile(self, source_code: str, contract_name: str) -> CompileResult:
        """
        Compile source_code and return the artifact for contract_name

        Args:
            source_code: Solidity source (non-empty)
            contract_name: Name of the contract declared in the source

        Returns:
            CompileResult; on failure error_kind tells why
        """
        try:
            return self._compile(source_code, contract_name)
        except ValidationError as e:
            return CompileResult.failed(contract_name, ErrorKind.VALIDATION, str(e))
        except PipelineError as e:
            return CompileResult.from_error(contract_name, e)
        except Exception as e:
            return CompileResult.failed(contract_name, ErrorKind.COMPILE, f"Compilation failed: {e}")

    def _compile(self, source_code: str, contract_name: str) -> CompileResult:
        if not source_code or not source_code.strip():
            raise ValidationError("sourceCode", "must not be empty")
        validate_identifier(contract_name, "contractName")

        key = (source_hash(source_code), contract_name)
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            if self.verbose:
                print(f"    [DEBUG] Compile cache hit for {contract_name}")
            return cached

        standard_input = build_standard_input(
            source_code,
            contract_name,
            remappings=self.remappings,
            optimize=self.optimize,
            optimizer_runs=self.optimizer_runs,
            evm_version=self.evm_version,
        )

        if self.verbose:
            print(f"    [DEBUG] Backend: {getattr(self.backend, 'name', type(self.backend).__name__)}")
            print(f"    [DEBUG] Timeout: {self.timeout:g}s")

        output = self.backend.run(standard_input, self.timeout)
        artifact, warnings = parse_compiler_output(output, contract_name)
        artifact.source_hash = key[0]

        result = CompileResult.ok(artifact, warnings)
        self._remember(key, result)
        return result

    def _remember(self, key: Tuple[str, str], result: CompileResult) -> None:
        if self.cache_size <= 0:
            return
        self._cache[key] = result
        self._cache.move_to_end(key)
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)


def build_compile_client(settings: Settings, verbose: bool = False) -> CompileClient:
    """CompileClient wired to the configured backend"""
    remappings = settings.remappings()

    if settings.compiler_backend == "docker":
        backend = DockerSolcBackend(
            settings.docker_image_name,
            lib_path=settings.openzeppelin_path,
            verbose=verbose,
        )
        if settings.openzeppelin_path:
            remappings = [f"@openzeppelin/={LIB_MOUNT}/@openzeppelin/"]
    elif settings.compiler_backend == "remote":
        backend = RemoteCompilerBackend(settings.remote_url)
        remappings = []
    else:
        backend = SolcxBackend(
            settings.solc_version,
            allow_paths=settings.openzeppelin_path,
            verbose=verbose,
        )

    return CompileClient(
        backend,
        timeout=settings.compile_timeout,
        remappings=remappings,
        optimize=settings.optimizer_enabled,
        optimizer_runs=settings.optimizer_runs,
        evm_version=settings.evm_version,
        verbose=verbose,
    )
