"""
Sandbox session: edit a contract description, preview it, compile it and
deploy the artifact compiled from the current source.
"""

from typing import Callable, Optional, Union

from contract_builder import (
    ContractDescription,
    ValidationError,
    editing,
    generate_solidity,
    presets,
    validate_description,
)

from .arguments import parse_constructor_args
from .compiler import CompileClient, build_compile_client, source_hash
from .deployer import DeployClient, DeployRequest
from .errors import ArtifactMissingError, ErrorKind, PipelineError
from .guard import InFlightGuard
from .models import CompiledArtifact, CompileResult, DeploymentResult
from .settings import Settings, load_settings, resolve_network
from .utils import redact

EDIT_OPERATIONS = {
    "set_name": editing.set_name,
    "set_inheritance": editing.set_inheritance,
    "add_variable": editing.add_variable,
    "update_variable": editing.update_variable,
    "remove_variable": editing.remove_variable,
    "add_function": editing.add_function,
    "update_function": editing.update_function,
    "remove_function": editing.remove_function,
    "add_event": editing.add_event,
    "update_event": editing.update_event,
    "remove_event": editing.remove_event,
    "set_constructor": editing.set_constructor,
    "clear_constructor": editing.clear_constructor,
}


class SandboxSession:
    """One user's editing state plus the compile and deploy clients"""

    def __init__(
        self,
        description: Optional[ContractDescription] = None,
        compile_client: Optional[CompileClient] = None,
        deploy_client: Optional[DeployClient] = None,
        settings: Optional[Settings] = None,
        verbose: bool = False,
    ):
        self.settings = settings or load_settings()
        self.verbose = verbose
        self.compile_client = compile_client or build_compile_client(self.settings, verbose=verbose)
        self.deploy_client = deploy_client or DeployClient(
            timeout=self.settings.deploy_timeout, verbose=verbose
        )
        self._description = description if description is not None else presets.default_contract()
        self.artifact: Optional[CompiledArtifact] = None
        self._compiles = InFlightGuard("compile")
        self._deploys = InFlightGuard("deploy")

    @property
    def description(self) -> ContractDescription:
        return self._description

    def edit(self, operation: Union[str, Callable], *args) -> ContractDescription:
        """
        Apply an editing operation and keep the result

        `operation` is a name from EDIT_OPERATIONS or any callable taking
        the current description first. Raises ValidationError and leaves
        the description unchanged if the edit is rejected.
        """
        if isinstance(operation, str):
            if operation not in EDIT_OPERATIONS:
                raise ValidationError("operation", f"unknown edit '{operation}'")
            operation = EDIT_OPERATIONS[operation]
        self._description = operation(self._description, *args)
        # The artifact belongs to the source before this edit
        self.artifact = None
        return self._description

    def preview(self) -> str:
        return generate_solidity(self._description)

    def compile(self) -> CompileResult:
        description = self._description
        name = description.name

        print("\n" + "=" * 80)
        print(f"COMPILE: {name}")
        print("=" * 80)

        try:
            validate_description(description)
        except ValidationError as e:
            print(f"  ✗ Invalid contract: {e}")
            self.artifact = None
            return CompileResult.failed(name, ErrorKind.VALIDATION, str(e))

        source = generate_solidity(description)
        if self.verbose:
            print(f"    [DEBUG] Source: {len(source.splitlines())} lines")

        try:
            with self._compiles.hold(name):
                print("\n[1/1] Compiling")
                result = self.compile_client.compile(source, name)
        except PipelineError as e:
            print(f"  ✗ {e.message}")
            self.artifact = None
            return CompileResult.from_error(name, e)

        if result.success:
            self.artifact = result.artifact
            print(f"  ✓ Compiled ({len(result.artifact.bytecode) // 2 - 1} bytes)")
            for warning in result.warnings:
                print(f"  ⚠️ {warning.splitlines()[0]}")
        else:
            self.artifact = None
            print(f"  ✗ {result.error_kind.value}: {result.message}")
        return result

    def deploy(
        self,
        network: str,
        signing_key: str,
        constructor_args_text: str = "[]",
    ) -> DeploymentResult:
        artifact = self.artifact
        name = artifact.contract_name if artifact else self._description.name

        print("\n" + "=" * 80)
        print(f"DEPLOY: {name} → {network}")
        print("=" * 80)

        try:
            if artifact is None:
                raise ArtifactMissingError("No compiled artifact; compile first")
            if artifact.source_hash and artifact.source_hash != source_hash(self.preview()):
                raise ArtifactMissingError("Contract changed since the last compile; compile first")
            args = parse_constructor_args(constructor_args_text)
            provider_url = resolve_network(network, self.settings)
        except ValidationError as e:
            print(f"  ✗ {e}")
            return DeploymentResult.failed(ErrorKind.VALIDATION, str(e))
        except PipelineError as e:
            print(f"  ✗ {e.message}")
            return DeploymentResult.from_error(e)

        request = DeployRequest(
            abi=artifact.abi,
            bytecode=artifact.bytecode,
            provider_url=provider_url,
            signing_key=signing_key,
            constructor_args=args,
        )

        try:
            with self._deploys.hold(name):
                print("\n[1/1] Deploying")
                result = self.deploy_client.deploy(request)
        except PipelineError as e:
            print(f"  ✗ {e.message}")
            return DeploymentResult.from_error(e)

        if result.success:
            print(f"  ✓ Deployed at {result.contract_address}")
            print(f"  • Transaction: {result.transaction_hash}")
        else:
            print(f"  ✗ {result.error_kind.value}: {redact(result.message, signing_key)}")
        return result
