"""
Deploy Client
=============

Signs and submits the creation transaction for a compiled artifact
through web3, then waits for the receipt.

Everything that can be checked locally (bytecode, constructor arguments,
signing key) is checked before the provider is contacted. Deploys are not
idempotent, so nothing here retries. The signing key only ever lives in
memory: it is excluded from repr and redacted from every message.
"""

import string
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import requests
from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted

from contract_builder import ValidationError

from .arguments import check_constructor_args
from .errors import (
    DeploymentRejectedError,
    DeploymentRevertError,
    ErrorKind,
    NetworkError,
    PipelineError,
    RequestTimeoutError,
)
from .models import DeploymentResult
from .utils import redact

REVERT_MARKERS = ("revert", "invalid opcode", "out of gas")


@dataclass
class DeployRequest:
    """What to deploy, where, and who signs it"""
    abi: List[Dict]
    bytecode: str
    provider_url: str
    signing_key: str = field(repr=False)
    constructor_args: List[Any] = field(default_factory=list)


def default_connect(provider_url: str, timeout: float) -> Web3:
    """Web3 over HTTP; the timeout applies to every RPC request"""
    return Web3(Web3.HTTPProvider(provider_url, request_kwargs={"timeout": timeout}))


def check_bytecode(bytecode: Optional[str]) -> str:
    """Normalized 0x-prefixed creation bytecode"""
    code = (bytecode or "").strip()
    body = code[2:] if code.lower().startswith("0x") else code
    if not body:
        raise ValidationError("bytecode", "is empty; compile the contract first")
    if len(body) % 2 or any(c not in string.hexdigits for c in body):
        raise ValidationError("bytecode", "is not a hex string")
    return "0x" + body


def load_account(signing_key: Optional[str]):
    """Local account for a 32-byte hex key; the key never appears in errors"""
    key = (signing_key or "").strip()
    body = key[2:] if key.lower().startswith("0x") else key
    if len(body) != 64 or any(c not in string.hexdigits for c in body):
        raise ValidationError("signingKey", "must be 32 bytes of hex (64 characters, optional 0x)")
    try:
        return Account.from_key("0x" + body)
    except Exception:
        raise ValidationError("signingKey", "is not a valid secp256k1 private key")


def _rpc_message(error: Exception) -> str:
    message = getattr(error, "message", None)
    if message:
        return str(message)
    if error.args and isinstance(error.args[0], dict):
        return str(error.args[0].get("message", error.args[0]))
    return str(error)


def translate_error(error: Exception) -> PipelineError:
    """Map a web3 / transport exception onto the pipeline taxonomy"""
    if isinstance(error, PipelineError):
        return error
    if isinstance(error, ContractLogicError):
        reason = _rpc_message(error)
        return DeploymentRevertError(f"Deployment reverted: {reason}")
    if isinstance(error, TimeExhausted):
        return RequestTimeoutError(f"Timed out waiting for the deployment receipt: {error}")
    if isinstance(error, requests.exceptions.Timeout):
        return RequestTimeoutError(f"Provider timed out: {error}")
    if isinstance(error, requests.exceptions.ConnectionError):
        return NetworkError(f"Provider unreachable: {error}")

    message = _rpc_message(error)
    if any(marker in message.lower() for marker in REVERT_MARKERS):
        return DeploymentRevertError(f"Deployment reverted: {message}")
    return DeploymentRejectedError(f"Transaction rejected by node: {message}")


class DeployClient:
    """Deploy a compiled artifact and return a DeploymentResult (never raises)"""

    def __init__(
        self,
        timeout: float = 120,
        connect: Optional[Callable[[str, float], Any]] = None,
        verbose: bool = False,
    ):
        self.timeout = timeout
        self.connect = connect or default_connect
        self.verbose = verbose

    def deploy(self, request: DeployRequest) -> DeploymentResult:
        """
        Deploy request.bytecode with request.constructor_args

        Returns:
            DeploymentResult with the contract address and transaction
            hash, or the ErrorKind and a (redacted) message
        """
        try:
            return self._deploy(request)
        except ValidationError as e:
            return DeploymentResult.failed(ErrorKind.VALIDATION, redact(str(e), request.signing_key))
        except PipelineError as e:
            return DeploymentResult.failed(e.kind, redact(e.message, request.signing_key))
        except Exception as e:
            error = translate_error(e)
            return DeploymentResult.failed(error.kind, redact(error.message, request.signing_key))

    def _deploy(self, request: DeployRequest) -> DeploymentResult:
        bytecode = check_bytecode(request.bytecode)
        args = check_constructor_args(request.abi, list(request.constructor_args or []))
        account = load_account(request.signing_key)

        if self.verbose:
            print(f"    [DEBUG] Deployer: {account.address}")
            print(f"    [DEBUG] Constructor args: {args}")

        w3 = self.connect(request.provider_url, self.timeout)
        if not w3.is_connected():
            raise NetworkError(f"Could not connect to provider at {request.provider_url}")

        contract = w3.eth.contract(abi=request.abi, bytecode=bytecode)
        nonce = w3.eth.get_transaction_count(account.address)
        chain_id = w3.eth.chain_id

        # Gas is estimated here; a constructor revert surfaces as ContractLogicError
        transaction = contract.constructor(*args).build_transaction({
            "from": account.address,
            "nonce": nonce,
            "chainId": chain_id,
        })

        signed = account.sign_transaction(transaction)
        tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hex = Web3.to_hex(tx_hash)
        print(f"  📤 Transaction sent: {tx_hex}")

        try:
            receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)
        except Exception as e:
            error = translate_error(e)
            message = (
                f"Transaction {tx_hex} was submitted but not confirmed; "
                f"check it on the network before deploying again. {error.message}"
            )
            return DeploymentResult.unconfirmed(tx_hex, error.kind, redact(message, request.signing_key))

        if receipt["status"] != 1:
            return DeploymentResult.unconfirmed(
                tx_hex, ErrorKind.DEPLOYMENT_REVERTED, f"Deployment transaction {tx_hex} reverted"
            )

        return DeploymentResult.ok(receipt["contractAddress"], tx_hex)
