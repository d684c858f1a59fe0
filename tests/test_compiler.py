"""Tests for the compile client (no real compiler involved)"""

import threading
from unittest.mock import MagicMock

import pytest
import requests
import solcx
from solcx.exceptions import SolcError

from contract_pipeline.compiler import (
    CompileClient,
    RemoteCompilerBackend,
    SolcxBackend,
    build_compile_client,
    build_standard_input,
    parse_compiler_output,
)
from contract_pipeline.errors import (
    ArtifactMissingError,
    CompileError,
    ErrorKind,
    NetworkError,
    RequestTimeoutError,
)
from contract_pipeline.settings import Settings

from conftest import FakeBackend, solc_output

SOURCE = "// SPDX-License-Identifier: MIT\npragma solidity ^0.8.20;\n\ncontract Token {\n}\n"

SYNTAX_ERROR = {
    "severity": "error",
    "type": "ParserError",
    "message": "Expected ';' but got '}'",
    "formattedMessage": "ParserError: Expected ';' but got '}'\n --> Token.sol:5:1:",
}

UNUSED_WARNING = {
    "severity": "warning",
    "type": "Warning",
    "message": "Unused local variable.",
    "formattedMessage": "Warning: Unused local variable.\n --> Token.sol:7:9:",
}


def test_standard_input_shape():
    standard_input = build_standard_input(SOURCE, "Token", remappings=["@openzeppelin/=/lib/@openzeppelin/"],
                                          evm_version="paris")
    assert standard_input["language"] == "Solidity"
    assert standard_input["sources"] == {"Token.sol": {"content": SOURCE}}
    settings = standard_input["settings"]
    assert settings["outputSelection"] == {"*": {"*": ["abi", "evm.bytecode.object"]}}
    assert settings["remappings"] == ["@openzeppelin/=/lib/@openzeppelin/"]
    assert settings["evmVersion"] == "paris"


def test_parse_output_selects_named_contract_and_prefixes_bytecode():
    output = solc_output("Token")
    output["contracts"]["Token.sol"]["Helper"] = {"abi": [], "evm": {"bytecode": {"object": "60aa"}}}
    artifact, warnings = parse_compiler_output(output, "Token")
    assert artifact.contract_name == "Token"
    assert artifact.bytecode == "0x6080604052"
    assert warnings == []


def test_parse_output_errors_are_concatenated():
    second = dict(SYNTAX_ERROR, formattedMessage="TypeError: Undeclared identifier.")
    with pytest.raises(CompileError) as exc:
        parse_compiler_output({"errors": [SYNTAX_ERROR, UNUSED_WARNING, second]}, "Token")
    assert "ParserError: Expected ';'" in exc.value.message
    assert "TypeError: Undeclared identifier." in exc.value.message
    assert "\n\n" in exc.value.message
    assert "Unused local variable" not in exc.value.message


def test_parse_output_warnings_do_not_abort():
    artifact, warnings = parse_compiler_output(solc_output(errors=[UNUSED_WARNING]), "Token")
    assert artifact.bytecode.startswith("0x")
    assert warnings == [UNUSED_WARNING["formattedMessage"].strip()]


def test_parse_output_missing_contract():
    with pytest.raises(ArtifactMissingError) as exc:
        parse_compiler_output(solc_output("Other", filename="Token.sol"), "Token")
    assert "Other" in exc.value.message


def test_parse_output_abstract_contract_has_no_bytecode():
    with pytest.raises(ArtifactMissingError):
        parse_compiler_output(solc_output(bytecode=""), "Token")


def test_compile_success(fake_backend):
    client = CompileClient(fake_backend, timeout=5)
    result = client.compile(SOURCE, "Token")
    assert result.success
    assert result.artifact.bytecode == "0x6080604052"
    assert result.artifact.source_hash
    assert fake_backend.calls[0][1] == 5


def test_compile_syntax_error_returns_compiler_text():
    client = CompileClient(FakeBackend(output={"errors": [SYNTAX_ERROR]}))
    result = client.compile(SOURCE, "Token")
    assert not result.success
    assert result.error_kind == ErrorKind.COMPILE
    assert result.artifact is None
    assert "Expected ';' but got '}'" in result.message


def test_compile_name_mismatch_is_artifact_missing(fake_backend):
    result = CompileClient(fake_backend).compile(SOURCE, "Wallet")
    assert result.error_kind == ErrorKind.ARTIFACT_MISSING


def test_compile_validates_input(fake_backend):
    client = CompileClient(fake_backend)
    assert client.compile("   ", "Token").error_kind == ErrorKind.VALIDATION
    assert client.compile(SOURCE, "not valid").error_kind == ErrorKind.VALIDATION
    assert fake_backend.calls == []


def test_network_and_timeout_are_distinct_and_retryable():
    network = CompileClient(FakeBackend(error=NetworkError("down"))).compile(SOURCE, "Token")
    timeout = CompileClient(FakeBackend(error=RequestTimeoutError("slow"))).compile(SOURCE, "Token")
    assert network.error_kind == ErrorKind.NETWORK
    assert timeout.error_kind == ErrorKind.TIMEOUT
    assert network.retryable and timeout.retryable


def test_successful_results_are_cached(fake_backend):
    client = CompileClient(fake_backend)
    first = client.compile(SOURCE, "Token")
    second = client.compile(SOURCE, "Token")
    assert first is second
    assert len(fake_backend.calls) == 1


def test_failures_are_not_cached():
    backend = FakeBackend(error=NetworkError("down"))
    client = CompileClient(backend)
    client.compile(SOURCE, "Token")
    client.compile(SOURCE, "Token")
    assert len(backend.calls) == 2


def test_cache_evicts_oldest():
    backend = FakeBackend()
    client = CompileClient(backend, cache_size=1)
    client.compile(SOURCE, "Token")
    client.compile(SOURCE + "\n", "Token")
    client.compile(SOURCE, "Token")
    assert len(backend.calls) == 3


def _response(status, payload=None, text=""):
    response = MagicMock()
    response.status_code = status
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


def test_remote_backend_posts_standard_json():
    session = MagicMock()
    session.post.return_value = _response(200, solc_output())
    backend = RemoteCompilerBackend("http://compiler/compile", session=session)

    result = CompileClient(backend, timeout=7).compile(SOURCE, "Token")

    assert result.success
    _, kwargs = session.post.call_args
    assert kwargs["timeout"] == 7
    assert kwargs["json"]["sources"]["Token.sol"]["content"] == SOURCE


@pytest.mark.parametrize("exc, kind", [
    (requests.exceptions.ReadTimeout("slow"), ErrorKind.TIMEOUT),
    (requests.exceptions.ConnectionError("refused"), ErrorKind.NETWORK),
])
def test_remote_backend_transport_errors(exc, kind):
    session = MagicMock()
    session.post.side_effect = exc
    backend = RemoteCompilerBackend("http://compiler/compile", session=session)
    assert CompileClient(backend).compile(SOURCE, "Token").error_kind == kind


def test_remote_backend_bad_responses():
    session = MagicMock()
    backend = RemoteCompilerBackend("http://compiler/compile", session=session)

    session.post.return_value = _response(503)
    assert CompileClient(backend).compile(SOURCE, "Token").error_kind == ErrorKind.NETWORK

    session.post.return_value = _response(400, text="bad input")
    result = CompileClient(backend).compile(SOURCE, "Token")
    assert result.error_kind == ErrorKind.COMPILE
    assert "bad input" in result.message

    session.post.return_value = _response(200, ValueError("not json"))
    assert CompileClient(backend).compile(SOURCE, "Token").error_kind == ErrorKind.NETWORK


def test_build_compile_client_picks_backend_and_remappings():
    remote = build_compile_client(Settings(compiler_backend="remote", remote_url="http://c/compile"))
    assert remote.backend.name == "remote"
    assert remote.remappings == []

    docker_client = build_compile_client(Settings(compiler_backend="docker", openzeppelin_path="/oz"))
    assert docker_client.backend.name == "docker"
    assert docker_client.backend.image == "ethereum/solc:0.8.20"
    assert docker_client.remappings == ["@openzeppelin/=/sb/lib/@openzeppelin/"]

    local = build_compile_client(Settings(openzeppelin_path="/oz", compile_timeout=9))
    assert local.backend.name == "solcx"
    assert local.remappings == ["@openzeppelin/=/oz/@openzeppelin/"]
    assert local.timeout == 9


@pytest.fixture
def local_solc(monkeypatch):
    """py-solc-x with 0.8.20 installed and a canned compiler output"""
    calls = {"install": [], "compile": []}

    def compile_standard(standard_input, **kwargs):
        calls["compile"].append((standard_input, kwargs))
        return solc_output()

    monkeypatch.setattr(solcx, "get_installed_solc_versions", lambda: ["0.8.20"])
    monkeypatch.setattr(solcx, "install_solc", lambda version: calls["install"].append(version))
    monkeypatch.setattr(solcx, "compile_standard", compile_standard)
    return calls


def test_solcx_backend_compiles_with_installed_version(local_solc):
    result = CompileClient(SolcxBackend("0.8.20", allow_paths="/opt/oz")).compile(SOURCE, "Token")
    assert result.success
    assert result.artifact.bytecode == "0x6080604052"
    assert local_solc["install"] == []
    standard_input, kwargs = local_solc["compile"][0]
    assert standard_input["sources"]["Token.sol"]["content"] == SOURCE
    assert kwargs == {"allow_paths": "/opt/oz", "solc_version": "0.8.20"}


def test_solcx_backend_installs_missing_version(local_solc, monkeypatch):
    monkeypatch.setattr(solcx, "get_installed_solc_versions", lambda: [])
    assert CompileClient(SolcxBackend("0.8.24")).compile(SOURCE, "Token").success
    assert local_solc["install"] == ["0.8.24"]


def test_solcx_backend_download_failure_is_network(local_solc, monkeypatch):
    def install_solc(version):
        raise requests.exceptions.ConnectionError("binaries.soliditylang.org unreachable")

    monkeypatch.setattr(solcx, "get_installed_solc_versions", lambda: [])
    monkeypatch.setattr(solcx, "install_solc", install_solc)
    result = CompileClient(SolcxBackend("0.8.20")).compile(SOURCE, "Token")
    assert result.error_kind == ErrorKind.NETWORK
    assert "0.8.20" in result.message
    assert local_solc["compile"] == []


def test_solcx_backend_error_diagnostics_become_compile_error(local_solc, monkeypatch):
    def compile_standard(standard_input, **kwargs):
        raise SolcError(
            "solc returned errors",
            command=["solc", "--standard-json"],
            return_code=1,
            stdin_data="",
            stdout_data="",
            stderr_data="",
            error_dict=[SYNTAX_ERROR],
        )

    monkeypatch.setattr(solcx, "compile_standard", compile_standard)
    result = CompileClient(SolcxBackend("0.8.20")).compile(SOURCE, "Token")
    assert result.error_kind == ErrorKind.COMPILE
    assert "ParserError: Expected ';' but got '}'" in result.message
    assert not result.retryable


def test_solcx_backend_crash_without_diagnostics(local_solc, monkeypatch):
    def compile_standard(standard_input, **kwargs):
        raise SolcError(
            "solc crashed",
            command=["solc", "--standard-json"],
            return_code=134,
            stdin_data="",
            stdout_data="",
            stderr_data="Segmentation fault",
        )

    monkeypatch.setattr(solcx, "compile_standard", compile_standard)
    result = CompileClient(SolcxBackend("0.8.20")).compile(SOURCE, "Token")
    assert result.error_kind == ErrorKind.COMPILE
    assert "solc crashed" in result.message


def test_solcx_backend_slow_download_hits_compile_timeout(local_solc, monkeypatch):
    release = threading.Event()

    def install_solc(version):
        release.wait(5)
        raise requests.exceptions.ConnectionError("download abandoned")

    monkeypatch.setattr(solcx, "get_installed_solc_versions", lambda: [])
    monkeypatch.setattr(solcx, "install_solc", install_solc)
    try:
        result = CompileClient(SolcxBackend("0.8.20"), timeout=0.1).compile(SOURCE, "Token")
    finally:
        release.set()
    assert result.error_kind == ErrorKind.TIMEOUT
    assert result.retryable
