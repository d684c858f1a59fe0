"""
Settings Loader
===============

Compiler, deploy and network configuration loaded from YAML, with
environment overrides (a local .env file is read first).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv

from contract_builder import ValidationError

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

COMPILER_BACKENDS = ("solcx", "docker", "remote")


@dataclass
class Settings:
    """Resolved pipeline configuration"""
    compiler_backend: str = "solcx"
    solc_version: str = "0.8.20"
    compile_timeout: float = 60
    evm_version: Optional[str] = "paris"
    optimizer_enabled: bool = True
    optimizer_runs: int = 200
    docker_image: str = "ethereum/solc:{version}"
    remote_url: str = "http://localhost:8080/compile"
    openzeppelin_path: Optional[str] = None
    deploy_timeout: float = 120
    networks: Dict[str, str] = field(default_factory=dict)

    @property
    def docker_image_name(self) -> str:
        return self.docker_image.format(version=self.solc_version)

    def remappings(self) -> list:
        """Import remappings so '@openzeppelin/...' resolves locally"""
        if not self.openzeppelin_path:
            return []
        root = Path(self.openzeppelin_path) / "@openzeppelin"
        return [f"@openzeppelin/={root.as_posix()}/"]

    def to_dict(self) -> Dict:
        return {
            "compiler_backend": self.compiler_backend,
            "solc_version": self.solc_version,
            "compile_timeout": self.compile_timeout,
            "evm_version": self.evm_version,
            "optimizer": {"enabled": self.optimizer_enabled, "runs": self.optimizer_runs},
            "docker_image": self.docker_image_name,
            "remote_url": self.remote_url,
            "openzeppelin_path": self.openzeppelin_path,
            "deploy_timeout": self.deploy_timeout,
            "networks": dict(self.networks),
        }


def read_config(path: Optional[str] = None) -> dict:
    """Read the YAML config file (empty dict if it does not exist)"""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return {}
    with open(config_path, "r", encoding="utf8") as f:
        return yaml.safe_load(f) or {}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got '{value}'")


def load_settings(path: Optional[str] = None, use_dotenv: bool = True) -> Settings:
    """
    Build Settings from the YAML file and the environment

    Args:
        path: YAML file (default: SANDBOX_CONFIG or the packaged config.yaml)
        use_dotenv: Read a .env file before looking at the environment

    Returns:
        Settings
    """
    if use_dotenv:
        load_dotenv()

    config = read_config(path or os.getenv("SANDBOX_CONFIG"))
    compiler = config.get("compiler", {}) or {}
    optimizer = compiler.get("optimizer", {}) or {}
    deploy = config.get("deploy", {}) or {}

    settings = Settings(
        compiler_backend=compiler.get("backend", "solcx"),
        solc_version=str(compiler.get("solc_version", "0.8.20")),
        compile_timeout=float(compiler.get("timeout", 60)),
        evm_version=compiler.get("evm_version"),
        optimizer_enabled=bool(optimizer.get("enabled", True)),
        optimizer_runs=int(optimizer.get("runs", 200)),
        docker_image=(compiler.get("docker", {}) or {}).get("image", "ethereum/solc:{version}"),
        remote_url=(compiler.get("remote", {}) or {}).get("url", "http://localhost:8080/compile"),
        deploy_timeout=float(deploy.get("timeout", 120)),
        networks={str(k): str(v) for k, v in (config.get("networks", {}) or {}).items()},
    )

    # Environment overrides
    settings.compiler_backend = os.getenv("SANDBOX_COMPILER", settings.compiler_backend)
    settings.solc_version = os.getenv("SOLC_VERSION", settings.solc_version)
    settings.remote_url = os.getenv("SANDBOX_COMPILER_URL", settings.remote_url)
    settings.openzeppelin_path = os.getenv("OPENZEPPELIN_PATH") or None
    settings.compile_timeout = _env_float("SANDBOX_COMPILE_TIMEOUT", settings.compile_timeout)
    settings.deploy_timeout = _env_float("SANDBOX_DEPLOY_TIMEOUT", settings.deploy_timeout)

    for key, value in os.environ.items():
        if key.startswith("SANDBOX_RPC_") and value:
            settings.networks[key[len("SANDBOX_RPC_"):].lower()] = value

    if settings.compiler_backend not in COMPILER_BACKENDS:
        raise ValueError(
            f"Unknown compiler backend '{settings.compiler_backend}' "
            f"(expected one of: {', '.join(COMPILER_BACKENDS)})"
        )

    return settings


def resolve_network(label: str, settings: Settings) -> str:
    """Map a network label (e.g. 'sepolia', 'local') to its provider URL"""
    url = settings.networks.get((label or "").strip().lower())
    if not url:
        known = ", ".join(sorted(settings.networks)) or "none configured"
        raise ValidationError("network", f"unknown network '{label}' (known: {known})")
    return url
