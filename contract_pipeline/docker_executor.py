"""
Docker Executor
===============

Runs `solc --standard-json` inside the official compiler image, so no
local toolchain is needed. Every invocation gets its own temp directory,
mounted at /sb, which is removed afterwards; concurrent compiles of the
same contract name never share files.
"""

import json
import os
import shutil
import tempfile
from typing import List, Optional, Tuple

import docker
import docker.errors
import requests

from .errors import CompileError, NetworkError, RequestTimeoutError

INPUT_FILENAME = "input.json"
LIB_MOUNT = "/sb/lib"


class DockerExecutor:
    """Execute solc in a Docker container"""

    def __init__(self, verbose: bool = False, client=None):
        self.verbose = verbose
        self._client = client

    def _get_client(self):
        if self._client is None:
            try:
                self._client = docker.from_env()
                self._client.info()  # Test connection
            except docker.errors.DockerException as e:
                raise NetworkError(f"Docker not available: {e}. Is Docker installed and running?")
        return self._client

    def execute(
        self,
        standard_input: dict,
        image: str,
        timeout: float = 60,
        lib_path: Optional[str] = None,
    ) -> Tuple[Optional[int], List[str], bytes]:
        """
        Run solc in a container

        Args:
            standard_input: solc standard-JSON input
            image: Docker image with solc as entrypoint
            timeout: Timeout in seconds
            lib_path: Host directory mounted read-only at /sb/lib

        Returns:
            (exit_code, stderr_lines, stdout_bytes); exit_code is None on timeout
        """
        client = self._get_client()
        sbdir = tempfile.mkdtemp(prefix="solc-")

        try:
            with open(os.path.join(sbdir, INPUT_FILENAME), "w", encoding="utf8") as f:
                json.dump(standard_input, f)

            self._ensure_image(image)

            volumes = {sbdir: {"bind": "/sb", "mode": "rw"}}
            if lib_path:
                volumes[os.path.abspath(lib_path)] = {"bind": LIB_MOUNT, "mode": "ro"}

            command = ["--standard-json", f"/sb/{INPUT_FILENAME}", "--allow-paths", "/sb"]
            if self.verbose:
                print(f"    [DEBUG] Image: {image}")
                print(f"    [DEBUG] Command: solc {' '.join(command)}")

            container = None
            exit_code = None
            try:
                container = client.containers.run(
                    image=image,
                    command=command,
                    volumes=volumes,
                    working_dir="/sb",
                    network_disabled=True,
                    detach=True,
                )

                try:
                    result = container.wait(timeout=timeout)
                    exit_code = result["StatusCode"]
                except (requests.exceptions.ReadTimeout, requests.exceptions.ConnectionError):
                    try:
                        container.stop(timeout=10)
                    except docker.errors.APIError:
                        pass
                    exit_code = None

                stdout = container.logs(stdout=True, stderr=False)
                stderr = container.logs(stdout=False, stderr=True)
                logs = stderr.decode("utf8", errors="replace").splitlines()
            finally:
                if container is not None:
                    try:
                        container.remove(force=True)
                    except docker.errors.APIError:
                        pass

            return exit_code, logs, stdout

        finally:
            shutil.rmtree(sbdir, ignore_errors=True)

    def _ensure_image(self, image: str) -> None:
        """Pull the image on first use"""
        try:
            self._client.images.get(image)
        except docker.errors.ImageNotFound:
            print(f"  📦 Pulling Docker image: {image}")
            try:
                self._client.images.pull(image)
            except docker.errors.APIError as e:
                raise NetworkError(f"Failed to pull Docker image {image}: {e}")


def run_solc(executor: DockerExecutor, standard_input: dict, image: str,
             timeout: float, lib_path: Optional[str] = None) -> dict:
    """Run solc through the executor and return its standard-JSON output"""
    exit_code, logs, stdout = executor.execute(standard_input, image, timeout, lib_path)

    if exit_code is None:
        raise RequestTimeoutError(f"Compiler timed out after {timeout:g}s")

    text = stdout.decode("utf8", errors="replace").strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        detail = "\n".join(logs[-20:]) or text[:500] or f"exit code {exit_code}"
        raise CompileError(f"Compiler produced no JSON output: {detail}")
