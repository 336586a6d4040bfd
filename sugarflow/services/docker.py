"""Container helpers: build the dev image and run a per-ticket container.

Thin wrappers over the docker CLI; no logic beyond argument assembly.
"""

import logging
import subprocess
from pathlib import Path
from typing import List


class DockerError(Exception):
    """Raised when a docker command fails."""

    pass


def _run_docker(args: list[str], timeout: int, log: logging.Logger | None = None) -> str:
    """Run docker command and return stdout; raise DockerError on failure."""
    cmd = ["docker"] + args
    try:
        result = subprocess.run(cmd, check=True, capture_output=True, text=True, timeout=timeout)
    except subprocess.CalledProcessError as e:
        err = (e.stderr or e.stdout or "").strip()
        if log:
            log.warning("Docker %s failed: %s", args[:1], err)
        raise DockerError(f"docker {args[0]}: {err}") from e
    except subprocess.TimeoutExpired as e:
        raise DockerError(f"docker {args[0]}: timed out after {e.timeout}s") from e
    except FileNotFoundError as e:
        raise DockerError("docker not found") from e
    return result.stdout


def build_image(
    dockerfile: Path,
    tag: str,
    timeout: int = 1800,
    log: logging.Logger | None = None,
) -> None:
    """Build tag from dockerfile, using its directory as build context."""
    dockerfile = Path(dockerfile).resolve()
    if not dockerfile.is_file():
        raise DockerError(f"Dockerfile not found at {dockerfile}")
    _run_docker(["build", "-t", tag, "-f", str(dockerfile), str(dockerfile.parent)], timeout=timeout, log=log)
    if log:
        log.info("Docker image '%s' built", tag)


def run_container(
    name: str,
    workspace: Path,
    image: str,
    ports: List[str],
    setup_command: str,
    timeout: int = 1800,
    log: logging.Logger | None = None,
) -> str:
    """Start a detached container with workspace mounted at /app, then run setup inside it.

    Returns:
        Container id.
    """
    args = ["run", "-d"]
    for mapping in ports:
        args += ["-p", mapping]
    args += ["--name", name, "-v", f"{Path(workspace).resolve()}:/app", image]
    _run_docker(args, timeout=timeout, log=log)
    if log:
        log.info("Docker container '%s' started", name)

    container_id = _run_docker(["ps", "-qf", f"name={name}"], timeout=60, log=log).strip()
    if not container_id:
        raise DockerError(f"Could not retrieve container ID for {name}.")
    _run_docker(["exec", "-i", container_id, "sh", "-c", setup_command], timeout=timeout, log=log)
    if log:
        log.info("Container '%s' is running and configured", name)
    return container_id
