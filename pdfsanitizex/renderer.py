"""Rendering collaborator turning an untrusted document into a pixel stream."""

from __future__ import annotations

import logging
from typing import Protocol

from .config import SanitizerConfig
from .exceptions import ExternalProcessError
from .utils import run_subprocess

_LOGGER = logging.getLogger("pdfsanitizex.renderer")


class Renderer(Protocol):
    """Anything able to rasterize document bytes into the pixel stream format."""

    def render(self, document: bytes) -> bytes:
        """Return the pixel stream for *document*."""


def build_container_command(config: SanitizerConfig) -> list[str]:
    """Construct the container invocation running the document converter."""

    return [
        config.container_runtime,
        "run",
        *config.security_args,
        "--rm",
        "-i",
        config.image_name,
        *config.converter_command,
    ]


class ContainerRenderer:
    """Runs the converter inside a locked-down, network-less container."""

    def __init__(self, config: SanitizerConfig | None = None) -> None:
        self.config = config or SanitizerConfig()

    def render(self, document: bytes) -> bytes:
        command = build_container_command(self.config)
        _LOGGER.info("Converting document to pixels...")
        try:
            completed = run_subprocess(command, input_data=document, check=False, capture_stderr=False)
        except OSError as exc:
            raise ExternalProcessError(
                f"Failed to spawn container: {exc}. Make sure {self.config.container_runtime} is "
                f"installed and the image '{self.config.image_name}' is pulled."
            ) from exc

        if completed.returncode != 0:
            raise ExternalProcessError(
                f"Container failed with status: {completed.returncode}. "
                "The document format may be unsupported or corrupted.",
                returncode=completed.returncode,
            )

        _LOGGER.info("Document converted to pixels successfully")
        return completed.stdout


__all__ = ["Renderer", "ContainerRenderer", "build_container_command"]
