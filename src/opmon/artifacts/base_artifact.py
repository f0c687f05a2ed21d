from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path

import aiofiles

from ..models.endpoints import PrometheusEndpoints
from ..models.settings import SetupSettings


class BaseArtifact(ABC):
    """Abstract base class for the files a setup run leaves on disk.

    Subclasses provide a `settings_field` naming the SetupSettings attribute that holds
    their file name, and implement `render`.
    """

    settings_field: str = ""
    # Permission bits applied after writing; None keeps the umask default.
    file_mode: int | None = None

    def path_for(self, settings: SetupSettings) -> Path:
        return settings.output_path(getattr(settings, self.settings_field))

    @abstractmethod
    def render(self, token: str, endpoints: PrometheusEndpoints, settings: SetupSettings) -> str:
        """Return the full text content of the artifact."""
        raise NotImplementedError()

    async def write(self, token: str, endpoints: PrometheusEndpoints, settings: SetupSettings) -> Path:
        """Render the artifact and write it to the output directory. Return the written path."""
        out_path = self.path_for(settings)
        content = self.render(token, endpoints, settings)
        os.makedirs(out_path.parent, exist_ok=True)

        async with aiofiles.open(out_path, "w", encoding="utf-8") as fh:
            await fh.write(content)
        if self.file_mode is not None:
            os.chmod(out_path, self.file_mode)
        return out_path
