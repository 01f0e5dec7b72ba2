"""Interfaces for the conversion collaborator driven by the batch processor."""

from __future__ import annotations

import abc
from pathlib import Path
from types import TracebackType

from pydantic import BaseModel


class ConversionError(Exception):
    """Raised when a source file cannot be handed to the converter at all."""


class ModelSummary(BaseModel):
    """Header facts and entity counts read from an opened model."""

    schema_identifier: str = ""
    name: str = ""
    description: str = ""
    application: str = ""
    entity_count: int = 0
    product_count: int = 0
    solid_count: int = 0
    mapped_count: int = 0
    boolean_count: int = 0


class ConvertedModel(abc.ABC):
    """A parsed model, open until :meth:`close` is called."""

    @abc.abstractmethod
    def generate_geometry(self) -> int:
        """Tessellate the model and return the number of geometry nodes."""

    @abc.abstractmethod
    def write_scene(self, dest: Path) -> Path:
        """Write the tessellated geometry as a scene file at *dest*."""

    @abc.abstractmethod
    def summary(self) -> ModelSummary:
        """Return header facts and entity counts."""

    def close(self) -> None:
        """Release the model."""

    def __enter__(self) -> "ConvertedModel":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class ModelConverter(abc.ABC):
    """Opens source files as :class:`ConvertedModel` instances."""

    @property
    @abc.abstractmethod
    def extensions(self) -> tuple[str, ...]:
        """Lower-case source extensions this converter accepts."""

    def supports(self, source: Path) -> bool:
        return source.suffix.lower() in self.extensions

    @abc.abstractmethod
    def open(self, source: Path, cache_path: Path | None = None) -> ConvertedModel:
        """Parse *source*.

        Parameters
        ----------
        source:
            The file to convert.
        cache_path:
            When given, the converter persists its converted form of the
            model there.
        """
