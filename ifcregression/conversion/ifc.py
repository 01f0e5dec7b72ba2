"""IfcOpenShell-backed conversion collaborator.

Opens IFC-SPF, IFC-ZIP, and IFC-XML files with ``ifcopenshell.open``,
tessellates them with the ``ifcopenshell.geom`` iterator, and reads header
facts and entity counts for the regression report.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import ifcopenshell

from ifcregression.config import SUPPORTED_EXTENSIONS
from ifcregression.conversion.base import (
    ConversionError,
    ConvertedModel,
    ModelConverter,
    ModelSummary,
)
from ifcregression.conversion.scene import MeshData, write_obj_scene

logger = logging.getLogger(__name__)

# Try to import geometry processing; not every environment has OCC bindings.
try:
    import ifcopenshell.geom

    _HAS_GEOM = True
except ImportError:
    _HAS_GEOM = False


def _settings() -> Any:
    """Return ifcopenshell geometry settings."""
    settings = ifcopenshell.geom.settings()
    settings.set("use-world-coords", True)
    return settings


def _first(values: Any) -> str:
    if not values:
        return ""
    if isinstance(values, (list, tuple)):
        return str(values[0]) if values[0] is not None else ""
    return str(values)


def _count(ifc_file: ifcopenshell.file, ifc_class: str) -> int:
    """Count instances of *ifc_class* and its subtypes; 0 if the schema lacks it."""
    try:
        return len(ifc_file.by_type(ifc_class))
    except RuntimeError:
        return 0


class _KernelLog:
    """Re-emits new text from IfcOpenShell's own log buffer as warnings.

    The buffer may or may not be cleared on read depending on the
    IfcOpenShell release; only text not seen on the previous call is emitted.
    """

    def __init__(self) -> None:
        self.seen = ""

    def forward(self) -> None:
        get_log = getattr(ifcopenshell, "get_log", None)
        if get_log is None:
            return
        text = get_log() or ""
        fresh = text[len(self.seen):] if text.startswith(self.seen) else text
        self.seen = text
        for line in fresh.splitlines():
            line = line.strip()
            if line:
                logger.warning("%s", line)


class IfcModel(ConvertedModel):
    """An opened IFC file."""

    def __init__(
        self,
        ifc_file: ifcopenshell.file,
        source: Path,
        keep_meshes: bool = False,
        kernel_log: _KernelLog | None = None,
    ) -> None:
        self._file = ifc_file
        self.source = source
        self._keep_meshes = keep_meshes
        self._kernel_log = kernel_log or _KernelLog()
        self._meshes: list[MeshData] = []

    @property
    def file(self) -> ifcopenshell.file:
        return self._file

    def generate_geometry(self) -> int:
        if not _HAS_GEOM:
            raise RuntimeError("ifcopenshell.geom is not available in this environment")

        self._meshes = []
        iterator = ifcopenshell.geom.iterator(_settings(), self._file)
        count = 0
        try:
            if iterator.initialize():
                while True:
                    shape = iterator.get()
                    count += 1
                    if self._keep_meshes:
                        geometry = shape.geometry
                        self._meshes.append(
                            MeshData.from_flat(
                                list(geometry.verts),
                                list(geometry.faces),
                                name=getattr(shape, "guid", "") or "",
                            )
                        )
                    if not iterator.next():
                        break
        finally:
            self._kernel_log.forward()
        logger.debug("Generated %d geometry nodes for %s", count, self.source.name)
        return count

    def write_scene(self, dest: Path) -> Path:
        return write_obj_scene(self._meshes, dest)

    def summary(self) -> ModelSummary:
        header = self._file.header
        schema = _first(header.file_schema.schema_identifiers) or self._file.schema
        description = _first(header.file_description.description)
        level = header.file_description.implementation_level or ""

        owner_histories = self._file.by_type("IfcOwnerHistory")
        application = "Unknown"
        if owner_histories and owner_histories[0].OwningApplication is not None:
            app = owner_histories[0].OwningApplication
            application = " ".join(
                str(part) for part in (app.ApplicationFullName, app.Version) if part
            ) or "Unknown"

        return ModelSummary(
            schema_identifier=schema,
            name=header.file_name.name or "",
            description=f"{description}, {level}",
            application=application,
            entity_count=sum(1 for _ in self._file),
            product_count=_count(self._file, "IfcProduct"),
            solid_count=_count(self._file, "IfcSolidModel"),
            mapped_count=_count(self._file, "IfcMappedItem"),
            boolean_count=_count(self._file, "IfcBooleanResult"),
        )

    def close(self) -> None:
        self._meshes = []


class IfcOpenShellConverter(ModelConverter):
    """Converter for IFC sources using IfcOpenShell.

    Parameters
    ----------
    keep_meshes:
        Retain triangulated shapes after geometry generation so a scene
        file can be written.
    """

    def __init__(self, keep_meshes: bool = False) -> None:
        self.keep_meshes = keep_meshes
        self._kernel_log = _KernelLog()

    @property
    def extensions(self) -> tuple[str, ...]:
        return SUPPORTED_EXTENSIONS

    def open(self, source: Path, cache_path: Path | None = None) -> IfcModel:
        if not self.supports(source):
            raise ConversionError(
                f"IfcOpenShell does not support converting {source.suffix} file formats"
            )

        logger.info("Opening %s", source)
        try:
            ifc_file = ifcopenshell.open(str(source))
        finally:
            self._kernel_log.forward()

        if cache_path is not None:
            ifc_file.write(str(cache_path))
            logger.debug("Cached %s as %s", source.name, cache_path.name)

        return IfcModel(
            ifc_file, source, keep_meshes=self.keep_meshes, kernel_log=self._kernel_log
        )
