"""Conversion collaborator interfaces and the IfcOpenShell implementation."""

from ifcregression.conversion.base import (
    ConversionError,
    ConvertedModel,
    ModelConverter,
    ModelSummary,
)
from ifcregression.conversion.scene import MeshData, write_obj_scene

__all__ = [
    "ConversionError",
    "ConvertedModel",
    "MeshData",
    "ModelConverter",
    "ModelSummary",
    "write_obj_scene",
]
