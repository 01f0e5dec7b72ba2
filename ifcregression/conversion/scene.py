"""Wavefront OBJ scene writer for tessellated conversion output."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class MeshData:
    """A triangulated shape in world coordinates."""

    vertices: list[tuple[float, float, float]] = field(default_factory=list)
    faces: list[tuple[int, int, int]] = field(default_factory=list)
    name: str = ""

    @classmethod
    def from_flat(cls, verts: list[float], faces: list[int], name: str = "") -> "MeshData":
        """Build from the flat coordinate/index lists a geometry kernel returns."""
        return cls(
            vertices=[tuple(verts[i:i + 3]) for i in range(0, len(verts) - 2, 3)],
            faces=[tuple(faces[i:i + 3]) for i in range(0, len(faces) - 2, 3)],
            name=name,
        )


def write_obj_scene(meshes: list[MeshData], dest: Path) -> Path:
    """Write *meshes* as one OBJ object each and return *dest*."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = []
    vertex_offset = 0

    for i, mesh in enumerate(meshes):
        lines.append(f"o {mesh.name or f'mesh_{i}'}")
        for vx, vy, vz in mesh.vertices:
            lines.append(f"v {vx:.6f} {vy:.6f} {vz:.6f}")
        for f0, f1, f2 in mesh.faces:
            # OBJ faces are 1-indexed
            lines.append(
                f"f {f0 + 1 + vertex_offset} "
                f"{f1 + 1 + vertex_offset} "
                f"{f2 + 1 + vertex_offset}"
            )
        vertex_offset += len(mesh.vertices)

    dest.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return dest
