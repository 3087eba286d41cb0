"""
DXF export of a roof project.

Uses ezdxf to produce DXF files with one layer per entity kind:
  - ROOF_BORDER (blue, ACI 5): footprint as a closed LWPolyline
  - OBSTACLES (red, ACI 1): obstacle rectangles as closed LWPolylines
  - DRAINS (green, ACI 3): drains as fixed-radius circles
  - ROOF_MESH (white, ACI 7): roof triangles as 3DFACEs, Z-up

Units: meters. Format: R2010.
"""
import io
import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import ezdxf
from shapely.geometry import Polygon

from geometry_primitives import obstacle_to_polygon
from roof_mesh import RoofMesh, build_roof_mesh
from roof_model import RoofProject

logger = logging.getLogger(__name__)


@dataclass
class DXFExportConfig:
    """Configuration for DXF export."""
    border_layer: str = "ROOF_BORDER"
    obstacle_layer: str = "OBSTACLES"
    drain_layer: str = "DRAINS"
    mesh_layer: str = "ROOF_MESH"
    border_color: int = 5     # ACI blue
    obstacle_color: int = 1   # ACI red
    drain_color: int = 3      # ACI green
    mesh_color: int = 7       # ACI white
    drain_radius: float = 0.15
    dxf_version: str = "R2010"
    include_mesh: bool = True


def build_roof_document(
    project: RoofProject,
    config: Optional[DXFExportConfig] = None,
    roof_mesh: Optional[RoofMesh] = None,
):
    """Build an in-memory ezdxf document for a project.

    Args:
        project: Footprint, obstacles, drains and heights.
        config: DXF export settings.
        roof_mesh: Precomputed roof mesh; rebuilt from the project when None.

    Returns:
        ezdxf Drawing.
    """
    if config is None:
        config = DXFExportConfig()

    doc = ezdxf.new(config.dxf_version)
    doc.units = ezdxf.units.M
    msp = doc.modelspace()
    _setup_layers(doc, config)

    if project.vertices:
        _add_closed_polyline(msp, [v.as_tuple() for v in project.vertices], config.border_layer)

    for obstacle in project.obstacles:
        _add_polygon_to_dxf(msp, obstacle_to_polygon(obstacle), config.obstacle_layer)

    for drain in project.drains:
        msp.add_circle(
            (drain.x, drain.y),
            radius=config.drain_radius,
            dxfattribs={"layer": config.drain_layer},
        )

    if config.include_mesh:
        if roof_mesh is None:
            roof_mesh = build_roof_mesh(project.vertices, project.drains, project.config)
        if roof_mesh is not None:
            _add_mesh_faces(msp, roof_mesh, config.mesh_layer)

    return doc


def roof_to_dxf(
    project: RoofProject,
    filepath: str,
    config: Optional[DXFExportConfig] = None,
    roof_mesh: Optional[RoofMesh] = None,
) -> str:
    """Export a project to a DXF file.

    Returns:
        Path to created DXF file.
    """
    doc = build_roof_document(project, config, roof_mesh)
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    doc.saveas(filepath)
    logger.info("Exported DXF: %s", filepath)
    return filepath


def roof_to_dxf_string(
    project: RoofProject,
    config: Optional[DXFExportConfig] = None,
    roof_mesh: Optional[RoofMesh] = None,
) -> str:
    """Export a project as ASCII DXF text."""
    doc = build_roof_document(project, config, roof_mesh)
    stream = io.StringIO()
    doc.write(stream)
    return stream.getvalue()


# ─── Internal helpers ────────────────────────────────────────────────────────

def _setup_layers(doc, config: DXFExportConfig) -> None:
    """Create the four roof layers."""
    doc.layers.add(config.border_layer, color=config.border_color)
    doc.layers.add(config.obstacle_layer, color=config.obstacle_color)
    doc.layers.add(config.drain_layer, color=config.drain_color)
    doc.layers.add(config.mesh_layer, color=config.mesh_color)


def _add_closed_polyline(msp, coords: Sequence[Tuple[float, float]], layer: str) -> None:
    msp.add_lwpolyline(
        coords,
        format="xy",
        close=True,
        dxfattribs={"layer": layer},
    )


def _add_polygon_to_dxf(msp, polygon: Polygon, layer: str) -> None:
    """Add a Shapely polygon's exterior as a closed LWPolyline."""
    if polygon.is_empty:
        return
    # Drop the closing duplicate; the closed flag carries it.
    coords = list(polygon.exterior.coords)[:-1]
    if len(coords) >= 3:
        _add_closed_polyline(msp, coords, layer)


def _add_mesh_faces(msp, roof_mesh: RoofMesh, layer: str) -> None:
    """One 3DFACE per triangle, fourth point repeating the third, Y-up -> Z-up."""
    positions = roof_mesh.positions
    for start in range(0, len(positions), 3):
        p1, p2, p3 = (
            (float(x), float(z), float(y)) for x, y, z in positions[start:start + 3]
        )
        msp.add_3dface([p1, p2, p3, p3], dxfattribs={"layer": layer})
