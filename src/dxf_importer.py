"""
DXF import of roof footprints, obstacles and drains.

Heuristic read path:
  - the polyline with the largest axis-aligned bounding box is the footprint
    (ties keep the earliest entity),
  - every other polyline becomes an obstacle at its bounding-box center with
    its bounding-box extents (a zero extent defaults to 1),
  - circles become drains (radius discarded).

Obstacles come back as bounding boxes, so the round trip is lossy for
anything that is not an axis-aligned rectangle.
"""
import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import ezdxf
from ezdxf.lldxf.const import DXFError
from ezdxf.document import Drawing

from geometry_primitives import bounding_box
from roof_model import Drain, Obstacle, RoofProject, Vertex2D

logger = logging.getLogger(__name__)

DEFAULT_EXTENT = 1.0


class DXFImportError(Exception):
    """Base exception for DXF import failures."""
    pass


class ImportParseError(DXFImportError):
    """Content could not be read as DXF."""
    pass


class ImportRejectedError(DXFImportError):
    """DXF parsed but held no usable footprint, obstacle or drain."""
    pass


@dataclass
class ImportedRoof:
    """Geometry recovered from a DXF file."""
    vertices: List[Vertex2D] = field(default_factory=list)
    obstacles: List[Obstacle] = field(default_factory=list)
    drains: List[Drain] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.vertices or self.obstacles or self.drains)

    def apply_to(self, project: RoofProject) -> RoofProject:
        """New project with this geometry and the existing project's config."""
        return RoofProject(
            vertices=list(self.vertices),
            obstacles=list(self.obstacles),
            drains=list(self.drains),
            config=project.config,
        )


def load_roof_entities(doc: Drawing) -> ImportedRoof:
    """Classify modelspace entities into footprint, obstacles and drains.

    Raises:
        ImportRejectedError: nothing usable was found.
    """
    msp = doc.modelspace()

    footprint: Optional[List[Tuple[float, float]]] = None
    max_area = -1.0
    others: List[List[Tuple[float, float]]] = []

    for entity in msp.query("LWPOLYLINE POLYLINE"):
        coords = _polyline_coords(entity)
        if not coords:
            continue
        min_x, min_y, max_x, max_y = bounding_box(coords)
        area = (max_x - min_x) * (max_y - min_y)
        if area > max_area:
            if footprint is not None:
                others.append(footprint)
            max_area = area
            footprint = coords
        else:
            others.append(coords)

    result = ImportedRoof()
    if footprint is not None:
        result.vertices = [Vertex2D(x, y) for x, y in footprint]

    for coords in others:
        min_x, min_y, max_x, max_y = bounding_box(coords)
        width = max_x - min_x
        height = max_y - min_y
        result.obstacles.append(Obstacle(
            x=min_x + width / 2,
            y=min_y + height / 2,
            width=width or DEFAULT_EXTENT,
            height=height or DEFAULT_EXTENT,
        ))

    for circle in msp.query("CIRCLE"):
        center = circle.dxf.center
        result.drains.append(Drain(x=float(center.x), y=float(center.y)))

    if result.is_empty:
        raise ImportRejectedError("DXF contains no usable polylines or circles")

    logger.info(
        "Imported DXF: %d footprint vertices, %d obstacles, %d drains",
        len(result.vertices), len(result.obstacles), len(result.drains),
    )
    return result


def parse_dxf_strict(content: str) -> ImportedRoof:
    """Parse DXF text, raising DXFImportError subclasses on failure."""
    try:
        doc = ezdxf.read(io.StringIO(content))
    except (DXFError, ValueError) as exc:
        raise ImportParseError(f"Malformed DXF content: {exc}") from exc
    return load_roof_entities(doc)


def read_dxf_strict(filepath: str) -> ImportedRoof:
    """Read a DXF file, raising DXFImportError subclasses on failure."""
    try:
        doc = ezdxf.readfile(filepath)
    except (IOError, DXFError, ValueError) as exc:
        raise ImportParseError(f"Cannot read DXF file {filepath}: {exc}") from exc
    return load_roof_entities(doc)


def parse_dxf(content: str) -> Optional[ImportedRoof]:
    """Parse DXF text; None when the content is malformed or unusable."""
    try:
        return parse_dxf_strict(content)
    except DXFImportError as exc:
        logger.warning("DXF import failed: %s", exc)
        return None


def read_dxf(filepath: str) -> Optional[ImportedRoof]:
    """Read a DXF file; None when it is unreadable, malformed or unusable."""
    try:
        return read_dxf_strict(filepath)
    except DXFImportError as exc:
        logger.warning("DXF import failed: %s", exc)
        return None


# ─── Internal helpers ────────────────────────────────────────────────────────

def _polyline_coords(entity) -> List[Tuple[float, float]]:
    """Plan coordinates of an LWPOLYLINE or (2D/3D) POLYLINE."""
    if entity.dxftype() == "LWPOLYLINE":
        return [(float(x), float(y)) for x, y in entity.get_points(format="xy")]
    return [(float(p.x), float(p.y)) for p in entity.points()]
