"""Single-pass recompute: footprint -> roof mesh + walls + estimate -> artifacts."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dxf_exporter import DXFExportConfig, roof_to_dxf
from estimation import Estimate, estimate_project
from roof_mesh import RIDGE_DOT_THRESHOLD, RidgeSegment, RoofMesh, build_roof_mesh
from roof_model import RoofProject
from wall_extruder import WallMesh, extrude_project_walls

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    ridge_threshold: float = RIDGE_DOT_THRESHOLD
    build_walls: bool = True
    export_dxf: bool = True
    dxf: Optional[DXFExportConfig] = None


@dataclass
class RoofPlanResult:
    roof: Optional[RoofMesh]
    walls: Optional[WallMesh]
    estimate: Estimate
    elapsed_s: float = 0.0
    artifact_paths: List[str] = field(default_factory=list)

    @property
    def ridges(self) -> List[RidgeSegment]:
        return self.roof.ridges if self.roof is not None else []

    def summary(self) -> Dict:
        return {
            "roof_faces": self.roof.face_count if self.roof is not None else 0,
            "ridge_segments": len(self.ridges),
            "wall_quads": self.walls.quad_count if self.walls is not None else 0,
            "estimate": self.estimate.to_dict(),
            "elapsed_s": round(self.elapsed_s, 4),
        }


def run_roof_pipeline(
    project: RoofProject,
    config: Optional[PipelineConfig] = None,
) -> RoofPlanResult:
    """Recompute every derived output of a project.

    Too few vertices yields roof=None and walls=None with a zero-area
    estimate rather than an error.
    """
    if config is None:
        config = PipelineConfig()

    started = time.perf_counter()
    roof = build_roof_mesh(
        project.vertices,
        project.drains,
        project.config,
        ridge_threshold=config.ridge_threshold,
    )
    walls = extrude_project_walls(project.vertices, project.config) if config.build_walls else None
    estimate = estimate_project(project)
    elapsed = time.perf_counter() - started

    if roof is None:
        logger.info("Footprint has %d vertices; skipping roof geometry", len(project.vertices))
    else:
        logger.info(
            "Roof plan: %d faces, %d ridges, net area %.2f m2 in %.3fs",
            roof.face_count, len(roof.ridges), estimate.net_area, elapsed,
        )
    return RoofPlanResult(roof=roof, walls=walls, estimate=estimate, elapsed_s=elapsed)


def write_plan_artifacts(
    result: RoofPlanResult,
    project: RoofProject,
    out_dir: str,
    config: Optional[PipelineConfig] = None,
    name: str = "roof",
) -> List[str]:
    """Write project.json, estimate.json, summary.md and (optionally) the DXF."""
    if config is None:
        config = PipelineConfig()

    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    paths: List[str] = []

    project_path = out / "project.json"
    _write_json(project_path, project.to_dict())
    paths.append(str(project_path))

    estimate_path = out / "estimate.json"
    _write_json(estimate_path, result.summary())
    paths.append(str(estimate_path))

    summary_path = out / "summary.md"
    summary_path.write_text(_render_summary(result, project, name), encoding="utf-8")
    paths.append(str(summary_path))

    if config.export_dxf:
        dxf_path = out / f"{name}.dxf"
        roof_to_dxf(project, str(dxf_path), config.dxf, roof_mesh=result.roof)
        paths.append(str(dxf_path))

    result.artifact_paths = paths
    logger.info("Wrote %d artifacts to %s", len(paths), out)
    return paths


def _write_json(path: Path, payload: Dict) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _render_summary(result: RoofPlanResult, project: RoofProject, name: str) -> str:
    est = result.estimate
    cfg = project.config
    lines = [
        f"# Roof plan: {name}",
        "",
        "| Item | Value |",
        "|---|---|",
        f"| Footprint area | {est.footprint_area:.2f} m2 |",
        f"| Obstacles area | {est.obstacles_area:.2f} m2 |",
        f"| Net area | {est.net_area:.2f} m2 |",
        f"| Roof height | {cfg.roof_height} m |",
        f"| Tile size | {cfg.tile_size} m |",
        f"| Wall thickness | {cfg.wall_thickness} m |",
        f"| Material cost | {cfg.material_cost_per_sq_meter:.2f} / m2 |",
        f"| Effective rate | {est.effective_rate:.2f} / m2 |",
        f"| Tiles needed | {est.tile_count} |",
        f"| Total cost | {est.total_cost:.2f} |",
        "",
        f"Ridge segments: {len(result.ridges)}",
        "",
    ]
    return "\n".join(lines)
