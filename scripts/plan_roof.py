#!/usr/bin/env python3
"""Compute roof mesh, walls and estimate for a project JSON or DXF, and write artifacts."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dxf_importer import read_dxf
from pipeline import PipelineConfig, run_roof_pipeline, write_plan_artifacts
from roof_model import RoofProject


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recompute roof geometry and cost estimate for a footprint"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--project", help="Path to a project JSON file")
    source.add_argument("--dxf", help="Path to a DXF file to import")
    parser.add_argument("--out-dir", default="out", help="Artifact output directory")
    parser.add_argument("--name", default="roof", help="Plan name used for file names")
    parser.add_argument("--roof-height", type=float, default=None, help="Edge height (m)")
    parser.add_argument("--drain-height", type=float, default=None, help="Drain height (m)")
    parser.add_argument("--tile-size", type=float, default=None, help="Tile edge length (m)")
    parser.add_argument(
        "--wall-thickness", type=float, default=None, help="Perimeter wall thickness (m)"
    )
    parser.add_argument(
        "--cost", type=float, default=None, help="Material cost per square meter"
    )
    parser.add_argument("--no-dxf", action="store_true", help="Skip DXF export")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )
    return parser


def _load_project(args: argparse.Namespace) -> RoofProject:
    if args.project:
        path = Path(args.project)
        if not path.is_file():
            raise FileNotFoundError(f"Project file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            return RoofProject.from_dict(json.load(f))

    imported = read_dxf(args.dxf)
    if imported is None:
        raise ValueError(f"No usable roof geometry in {args.dxf}")
    return imported.apply_to(RoofProject())


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    project = _load_project(args)
    overrides = {
        "roof_height": args.roof_height,
        "drain_height": args.drain_height,
        "tile_size": args.tile_size,
        "wall_thickness": args.wall_thickness,
        "material_cost_per_sq_meter": args.cost,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        project.config = replace(project.config, **overrides)

    config = PipelineConfig(export_dxf=not args.no_dxf)
    result = run_roof_pipeline(project, config)
    paths = write_plan_artifacts(result, project, args.out_dir, config, name=args.name)

    print(json.dumps(result.summary(), indent=2))
    for path in paths:
        print(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
