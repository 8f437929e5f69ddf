from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Protocol, Sequence, cast

import numpy as np

from . import PROJECT_ROOT
from .warpgrid.blending import BLEND_FUNCTIONS
from .warpgrid.presets import PRESETS, create_preset
from .utils import debug, debug_helpers


class CliArgs(Protocol):
    preset: str
    output: str
    width: float
    height: float
    size: float
    blend_mode: str
    max_domains: int
    zoom: float
    pan_x: float
    pan_y: float
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Evaluate a domain preset over a viewport grid and save the cells."
    )
    ap.add_argument("--preset", choices=sorted(PRESETS), default="basic_sphere")
    ap.add_argument(
        "--output",
        default=str(PROJECT_ROOT / "outputs" / "grid.npz"),
        help="Output .npz with original/transformed cells",
    )
    ap.add_argument("--width", type=float, default=800.0, help="Viewport width")
    ap.add_argument("--height", type=float, default=600.0, help="Viewport height")
    ap.add_argument("--size", type=float, default=20.0, help="Base grid size")
    ap.add_argument(
        "--blend_mode", choices=sorted(BLEND_FUNCTIONS), default="smooth"
    )
    ap.add_argument("--max_domains", type=int, default=5)
    ap.add_argument("--zoom", type=float, default=1.0)
    ap.add_argument("--pan_x", type=float, default=0.0)
    ap.add_argument("--pan_y", type=float, default=0.0)
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logs")
    return ap


def main(argv: Sequence[str] | None = None) -> None:
    args = cast(CliArgs, build_parser().parse_args(argv))
    debug.set_verbose(args.verbose)

    if args.width <= 0 or args.height <= 0:
        raise ValueError("width and height must be positive")
    if args.size <= 0:
        raise ValueError("size must be positive")

    session = create_preset(
        args.preset,
        args.width,
        args.height,
        {
            "grid": {"size": args.size},
            "transformations": {
                "blend_mode": args.blend_mode,
                "max_active_domains": args.max_domains,
            },
        },
    )
    session.set_zoom_level(args.zoom)
    session.set_pan_offset(args.pan_x, args.pan_y)

    original, transformed = session.generate_grid_cells()
    debug_helpers.log_array("cells_original", original)
    debug_helpers.log_array("cells_transformed", transformed)

    metadata = {
        "preset": args.preset,
        "parameters": session.get_parameters().to_dict(),
        "zoom": session.zoom_level,
        "pan": list(session.pan_offset),
        "snap": session.snapper.settings_dict(),
        "domains": [repr(d) for d in session.domains],
    }

    out_path = Path(args.output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    np.savez_compressed(
        out_path,
        original=original,
        transformed=transformed,
        metadata=json.dumps(metadata, sort_keys=True),
    )
    print(f"Saved: {out_path}  cells={original.shape[0]}")


if __name__ == "__main__":
    main()
