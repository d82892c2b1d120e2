import argparse, logging
from pathlib import Path

import numpy as np
import yaml

from .config import load_config
from .construction import from_any
from .core.depth import discover_depth
from .core.shape import discover_shape
from .core.discovery import discover_type
from .core.dtypes import as_element_type
from .core.flags import ConstructionFlags
from .errors import ConstructionError
from .jsonlog import log


def _load_source(args):
    # YAML is a superset of JSON, so either literal form is accepted
    if args.file:
        with open(args.file, "r", encoding="utf-8") as fh:
            return yaml.safe_load(fh)
    if args.source is None:
        raise ValueError("Either SOURCE or --file is required")
    return yaml.safe_load(args.source)


def cmd_describe(args):
    cfg = load_config(args.config)
    source = _load_source(args)
    dtype = as_element_type(args.dtype)
    if dtype is None:
        dtype = discover_type(source, None, cfg.max_dims, cfg)
    # describe only; nothing is allocated
    records = dtype.record is not None
    depth = discover_depth(source, cfg.max_dims, stop_at_text=True, stop_at_record_tuple=records)
    shape = discover_shape(source, depth, strict=not dtype.is_text, stop_at_record_tuple=records)
    log("describe", depth=depth, shape=list(shape), dtype=str(dtype), tag=dtype.tag.name)
    return 0


def cmd_build(args):
    cfg = load_config(args.config)
    source = _load_source(args)
    flags = ConstructionFlags.FORCE_FORTRAN_ORDER if args.fortran else ConstructionFlags.NONE
    arr = from_any(source, args.dtype, args.min_depth, args.max_depth, flags, config=cfg)
    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    np.save(out, arr)
    log("build_done", out=str(out), shape=list(arr.shape), dtype=str(arr.dtype),
        fortran=bool(arr.flags.f_contiguous and arr.ndim > 1))
    return 0


def _add_source_args(ap):
    ap.add_argument("source", nargs="?", help="JSON or YAML literal, e.g. '[[1, 2], [3, 4]]'")
    ap.add_argument("--file", help="Read the source literal from a JSON/YAML file")
    ap.add_argument("--dtype", help="Force the element type (any NumPy dtype string)")
    ap.add_argument("--config", help="Construction config (YAML or JSON)")


def main(argv=None):
    ap = argparse.ArgumentParser("ndconstruct")
    ap.add_argument("--verbose", action="store_true", help="Debug logging on stderr")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_ds = sub.add_parser("describe", help="Report depth, shape and dtype of a source")
    _add_source_args(ap_ds)
    ap_ds.set_defaults(func=cmd_describe)

    ap_bd = sub.add_parser("build", help="Construct an array and save it as .npy")
    _add_source_args(ap_bd)
    ap_bd.add_argument("--out", required=True)
    ap_bd.add_argument("--fortran", action="store_true", help="Column-major layout")
    ap_bd.add_argument("--min-depth", type=int, default=0)
    ap_bd.add_argument("--max-depth", type=int, default=0)
    ap_bd.set_defaults(func=cmd_build)

    args = ap.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    try:
        return args.func(args)
    except (ConstructionError, ValueError, TypeError, OSError, yaml.YAMLError) as e:
        log("error", kind=type(e).__name__, message=str(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
