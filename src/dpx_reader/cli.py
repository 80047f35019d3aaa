from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from dpx_reader.config import ReaderConfig, load_config
from dpx_reader.reader import DPXReader
from dpx_reader.utils.logging_utils import configure_logging


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dpx-reader")
    parser.add_argument("--config", default=None, help="Optional path to YAML config")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Lower the log threshold: -v for info, -vv for debug")
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Show header metadata of a DPX file")
    info.add_argument("input", help="Input DPX file")
    info.add_argument("--subimage", type=int, default=None, help="Image element index")
    info.add_argument("--raw", action="store_true", help="Report the stored channel layout")
    info.add_argument("--json", action="store_true", help="Emit machine-readable JSON")

    to_tiff = sub.add_parser("to-tiff", help="Decode one image element to TIFF")
    to_tiff.add_argument("input", help="Input DPX file")
    to_tiff.add_argument("output", help="Output TIFF path")
    to_tiff.add_argument("--subimage", type=int, default=None, help="Image element index")
    to_tiff.add_argument("--raw", action="store_true", help="Keep the stored channel layout")
    to_tiff.add_argument("--float", action="store_true", help="Write normalized float32 samples")

    return parser


def _resolve_config(args: argparse.Namespace) -> ReaderConfig:
    cfg = load_config(args.config) if args.config else ReaderConfig()
    if getattr(args, "raw", False):
        cfg.rawcolor = True
    if getattr(args, "subimage", None) is not None:
        cfg.default_subimage = int(args.subimage)
    if getattr(args, "float", False):
        cfg.tiff_export_float = True
    return cfg


def _cmd_info(args: argparse.Namespace, cfg: ReaderConfig) -> int:
    input_path = Path(args.input).expanduser().resolve()
    with DPXReader(rawcolor=cfg.rawcolor) as reader:
        reader.open(input_path)
        spec = reader.select(cfg.default_subimage)
        payload = {
            "input": str(input_path),
            "subimage": reader.current_subimage,
            "subimages": reader.elements.count,
            "byte_order": "big" if reader.header.big_endian else "little",
            "spec": spec.to_json_dict(),
        }

    if args.json:
        print(json.dumps(payload, indent=2))
        return 0

    s = payload["spec"]
    print(f"Input DPX: {payload['input']}")
    print(f"Subimage: {payload['subimage']} of {payload['subimages']} ({payload['byte_order']}-endian)")
    print(f"Size: {s['width']}x{s['height']} offset=({s['x']},{s['y']}) full={s['full_width']}x{s['full_height']}")
    print(f"Channels: {s['nchannels']} {','.join(s['channel_names'])} {s['format']}")
    print("Attributes:")
    for key in sorted(s["attributes"]):
        print(f"  {key}: {s['attributes'][key]}")
    return 0


def _cmd_to_tiff(args: argparse.Namespace, cfg: ReaderConfig) -> int:
    from dpx_reader.write import write_subimage_tiff

    input_path = Path(args.input).expanduser().resolve()
    output_path = Path(args.output).expanduser().resolve()
    with DPXReader(rawcolor=cfg.rawcolor) as reader:
        reader.open(input_path)
        spec = reader.select(cfg.default_subimage)
        pixels = reader.read_image(cfg.default_subimage)

    write_subimage_tiff(output_path, pixels, spec, as_float=cfg.tiff_export_float)
    logger.info("wrote %s (%sx%s, %s channels)", output_path, spec.width, spec.height, spec.nchannels)
    print(str(output_path))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = _resolve_config(args)
        configure_logging(cfg.log_level, cfg.log_file, verbose=args.verbose)

        if args.command == "info":
            return _cmd_info(args, cfg)
        if args.command == "to-tiff":
            return _cmd_to_tiff(args, cfg)

        parser.error(f"unknown command: {args.command}")
        return 2
    except Exception as exc:
        logger.exception("fatal error")
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
