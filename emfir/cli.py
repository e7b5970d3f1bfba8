"""Command-line entrypoints for emfir."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .constants import DEFAULT_FRAME_SKIP
from .decoder import generate_thumbnail
from .errors import EmfirError
from .mrc import MrcFile
from .profile import run_profile
from .tiff import show_header_info
from .version import get_version_string

SUPPORTED_EXTENSIONS = (".eer", ".mrc")


def _file_kind(path: Path) -> str:
    ext = path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise EmfirError(f"Can't handle file with this extension: {path.suffix or '(none)'}")
    return ext[1:]


def run_header(path: Path) -> None:
    if _file_kind(path) == "mrc":
        image_data = MrcFile.open(path).image_data
    else:
        image_data, num_frames = show_header_info(path)
        print(f"Total number of frames: {num_frames}")
    print(image_data.to_json())


def run_thumbnail(path: Path, output: Path, downsample: int = DEFAULT_FRAME_SKIP, verbose: bool = False) -> None:
    if downsample < 1:
        raise ValueError("--downsample must be >= 1")
    if _file_kind(path) == "mrc":
        MrcFile.open(path).save_thumbnail(output, downsample=downsample)
    else:
        generate_thumbnail(path, output, skip_frames=downsample, verbose=verbose)
    print(f"Thumbnail generated at {output}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Header and thumbnail extraction for EER and MRC files")
    parser.add_argument("--version", action="version", version=get_version_string())
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_head = sub.add_parser("header", help="Print summary metadata as JSON")
    p_head.add_argument("file", type=Path)

    p_thumb = sub.add_parser("thumbnail", help="Write a thumbnail image")
    p_thumb.add_argument("file", type=Path)
    p_thumb.add_argument("-o", "--output", type=Path, required=True, help="Output image path")
    p_thumb.add_argument(
        "-d",
        "--downsample",
        type=int,
        default=DEFAULT_FRAME_SKIP,
        help="EER: sum every Nth frame; MRC: keep every Nth pixel",
    )
    p_thumb.add_argument("-v", "--verbose", action="store_true", help="Print per-frame progress")

    p_prof = sub.add_parser("profile", help="Profile EER thumbnail generation")
    p_prof.add_argument("file", type=Path)
    p_prof.add_argument("--out", type=Path, required=True, help="Output directory for profile")
    p_prof.add_argument("-d", "--downsample", type=int, default=DEFAULT_FRAME_SKIP)

    args = parser.parse_args(argv)

    try:
        if args.cmd == "header":
            run_header(args.file)
        elif args.cmd == "thumbnail":
            run_thumbnail(args.file, args.output, downsample=args.downsample, verbose=args.verbose)
        elif args.cmd == "profile":
            res = run_profile(args.file, args.out, skip_frames=args.downsample)
            print(json.dumps(res, indent=2))
        else:
            parser.error("Unknown command")
    except (EmfirError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
