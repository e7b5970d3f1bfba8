"""Sum every Nth frame of an EER movie and save a log-scaled thumbnail."""
from __future__ import annotations

import argparse

from emfir import DEFAULT_FRAME_SKIP, generate_thumbnail


def main():
    parser = argparse.ArgumentParser(description="EER thumbnail generator")
    parser.add_argument("input", help="Input .eer path")
    parser.add_argument("output", help="Output image path (e.g. .png)")
    parser.add_argument("--skip-frames", type=int, default=DEFAULT_FRAME_SKIP, help="Decode every Nth frame")
    parser.add_argument("--verbose", action="store_true", help="Print per-frame progress")
    args = parser.parse_args()

    generate_thumbnail(args.input, args.output, skip_frames=args.skip_frames, verbose=args.verbose)


if __name__ == "__main__":
    main()
