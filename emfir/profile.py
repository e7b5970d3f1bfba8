from __future__ import annotations

import argparse
import json
import sys
import time
import tracemalloc
from pathlib import Path
from typing import Optional

import psutil

from .constants import DEFAULT_FRAME_SKIP
from .decoder import generate_thumbnail
from .version import get_build_meta


def current_rss_mb() -> float:
    proc = psutil.Process()
    return proc.memory_info().rss / (1024 * 1024)


def run_profile(input_path: Path, out_dir: Path, skip_frames: int = DEFAULT_FRAME_SKIP) -> dict:
    out_dir.mkdir(parents=True, exist_ok=True)
    result = {}

    tracemalloc.start()
    rss_start = current_rss_mb()
    t0 = time.perf_counter()
    image = generate_thumbnail(input_path, out_dir / "thumbnail.png", skip_frames=skip_frames)
    t1 = time.perf_counter()
    rss_dec = current_rss_mb()
    _, peak_size = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    result["input"] = str(input_path)
    result["skip_frames"] = skip_frames
    result["decode_time_sec"] = t1 - t0
    result["image_shape"] = list(image.shape)
    result["total_counts"] = int(image.sum(dtype="uint64"))
    result["rss_start_mb"] = rss_start
    result["rss_decode_mb"] = rss_dec
    result["tracemalloc_peak_bytes_decode"] = peak_size

    result["env"] = {
        "python": sys.version,
        "platform": sys.platform,
        "build": get_build_meta(),
    }

    with open(out_dir / "profile.json", "w", encoding="utf-8") as f:
        json.dump(result, f, indent=2)
    return result


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Profile EER thumbnail decoding")
    parser.add_argument("input", type=Path, help="Input .eer file")
    parser.add_argument("--out", type=Path, required=True, help="Output directory for profile")
    parser.add_argument("--downsample", type=int, default=DEFAULT_FRAME_SKIP, help="Decode every Nth frame")
    args = parser.parse_args(argv)

    res = run_profile(args.input, args.out, skip_frames=args.downsample)
    print(json.dumps(res, indent=2))


if __name__ == "__main__":
    main()
