"""EER event-stream decoder: strips -> frames -> summed count image."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, List

import numpy as np

from .bitstream import BitReader
from .constants import COUNT_MAX, DEFAULT_FRAME_SKIP
from .errors import CorruptStreamError, StripReadError
from .format import (
    CompressionParams,
    get_compression_params,
    get_strips_info,
    read_strip,
    strip_pixel_range,
)
from .tiff import EERFile
from .utils import save_image


def decode_strip(
    data: bytes,
    params: CompressionParams,
    strip_pixel_start: int,
    strip_pixel_end: int,
) -> List[int]:
    """
    Decode one strip and return the flat pixel indices of its events.

    Each code word is a skip of ``code_len`` bits. A skip equal to the
    sentinel advances without an event; any other skip lands on an event
    pixel, followed by vertical then horizontal sub-pixel bits (discarded).
    """
    bs = BitReader(data)
    code_len = params.code_len
    sentinel = params.sentinel
    v_bits = params.vert_sub_bits
    h_bits = params.horz_sub_bits
    n_pixels = strip_pixel_end - strip_pixel_start

    events: List[int] = []
    pos = 0
    while pos < n_pixels:
        skip = bs.get_bits(code_len)
        pos += skip
        if pos >= n_pixels:
            break
        if skip != sentinel:
            if v_bits:
                bs.get_bits(v_bits)
            if h_bits:
                bs.get_bits(h_bits)
            events.append(strip_pixel_start + pos)
            pos += 1
    return events


def decode_eer_frame(frame, params: CompressionParams, fh: BinaryIO) -> np.ndarray:
    """Decode the frame the cursor points at into a (height, width) uint16 image."""
    H = int(frame.height)
    W = int(frame.width)
    image = np.zeros((H, W), dtype=np.uint16)
    flat = image.reshape(-1)

    strips = get_strips_info(frame)
    rows_per_strip = int(frame.rows_per_strip)
    if rows_per_strip <= 0:
        raise CorruptStreamError(f"Invalid rows per strip {rows_per_strip}")

    for strip_idx, strip in enumerate(strips):
        start, end = strip_pixel_range(strip_idx, rows_per_strip, W, H)
        if strip.size == 0:
            continue
        if start >= H * W:
            raise CorruptStreamError(
                f"Strip {strip_idx} starts at row {strip_idx * rows_per_strip}, past frame height {H}"
            )
        data = read_strip(fh, strip, strip_idx)
        try:
            events = decode_strip(data, params, start, end)
        except CorruptStreamError as exc:
            raise CorruptStreamError(f"Strip {strip_idx}: {exc}") from exc
        if events:
            np.add.at(flat, np.asarray(events, dtype=np.int64), 1)
    return image


def decode_frames(
    frame,
    fh: BinaryIO,
    num_frames: int,
    skip_frames: int = 1,
    verbose: bool = False,
) -> np.ndarray:
    """
    Sum frames 0, S, 2S, ... starting from the cursor's current frame.

    Compression parameters are re-resolved for every decoded frame. The sum is
    held as uint32 and saturated at 65535 in the returned uint16 image.
    """
    if skip_frames < 1:
        raise ValueError("skip_frames must be >= 1")
    H = int(frame.height)
    W = int(frame.width)
    sum_image = np.zeros((H, W), dtype=np.uint32)

    step = int(skip_frames)
    frames_to_process = (num_frames + step - 1) // step

    for frame_idx in range(0, num_frames, step):
        if verbose:
            print(
                f"Decoding frame {frame_idx + 1} of {num_frames} (total frames to process: {frames_to_process})"
            )
        if (int(frame.height), int(frame.width)) != (H, W):
            raise CorruptStreamError(
                f"Frame {frame_idx} is {frame.height}x{frame.width}, expected {H}x{W}"
            )
        params = get_compression_params(frame)
        try:
            frame_image = decode_eer_frame(frame, params, fh)
        except CorruptStreamError as exc:
            raise CorruptStreamError(f"Frame {frame_idx}: {exc}") from exc
        except StripReadError as exc:
            raise StripReadError(f"Frame {frame_idx}: {exc}") from exc
        sum_image += frame_image

        for _ in range(min(step, num_frames - frame_idx - 1)):
            if frame.more_frames():
                frame.next_frame()

    return np.minimum(sum_image, COUNT_MAX).astype(np.uint16)


def generate_thumbnail(
    path: str | Path,
    output_path: str | Path,
    skip_frames: int = DEFAULT_FRAME_SKIP,
    verbose: bool = False,
) -> np.ndarray:
    """Sum every ``skip_frames``-th frame of an EER file and save a log-scaled image."""
    with EERFile(path) as eer:
        num_frames = eer.num_frames
        image = decode_frames(eer, eer.fh, num_frames, skip_frames=skip_frames, verbose=verbose)
    save_image(image, output_path)
    print(f"Decoded {path} -> {output_path}. Frames={num_frames}, Size={image.shape[0]}x{image.shape[1]}")
    return image
