"""Save dithered frames as a still image, animated GIF or MP4.

Still images and GIFs are written with Pillow, video via OpenCV VideoWriter.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator

import cv2
import numpy as np
from PIL import Image

from dither_maker.core.processor import ProcessedFrame
from dither_maker.core.reader import IMAGE_SUFFIXES

logger = logging.getLogger(__name__)


def save_image(frames: Iterator[ProcessedFrame], output_path: Path) -> None:
    """Save the first frame as a still image.

    JPEG cannot hold alpha, so transparent frames are flattened to RGB there.
    """
    frame = next(iter(frames), None)
    if frame is None:
        raise ValueError("No frames to save")
    img = frame.image
    if output_path.suffix.lower() in (".jpg", ".jpeg") and img.mode != "RGB":
        img = img.convert("RGB")
    img.save(str(output_path))


ProgressCallback = Callable[[int, int], None]


def _counted(
    frames: Iterator[ProcessedFrame],
    on_progress: ProgressCallback | None,
    total_frames: int,
) -> Iterator[ProcessedFrame]:
    """Pass frames through, reporting each one to ``on_progress``."""
    for done, frame in enumerate(frames, start=1):
        yield frame
        if on_progress:
            on_progress(done, total_frames)


def save_gif(
    frames: Iterator[ProcessedFrame],
    output_path: Path,
    on_progress: ProgressCallback | None = None,
    total_frames: int = 0,
) -> None:
    """Save processed frames as a looping animated GIF.

    Frames with no duration (stills) are shown for 100 ms.
    """
    collected = [
        (frame.image.convert("RGB"), frame.duration_ms or 100)
        for frame in _counted(frames, on_progress, total_frames)
    ]
    if not collected:
        raise ValueError("No frames to save")

    first, *rest = (img for img, _ in collected)
    first.save(
        str(output_path),
        save_all=True,
        append_images=rest,
        duration=[ms for _, ms in collected],
        loop=0,
        disposal=2,
    )


def _to_bgr(img: Image.Image) -> np.ndarray:
    return cv2.cvtColor(np.asarray(img.convert("RGB")), cv2.COLOR_RGB2BGR)


def save_mp4(
    frames: Iterator[ProcessedFrame],
    output_path: Path,
    fps: float = 24.0,
    on_progress: ProgressCallback | None = None,
    total_frames: int = 0,
) -> None:
    """Save processed frames as an mp4v encoded video.

    The first frame fixes the video size.
    """
    stream = _counted(frames, on_progress, total_frames)
    first = next(stream, None)
    if first is None:
        raise ValueError("No frames to save")

    size = (first.image.width, first.image.height)
    video = cv2.VideoWriter(
        str(output_path), cv2.VideoWriter_fourcc(*"mp4v"), fps, size
    )
    try:
        video.write(_to_bgr(first.image))
        for frame in stream:
            video.write(_to_bgr(frame.image))
    finally:
        video.release()


def save_output(
    frames: Iterator[ProcessedFrame],
    output_path: Path,
    fps: float = 24.0,
    on_progress: ProgressCallback | None = None,
    total_frames: int = 0,
) -> None:
    """Save frames in format determined by output file extension."""
    suffix = output_path.suffix.lower()
    logger.debug("Saving %s", output_path)
    if suffix == ".gif":
        save_gif(frames, output_path, on_progress, total_frames)
    elif suffix in IMAGE_SUFFIXES:
        save_image(frames, output_path)
    elif suffix in (".mp4", ".avi", ".mov"):
        save_mp4(frames, output_path, fps, on_progress, total_frames)
    else:
        raise ValueError(f"Unsupported output format: {suffix}")
