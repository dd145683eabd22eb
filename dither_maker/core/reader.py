"""Frame extraction from still images, GIFs and video files.

Provides a unified lazy iterator interface for every format.
GIF frames are composited onto a canvas to handle disposal methods correctly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import cv2
from PIL import Image

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp")
VIDEO_SUFFIXES = (".mp4", ".avi", ".mov", ".mkv", ".webm")


@dataclass
class Frame:
    """A single image or animation frame."""

    image: Image.Image  # RGB, or RGBA when the source has transparency
    duration_ms: int  # Display duration in milliseconds, 0 for still images
    index: int


@dataclass
class MediaInfo:
    """Metadata about the input file."""

    path: Path
    format: str  # "image", "gif" or "mp4"
    frame_count: int
    fps: float
    width: int
    height: int


def detect_format(path: Path) -> str:
    """Detect media format from file extension."""
    suffix = path.suffix.lower()
    if suffix == ".gif":
        return "gif"
    if suffix in IMAGE_SUFFIXES:
        return "image"
    if suffix in VIDEO_SUFFIXES:
        return "mp4"
    raise ValueError(f"Unsupported format: {suffix}")


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or (
        img.mode == "P" and "transparency" in img.info
    )


class ImageReader:
    """Single-frame reader for still images."""

    def __init__(self, path: Path) -> None:
        self.path = path
        with Image.open(path) as img:
            self._size = img.size

    @property
    def info(self) -> MediaInfo:
        return MediaInfo(
            path=self.path,
            format="image",
            frame_count=1,
            fps=0.0,
            width=self._size[0],
            height=self._size[1],
        )

    def frames(self) -> Iterator[Frame]:
        yield self.seek(0)

    def seek(self, frame_idx: int) -> Frame:
        if frame_idx != 0:
            raise IndexError(f"Frame {frame_idx} not found")
        with Image.open(self.path) as img:
            mode = "RGBA" if _has_alpha(img) else "RGB"
            return Frame(image=img.convert(mode), duration_ms=0, index=0)

    @property
    def frame_count(self) -> int:
        return 1


def _composite_gif(path: Path, last: int) -> Iterator[tuple[int, Image.Image, int]]:
    """Yield (index, composited RGB frame, duration) for frames 0..last."""
    with Image.open(path) as img:
        canvas = Image.new("RGBA", img.size, (0, 0, 0, 255))
        for i in range(last + 1):
            img.seek(i)
            layer = img.convert("RGBA")
            canvas.paste(layer, (0, 0), layer)
            # Clamp absurdly short durations
            duration = max(img.info.get("duration", 100), 10)
            yield i, canvas.convert("RGB"), duration


class GifReader:
    """Lazy frame iterator for GIF files, compositing frames for disposal."""

    def __init__(self, path: Path) -> None:
        self.path = path
        with Image.open(path) as img:
            self._frame_count = getattr(img, "n_frames", 1)
            self._duration = img.info.get("duration", 100)
            self._size = img.size

    @property
    def info(self) -> MediaInfo:
        return MediaInfo(
            path=self.path,
            format="gif",
            frame_count=self._frame_count,
            fps=1000.0 / max(self._duration, 1),
            width=self._size[0],
            height=self._size[1],
        )

    def frames(self) -> Iterator[Frame]:
        for i, image, duration in _composite_gif(self.path, self._frame_count - 1):
            yield Frame(image=image, duration_ms=duration, index=i)

    def seek(self, frame_idx: int) -> Frame:
        """Get a specific frame by index (composites up to that frame)."""
        if not 0 <= frame_idx < self._frame_count:
            raise IndexError(f"Frame {frame_idx} not found")
        *_, (i, image, duration) = _composite_gif(self.path, frame_idx)
        return Frame(image=image, duration_ms=duration, index=i)

    @property
    def frame_count(self) -> int:
        return self._frame_count


class Mp4Reader:
    """Lazy frame iterator for video files using OpenCV."""

    def __init__(self, path: Path) -> None:
        self.path = path
        cap = cv2.VideoCapture(str(path))
        try:
            if not cap.isOpened():
                raise IOError(f"Cannot open video: {path}")
            self._frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
            self._fps = cap.get(cv2.CAP_PROP_FPS) or 24.0
            self._width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
            self._height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        finally:
            cap.release()

    @property
    def info(self) -> MediaInfo:
        return MediaInfo(
            path=self.path,
            format="mp4",
            frame_count=self._frame_count,
            fps=self._fps,
            width=self._width,
            height=self._height,
        )

    def _to_frame(self, bgr, index: int) -> Frame:
        rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
        return Frame(
            image=Image.fromarray(rgb),
            duration_ms=int(1000.0 / self._fps),
            index=index,
        )

    def frames(self) -> Iterator[Frame]:
        cap = cv2.VideoCapture(str(self.path))
        idx = 0
        try:
            ok, bgr = cap.read()
            while ok:
                yield self._to_frame(bgr, idx)
                idx += 1
                ok, bgr = cap.read()
        finally:
            cap.release()

    def seek(self, frame_idx: int) -> Frame:
        cap = cv2.VideoCapture(str(self.path))
        try:
            cap.set(cv2.CAP_PROP_POS_FRAMES, frame_idx)
            ok, bgr = cap.read()
        finally:
            cap.release()
        if not ok:
            raise IndexError(f"Frame {frame_idx} not found")
        return self._to_frame(bgr, frame_idx)

    @property
    def frame_count(self) -> int:
        return self._frame_count


def open_media(path: str | Path) -> ImageReader | GifReader | Mp4Reader:
    """Open a media file and return the appropriate reader."""
    local_path = Path(path)
    if not local_path.exists():
        raise FileNotFoundError(f"File not found: {local_path}")

    fmt = detect_format(local_path)
    logger.debug("Opening %s as %s", local_path, fmt)
    if fmt == "gif":
        return GifReader(local_path)
    if fmt == "image":
        return ImageReader(local_path)
    return Mp4Reader(local_path)
