"""Tests for the output writer."""

import pytest
from PIL import Image

from dither_maker.core.processor import ProcessedFrame, Settings, process_frame
from dither_maker.core.reader import Frame
from dither_maker.core.writer import save_gif, save_image, save_output


def _make_processed_frame(color=(128, 128, 128), index=0, mode="RGB"):
    """Create a test ProcessedFrame."""
    fill = (*color, 255) if mode == "RGBA" else color
    img = Image.new(mode, (20, 10), fill)
    raw = Frame(image=img, duration_ms=100, index=index)
    return process_frame(raw, Settings())


class TestSaveImage:
    def test_save_png(self, tmp_path):
        output = tmp_path / "out.png"
        save_image(iter([_make_processed_frame()]), output)
        img = Image.open(str(output))
        assert img.format == "PNG"
        assert img.size == (20, 10)

    def test_save_jpeg_flattens_alpha(self, tmp_path):
        output = tmp_path / "out.jpg"
        save_image(iter([_make_processed_frame(mode="RGBA")]), output)
        assert Image.open(str(output)).mode == "RGB"

    def test_empty_frames_raises(self, tmp_path):
        with pytest.raises(ValueError, match="No frames"):
            save_image(iter([]), tmp_path / "empty.png")


class TestSaveGif:
    def test_save_single_frame_gif(self, tmp_path):
        output = tmp_path / "test_output.gif"
        save_gif(iter([_make_processed_frame()]), output, total_frames=1)

        assert output.exists()
        img = Image.open(str(output))
        assert img.format == "GIF"

    def test_save_multi_frame_gif(self, tmp_path):
        # Pillow merges identical consecutive frames, so vary the content
        colors = [(0, 0, 0), (255, 255, 255), (60, 60, 60)]
        frames = [_make_processed_frame(c, index=i) for i, c in enumerate(colors)]
        output = tmp_path / "test_multi.gif"

        save_gif(iter(frames), output, total_frames=3)

        img = Image.open(str(output))
        assert img.format == "GIF"
        assert getattr(img, "n_frames", 1) == 3

    def test_progress_callback(self, tmp_path):
        frames = [_make_processed_frame(index=i) for i in range(3)]
        progress = []

        def on_progress(current, total):
            progress.append((current, total))

        save_gif(iter(frames), tmp_path / "p.gif", total_frames=3, on_progress=on_progress)

        assert len(progress) == 3
        assert progress[-1] == (3, 3)

    def test_empty_frames_raises(self, tmp_path):
        with pytest.raises(ValueError, match="No frames"):
            save_gif(iter([]), tmp_path / "empty.gif")


class TestSaveOutput:
    def test_dispatch_png(self, tmp_path):
        output = tmp_path / "out.png"
        save_output(iter([_make_processed_frame()]), output)
        assert Image.open(str(output)).format == "PNG"

    def test_unsupported(self, tmp_path):
        with pytest.raises(ValueError, match="Unsupported"):
            save_output(iter([_make_processed_frame()]), tmp_path / "out.txt")
