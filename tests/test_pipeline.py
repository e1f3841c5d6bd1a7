"""Integration tests for the flat-color pipeline."""
import pytest
import numpy as np
from PIL import Image

pytest.importorskip("potrace")

from flatvec.pipeline import FlatColorPipeline, process_image
from flatvec.svg_document import SvgDocument
from flatvec.types import FlatvecConfig, PipelineStage

from conftest import BAND_COLORS, path_bounds, requires_cairosvg, write_png


class TestBlackAndWhitePipeline:
    """White background with a single black glyph."""

    def test_end_to_end(self, glyph_png):
        pipeline = FlatColorPipeline()
        svg = pipeline.process(glyph_png)

        assert pipeline.plan.step_count == 1
        assert pipeline.stage == PipelineStage.PERSISTED

        output_path = glyph_png.with_suffix(".svg")
        assert output_path.exists()
        assert output_path.read_text(encoding="utf-8") == svg

        document = SvgDocument.parse(svg)
        assert document.root.get("viewBox") == "0 0 60 60"
        assert document.root.get("width") is None

        shapes = document.shapes()
        assert len(shapes) == 1
        assert shapes[0].get("fill") in ("#000", "#000000")
        assert shapes[0].get("stroke") is None

        # the glyph itself is traced, not the white page around it
        min_x, min_y, max_x, max_y = path_bounds(shapes[0].get("d"))
        assert 19 <= min_x and max_x <= 41
        assert 19 <= min_y and max_y <= 41

    def test_explicit_output_path(self, glyph_png, tmp_path):
        output_path = tmp_path / "out" / "result.svg"
        process_image(glyph_png, output_path)
        assert output_path.exists()

    def test_unoptimized_output_keeps_full_hex(self, glyph_png):
        svg = FlatColorPipeline(FlatvecConfig(optimize=False)).process(glyph_png)
        assert SvgDocument.parse(svg).shapes()[0].get("fill") == "#000000"

    def test_missing_input(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            process_image(tmp_path / "nope.png")


class TestMonochromePipeline:
    """Single-hue images use the sampled color directly."""

    def test_monochrome_color(self, tmp_path):
        img = np.full((40, 40, 3), 255, dtype=np.uint8)
        img[10:30, 10:30] = [150, 0, 0]
        img[15:25, 15:25] = [90, 0, 0]
        path = write_png(img, tmp_path / "mono.png")

        pipeline = FlatColorPipeline(FlatvecConfig(optimize=False))
        svg = pipeline.process(path)

        assert pipeline.plan.step_count == 1
        fills = {s.get("fill") for s in SvgDocument.parse(svg).shapes()}
        assert fills == {pipeline.plan.colors[0].hex}


@requires_cairosvg
class TestFourColorPipeline:
    """Flat illustration with four evenly spaced hues."""

    def test_end_to_end(self, bands_png):
        pipeline = FlatColorPipeline(FlatvecConfig(optimize=False))
        svg = pipeline.process(bands_png, steps=4)

        assert [p.step_count for p in pipeline.plans] == [1, 2, 3, 4]
        assert pipeline.plan.step_count == 4
        assert pipeline.stage == PipelineStage.PERSISTED

        document = SvgDocument.parse(svg)
        assert document.root.get("viewBox") == "0 0 80 40"

        fills = {s.get("fill") for s in document.shapes()}
        original = {"#%02x%02x%02x" % color for color in BAND_COLORS}
        assert len(fills) == 4
        assert fills <= original

    def test_strokes_match_fills(self, bands_png):
        svg = FlatColorPipeline(FlatvecConfig(optimize=False)).process(bands_png)
        for shape in SvgDocument.parse(svg).shapes():
            assert shape.get("stroke") == shape.get("fill")
            assert shape.get("stroke-width") == "1"

    def test_fewer_steps(self, bands_png):
        pipeline = FlatColorPipeline()
        svg = pipeline.process(bands_png, steps=2)
        assert pipeline.plan.step_count == 2
        assert len(SvgDocument.parse(svg).paint_colors()) <= 2

    def test_rgba_source(self, tmp_path):
        from conftest import band_image

        rgb = band_image()
        alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
        path = tmp_path / "bands_rgba.png"
        Image.fromarray(np.concatenate([rgb, alpha], axis=2)).save(path)

        svg = FlatColorPipeline(FlatvecConfig(optimize=False)).process(path, steps=4)
        fills = {s.get("fill") for s in SvgDocument.parse(svg).shapes()}
        assert fills <= {"#%02x%02x%02x" % color for color in BAND_COLORS}
