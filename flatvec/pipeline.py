"""Flat-color vectorization pipeline."""
import logging
from pathlib import Path
from typing import List, Optional, Union

from flatvec.inspector import inspect_palette, select_plan
from flatvec.layers import apply_single_color, resolve_layers
from flatvec.quantization import sample_palette
from flatvec.raster_ingest import ingest
from flatvec.remap import remap_colors
from flatvec.svg_document import SvgDocument, viewboxify
from flatvec.svg_optimizer import optimize_svg
from flatvec.tracer import trace_posterized
from flatvec.types import (
    FlatvecConfig,
    PipelineStage,
    PosterizationPlan,
    RasterImage,
)

logger = logging.getLogger(__name__)


def save_svg(svg_string: str, output_path: Union[str, Path]) -> Path:
    """Write final markup to disk."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(svg_string, encoding='utf-8')
    return output_path


class FlatColorPipeline:
    """
    Raster to flat-color SVG.

    Stages run strictly in order: sample palette, select plan, trace,
    resolve opacity layers, remap colors (multi-step plans only),
    optimize, persist.
    """

    def __init__(self, config: Optional[FlatvecConfig] = None):
        self.config = config or FlatvecConfig()
        self.stage: Optional[PipelineStage] = None
        self.raster: Optional[RasterImage] = None
        self.plans: List[PosterizationPlan] = []
        self.plan: Optional[PosterizationPlan] = None

    def _advance(self, stage: PipelineStage) -> None:
        self.stage = stage
        logger.info(f"Stage: {stage.value}")

    def inspect(self, input_path: Union[str, Path]) -> List[PosterizationPlan]:
        """Sample the image palette and return the candidate plans."""
        self.raster = ingest(input_path)
        palette = sample_palette(self.raster, self.config.palette_size)
        self.plans = inspect_palette(palette, self.config)
        self._advance(PipelineStage.SAMPLED)
        return self.plans

    def process(
        self,
        input_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
        steps: Optional[int] = None
    ) -> str:
        """
        Vectorize an image.

        Args:
            input_path: Source raster (normally ``<name>.png``)
            output_path: Destination SVG (default: ``<name>.svg`` beside input)
            steps: Requested step count; None picks the richest plan offered

        Returns:
            Final SVG markup with a viewBox instead of fixed size

        Raises:
            FileNotFoundError: If the input does not exist
            TracerError: If tracing fails
            MarkupError: If intermediate markup is malformed
        """
        input_path = Path(input_path)
        output_path = Path(output_path) if output_path else input_path.with_suffix('.svg')

        self.inspect(input_path)
        self.plan = select_plan(self.plans, steps)
        self._advance(PipelineStage.PLAN_SELECTED)
        logger.info(f"Using {self.plan.step_count} step(s): {self.plan.hexes}")

        svg_string = self.vectorize(self.raster, self.plan)

        save_svg(svg_string, output_path)
        self._advance(PipelineStage.PERSISTED)
        logger.info(f"Wrote {output_path}")
        return svg_string

    def vectorize(self, raster: RasterImage, plan: PosterizationPlan) -> str:
        """Run tracing through optimization for an already selected plan."""
        step = plan.step_count

        traced = trace_posterized(
            raster,
            step,
            opt_tolerance=self.config.opt_tolerance,
            turdsize=self.config.turdsize,
        )
        self._advance(PipelineStage.TRACED)

        document, layers = resolve_layers(
            SvgDocument.parse(traced),
            stroke=self.config.stroke_for(step),
            stroke_width=self.config.stroke_width,
        )
        self._advance(PipelineStage.LAYERS_RESOLVED)

        if step == 1:
            document = apply_single_color(document, layers, plan.colors[0])
        else:
            document = remap_colors(document, raster, self.config.quantize_bins)
            self._advance(PipelineStage.COLORS_REMAPPED)

        svg_string = document.to_string()
        if self.config.optimize:
            svg_string = optimize_svg(svg_string)
        svg_string = viewboxify(svg_string)
        self._advance(PipelineStage.OPTIMIZED)
        return svg_string


def process_image(
    image_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    steps: Optional[int] = None,
    config: Optional[FlatvecConfig] = None
) -> str:
    """
    Convert one image to a flat-color SVG.

    Example:
        >>> svg = process_image("logo.png")            # writes logo.svg
        >>> svg = process_image("logo.png", steps=2)
    """
    pipeline = FlatColorPipeline(config)
    return pipeline.process(image_path, output_path, steps)
