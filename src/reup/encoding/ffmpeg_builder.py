"""FFmpeg filter chain construction."""

import math

from reup.models.transform import FilterChains, FilterStep, TransformationSpec


class FFmpegFilterGraphBuilder:
    """Builds the ``-vf``/``-af`` filter chains for a TransformationSpec.

    Video order: hflip, vflip, scale, rotate, eq, gblur, setpts.
    Audio order: pitch shift, atempo.
    """

    def __init__(self, sample_rate: int = 44100):
        self.sample_rate = sample_rate

    def build(self, spec: TransformationSpec) -> FilterChains:
        return FilterChains(
            video=tuple(self.build_video_chain(spec)),
            audio=tuple(self.build_audio_chain(spec)),
        )

    def build_video_chain(self, spec: TransformationSpec) -> list[FilterStep]:
        steps = []
        if spec.horizontal_flip:
            steps.append(FilterStep(name="hflip", expression="hflip"))
        if spec.vertical_flip:
            steps.append(FilterStep(name="vflip", expression="vflip"))
        if spec.scale_factor is not None:
            steps.append(self.build_scale_filter(spec.scale_factor))
        if spec.rotation_degrees is not None:
            radians = spec.rotation_degrees * math.pi / 180
            steps.append(FilterStep(name="rotate", expression=f"rotate={radians:.4f}"))
        if spec.brightness is not None or spec.contrast is not None:
            brightness = spec.brightness if spec.brightness is not None else 0.0
            contrast = spec.contrast if spec.contrast is not None else 1.0
            steps.append(
                FilterStep(
                    name="eq",
                    expression=f"eq=brightness={brightness:.2f}:contrast={contrast:.2f}",
                )
            )
        if spec.blur_sigma is not None:
            steps.append(FilterStep(name="gblur", expression=f"gblur=sigma={spec.blur_sigma:.2f}"))
        if spec.speed_factor is not None:
            steps.append(
                FilterStep(name="setpts", expression=f"setpts={1 / spec.speed_factor:.3f}*PTS")
            )
        return steps

    def build_audio_chain(self, spec: TransformationSpec) -> list[FilterStep]:
        steps = []
        if spec.pitch_factor is not None:
            # Resampling at a shifted rate changes pitch; aresample restores the output rate.
            rate = self.sample_rate
            steps.append(
                FilterStep(
                    name="pitch_shift",
                    expression=f"asetrate={rate}*{spec.pitch_factor:.2f},aresample={rate}",
                )
            )
        if spec.speed_factor is not None:
            steps.append(FilterStep(name="atempo", expression=f"atempo={spec.speed_factor:.3f}"))
        return steps

    def build_scale_filter(self, factor: float) -> FilterStep:
        """Scale both axes, rounded down to even sizes for yuv420p encoders."""
        return FilterStep(
            name="scale",
            expression=f"scale=trunc(iw*{factor:.2f}/2)*2:trunc(ih*{factor:.2f}/2)*2",
        )
