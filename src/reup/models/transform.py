"""Transformation options and filter chain models."""

from enum import StrEnum

from pydantic import BaseModel, Field, ValidationError

from reup.models.errors import InvalidArgumentError


class TransformationSpec(BaseModel):
    """Parametrised video/audio transformations.

    A field left as ``None`` (or ``False`` for the flips) means the matching
    filter is not applied.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    horizontal_flip: bool = Field(default=False, description="Mirror left-right")
    vertical_flip: bool = Field(default=False, description="Mirror top-bottom")
    scale_factor: float | None = Field(
        default=None, gt=0, le=4.0, description="Frame size multiplier, 1.0 = unchanged"
    )
    pitch_factor: float | None = Field(
        default=None, gt=0, le=4.0, description="Audio pitch multiplier"
    )
    speed_factor: float | None = Field(
        default=None, ge=0.5, le=2.0, description="Playback speed multiplier"
    )
    rotation_degrees: float | None = Field(default=None, ge=-360.0, le=360.0)
    brightness: float | None = Field(default=None, ge=-1.0, le=1.0, description="Added brightness")
    contrast: float | None = Field(default=None, gt=0, le=10.0, description="Contrast multiplier")
    blur_sigma: float | None = Field(default=None, gt=0, le=50.0)

    @classmethod
    def from_options(cls, **options) -> "TransformationSpec":
        """Build a spec from caller-supplied options, raising InvalidArgumentError on bad values."""
        try:
            return cls(**options)
        except ValidationError as e:
            invalid = {
                ".".join(str(part) for part in error["loc"]): error["msg"] for error in e.errors()
            }
            raise InvalidArgumentError(
                f"Invalid transformation options: {', '.join(sorted(invalid))}",
                details=invalid,
            )

    @property
    def is_identity(self) -> bool:
        """True when no transformation is active."""
        return not any(
            [
                self.horizontal_flip,
                self.vertical_flip,
                self.scale_factor is not None,
                self.pitch_factor is not None,
                self.speed_factor is not None,
                self.rotation_degrees is not None,
                self.brightness is not None,
                self.contrast is not None,
                self.blur_sigma is not None,
            ]
        )


class FilterStep(BaseModel):
    """One entry of a filter chain: the option it implements and its ffmpeg expression."""

    model_config = {"frozen": True}

    name: str = Field(..., min_length=1)
    expression: str = Field(..., min_length=1)


class FilterChains(BaseModel):
    """Ordered video and audio filter chains built for one encoder invocation."""

    model_config = {"frozen": True}

    video: tuple[FilterStep, ...] = ()
    audio: tuple[FilterStep, ...] = ()

    @property
    def video_filter(self) -> str:
        """Comma-joined ``-vf`` value, empty when no video filter applies."""
        return ",".join(step.expression for step in self.video)

    @property
    def audio_filter(self) -> str:
        """Comma-joined ``-af`` value, empty when no audio filter applies."""
        return ",".join(step.expression for step in self.audio)

    def to_args(self) -> list[str]:
        args: list[str] = []
        if self.video:
            args.extend(["-vf", self.video_filter])
        if self.audio:
            args.extend(["-af", self.audio_filter])
        return args


class EncodePreset(StrEnum):
    """Named strength levels for the transformation presets."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


def build_preset(
    preset: EncodePreset,
    horizontal_flip: bool = False,
    pitch_shift: bool = True,
    speed_change: bool = False,
    brightness: bool = False,
) -> TransformationSpec:
    """Return the TransformationSpec for a preset and its optional toggles."""
    if preset == EncodePreset.LIGHT:
        return TransformationSpec.from_options(
            scale_factor=0.98,
            pitch_factor=1.02 if pitch_shift else None,
        )

    if preset == EncodePreset.MEDIUM:
        return TransformationSpec.from_options(
            horizontal_flip=horizontal_flip,
            scale_factor=0.96,
            brightness=0.03 if brightness else None,
            pitch_factor=1.04 if pitch_shift else None,
        )

    return TransformationSpec.from_options(
        horizontal_flip=horizontal_flip,
        scale_factor=0.94,
        rotation_degrees=1.5,
        brightness=0.05 if brightness else None,
        contrast=1.05,
        blur_sigma=0.5,
        pitch_factor=1.05 if pitch_shift else None,
        speed_factor=1.03 if speed_change else None,
    )
