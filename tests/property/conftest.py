"""Hypothesis strategies for property-based testing."""

from hypothesis import strategies as st

from reup.models.transform import TransformationSpec
from reup.models.upload import PrivacyStatus, UploadMetadata, VideoCategory


def optional(strategy):
    return st.one_of(st.none(), strategy)


def bounded(min_value, max_value, exclude_min=False):
    return st.floats(
        min_value=min_value,
        max_value=max_value,
        exclude_min=exclude_min,
        allow_nan=False,
        allow_infinity=False,
    )


@st.composite
def generate_transformation_spec(draw):
    """Generate a random valid TransformationSpec."""
    return TransformationSpec(
        horizontal_flip=draw(st.booleans()),
        vertical_flip=draw(st.booleans()),
        scale_factor=draw(optional(bounded(0.1, 4.0))),
        pitch_factor=draw(optional(bounded(0.5, 2.0))),
        speed_factor=draw(optional(bounded(0.5, 2.0))),
        rotation_degrees=draw(optional(bounded(-360.0, 360.0))),
        brightness=draw(optional(bounded(-1.0, 1.0))),
        contrast=draw(optional(bounded(0.0, 10.0, exclude_min=True))),
        blur_sigma=draw(optional(bounded(0.0, 50.0, exclude_min=True))),
    )


@st.composite
def generate_upload_metadata(draw):
    """Generate UploadMetadata with titles and descriptions around the length caps."""
    return UploadMetadata(
        title=draw(st.text(max_size=250)),
        description=draw(st.text(max_size=6000)),
        tags=draw(st.lists(st.text(max_size=20), max_size=10)),
        category=draw(st.sampled_from(list(VideoCategory))),
        privacy=draw(st.sampled_from(list(PrivacyStatus))),
    )


@st.composite
def generate_timestamp(draw, max_seconds=359999.99):
    """Generate an ``HH:MM:SS.hh`` timestamp and the seconds it denotes."""
    hundredths = draw(st.integers(min_value=0, max_value=int(max_seconds * 100)))
    seconds, hh = divmod(hundredths, 100)
    minutes, ss = divmod(seconds, 60)
    hours, mm = divmod(minutes, 60)
    return f"{hours:02d}:{mm:02d}:{ss:02d}.{hh:02d}", hundredths / 100
