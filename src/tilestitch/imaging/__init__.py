"""Imaging package - canvas composition and output encoding."""

from tilestitch.imaging.composer import (
    compose_and_save,
    compose_canvas,
    crop_output,
    decode_tile,
)
from tilestitch.imaging.io import build_save_kwargs, format_for_path, save_image

__all__ = [
    'build_save_kwargs',
    'compose_and_save',
    'compose_canvas',
    'crop_output',
    'decode_tile',
    'format_for_path',
    'save_image',
]
