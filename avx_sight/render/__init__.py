"""Render module for plugin list and detail output."""

from avx_sight.render.json_renderer import JSONRenderer
from avx_sight.render.text_renderer import TextRenderer

__all__ = ["JSONRenderer", "TextRenderer"]
