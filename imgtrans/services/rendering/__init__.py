"""Rendering 모듈

사용법:
    from imgtrans.services.rendering import get_renderer

    renderer = get_renderer()
    output_bytes, stats = renderer.render_bytes(image_bytes, regions)
"""

from imgtrans.config import get_settings
from imgtrans.services.rendering.params import RenderingParams
from imgtrans.services.rendering.renderer import OverlayRenderer, RenderingError

__all__ = ["OverlayRenderer", "RenderingError", "RenderingParams", "get_renderer", "set_renderer"]

_renderer: OverlayRenderer | None = None


def get_renderer() -> OverlayRenderer:
    global _renderer
    if _renderer is None:
        _renderer = OverlayRenderer(RenderingParams(), font_path=get_settings().font_path)
    return _renderer


def set_renderer(renderer: OverlayRenderer | None) -> None:
    """renderer 설정 (테스트용)"""
    global _renderer
    _renderer = renderer
