"""번역 텍스트 오버레이 렌더링

영역마다: 배경색 추정 → 채우기 → 텍스트 색 선택 → 폰트/방향 결정 → 그리기
배경색은 항상 원본 이미지에서 샘플링하므로 영역 처리 순서와 무관하다.
"""

import io
import logging

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFont

from imgtrans.schemas.pipeline import RenderStats, TextRegion
from imgtrans.services.rendering.color_sampler import (
    RGB,
    BackgroundEstimate,
    ColorSampler,
    luminance,
)
from imgtrans.services.rendering.fonts import get_font, make_measure
from imgtrans.services.rendering.layout import (
    FitResult,
    LayoutFitter,
    Orientation,
    vertical_chars,
)
from imgtrans.services.rendering.params import RenderingParams

logger = logging.getLogger(__name__)

BLACK: RGB = (0, 0, 0)
WHITE: RGB = (255, 255, 255)


class RenderingError(Exception):
    pass


def decode_image(image_bytes: bytes) -> np.ndarray:
    """이미지 바이트 → BGR ndarray"""
    buffer = np.frombuffer(image_bytes, dtype=np.uint8)
    if buffer.size == 0:
        raise RenderingError("빈 이미지 데이터입니다")

    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise RenderingError("이미지를 디코딩할 수 없습니다")
    return image


def encode_image(image: Image.Image, output_format: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    try:
        image.save(buffer, format=output_format.upper())
    except (KeyError, ValueError, OSError) as e:
        raise RenderingError(f"이미지 인코딩 실패 ({output_format}): {e}") from e
    return buffer.getvalue()


def text_colors(background: RGB, threshold: float = 128.0) -> tuple[RGB, RGB]:
    """배경 밝기에 따른 (글자색, 외곽선색)"""
    if luminance(background) > threshold:
        return BLACK, WHITE
    return WHITE, BLACK


def display_text(region: TextRegion) -> str:
    return (region.translated or region.text).strip()


class OverlayRenderer:
    def __init__(self, params: RenderingParams | None = None, font_path: str = "") -> None:
        self._params = params or RenderingParams()
        self._sampler = ColorSampler(self._params.sampler)
        self._fitter = LayoutFitter(self._params.layout)
        self._font_path = font_path
        self._measure = make_measure(font_path=font_path)

    def render_bytes(
        self, image_bytes: bytes, regions: list[TextRegion], output_format: str = "PNG"
    ) -> tuple[bytes, RenderStats]:
        """디코딩 → 렌더링 → 인코딩

        Raises:
            RenderingError: 디코딩/인코딩 실패 (부분 결과 없음)
        """
        image = decode_image(image_bytes)
        rendered, stats = self.render(image, regions)
        return encode_image(rendered, output_format), stats

    def render(
        self, image: np.ndarray, regions: list[TextRegion]
    ) -> tuple[Image.Image, RenderStats]:
        """BGR 이미지 위에 번역 텍스트를 그린 새 PIL 이미지 반환 (입력 ndarray는 변경하지 않음)"""
        if image.size == 0 or image.ndim != 3:
            raise RenderingError("유효하지 않은 이미지입니다")

        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        global_average = self._sampler.global_average(rgb)

        pil_image = Image.fromarray(rgb)
        draw = ImageDraw.Draw(pil_image)
        processed = skipped = 0

        for region in regions:
            text = display_text(region)
            if not region.text.strip() or not text:
                skipped += 1
                continue

            background = self._sampler.estimate(rgb, region, global_average)
            self._paint_background(pil_image, draw, region, background)

            fill, stroke = text_colors(background.color, self._params.paint.luminance_threshold)
            fit = self._fitter.fit(text, region.width, region.height, self._measure)
            try:
                self._draw_text(draw, region, text, fit, fill, stroke)
            except OSError as e:
                raise RenderingError(f"텍스트 렌더링 실패 (영역 {region.index}): {e}") from e
            processed += 1

        logger.info(f"렌더링 완료: {processed}개 처리, {skipped}개 건너뜀")
        return pil_image, RenderStats(processed_count=processed, skipped_count=skipped)

    def _padded_box(self, region: TextRegion, size: tuple[int, int]) -> tuple[int, int, int, int]:
        pad = self._params.paint.padding
        w, h = size
        return (
            max(0, region.x - pad),
            max(0, region.y - pad),
            min(w, region.x + region.width + pad),
            min(h, region.y + region.height + pad),
        )

    def _paint_background(
        self,
        canvas: Image.Image,
        draw: ImageDraw.ImageDraw,
        region: TextRegion,
        background: BackgroundEstimate,
    ) -> None:
        x1, y1, x2, y2 = self._padded_box(region, canvas.size)
        if x2 <= x1 or y2 <= y1:
            return

        if background.is_ui_element:
            # 버튼/배지 등은 원래 질감이 살짝 비치도록 반투명
            area = canvas.crop((x1, y1, x2, y2))
            solid = Image.new("RGB", area.size, background.color)
            canvas.paste(Image.blend(area, solid, self._params.paint.ui_element_opacity), (x1, y1))
        else:
            draw.rectangle((x1, y1, x2 - 1, y2 - 1), fill=background.color)

    def _draw_text(
        self,
        draw: ImageDraw.ImageDraw,
        region: TextRegion,
        text: str,
        fit: FitResult,
        fill: RGB,
        stroke: RGB,
    ) -> None:
        cx, cy = region.center
        font = get_font(round(fit.font_size), fit.bold, self._font_path)

        if fit.orientation is Orientation.HORIZONTAL:
            self._draw_centered(draw, (cx, cy), text, font, fill, stroke)
            return

        chars = vertical_chars(text)
        step = fit.font_size * fit.char_spacing
        start_y = cy - (step * len(chars)) / 2 + fit.font_size / 2
        for i, char in enumerate(chars):
            self._draw_centered(draw, (cx, start_y + i * step), char, font, fill, stroke)

    def _draw_centered(
        self,
        draw: ImageDraw.ImageDraw,
        center: tuple[float, float],
        text: str,
        font: ImageFont.FreeTypeFont,
        fill: RGB,
        stroke: RGB,
    ) -> None:
        stroke_width = self._params.paint.stroke_width
        left, top, right, bottom = draw.textbbox(
            (0, 0), text, font=font, stroke_width=stroke_width
        )
        x = center[0] - (left + right) / 2
        y = center[1] - (top + bottom) / 2
        draw.text(
            (x, y),
            text,
            font=font,
            fill=fill,
            stroke_width=stroke_width,
            stroke_fill=stroke,
        )
