from functools import lru_cache
from pathlib import Path
from typing import cast

from PIL import ImageFont

from imgtrans.services.rendering.layout import MeasureFn

# CJK 글리프가 있는 폰트 우선
FONT_PATHS = [
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc",
    "/usr/share/fonts/noto-cjk/NotoSansCJK-Regular.ttc",
    "/usr/share/fonts/truetype/wqy/wqy-microhei.ttc",
    "/System/Library/Fonts/PingFang.ttc",
    "C:/Windows/Fonts/msyh.ttc",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
]

BOLD_FONT_PATHS = [
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Bold.ttc",
    "/usr/share/fonts/noto-cjk/NotoSansCJK-Bold.ttc",
    "C:/Windows/Fonts/msyhbd.ttc",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
]


@lru_cache(maxsize=128)
def get_font(size: int, bold: bool = False, font_path: str = "") -> ImageFont.FreeTypeFont:
    """크기별 폰트 로드 (설정 경로 → bold 후보 → 일반 후보 → Pillow 기본 폰트)"""
    size = max(1, size)
    candidates = [font_path] if font_path else []
    if bold:
        candidates += BOLD_FONT_PATHS
    candidates += FONT_PATHS

    for path in candidates:
        if Path(path).exists():
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue
    return cast(ImageFont.FreeTypeFont, ImageFont.load_default(size=size))


def make_measure(bold: bool = False, font_path: str = "") -> MeasureFn:
    """LayoutFitter용 측정 함수 생성"""

    def measure(text: str, font_size: float) -> float:
        return get_font(round(font_size), bold, font_path).getlength(text)

    return measure
