"""폰트 크기 및 배치 방향 결정

측정 함수(measure)를 주입받아 PIL 없이도 테스트할 수 있다.
measure(text, font_size) -> 렌더링 폭(px)
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from imgtrans.services.rendering.params import LayoutParams

MeasureFn = Callable[[str, float], float]


class Orientation(StrEnum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class FitResult:
    font_size: float  # 세로 배치일 때는 글자 한 칸 높이
    orientation: Orientation
    bold: bool = False
    char_spacing: float = 1.0


def vertical_chars(text: str) -> list[str]:
    """세로 배치 시 쌓을 글자 목록 (공백 제외)"""
    chars = [c for c in text if not c.isspace()]
    return chars or list(text)


class LayoutFitter:
    def __init__(self, params: LayoutParams | None = None) -> None:
        self._params = params or LayoutParams()

    def orientation(self, text: str, width: float, height: float) -> Orientation:
        p = self._params
        ratio = height / max(width, 1)
        if ratio > p.vertical_ratio:
            return Orientation.VERTICAL
        if ratio > p.vertical_ratio_multi_char and len(text) >= p.vertical_multi_char_min_len:
            return Orientation.VERTICAL
        if height > p.vertical_min_height and width < p.vertical_max_width:
            return Orientation.VERTICAL
        return Orientation.HORIZONTAL

    def seed_font_size(self, text: str, height: float) -> float:
        p = self._params
        if len(text) <= p.short_text_len:
            multiplier = p.seed_multiplier_short
        elif len(text) <= p.medium_text_len:
            multiplier = p.seed_multiplier_medium
        else:
            multiplier = p.seed_multiplier_long
        return max(height * multiplier, p.min_font_size)

    def fit(self, text: str, width: float, height: float, measure: MeasureFn) -> FitResult:
        """박스에 맞는 폰트 크기 계산

        1. 높이 기반 초기값
        2. 폭 허용치를 넘는 동안 step씩 축소 (하한에서 중단)
        3. 짧은 텍스트는 확대 + bold
        4. 세로 배치면 글자 높이로 변환

        하한에 걸려도 실패하지 않고 하한 크기를 반환한다 (넘치는 건 허용).
        """
        p = self._params
        orientation = self.orientation(text, width, height)

        font_size = self.seed_font_size(text, height)
        tolerance = p.width_tolerance_short if len(text) <= p.short_text_len else p.width_tolerance
        limit = width * tolerance
        while font_size > p.min_font_size and measure(text, font_size) >= limit:
            font_size -= p.font_step
        font_size = max(font_size, p.min_font_size)

        bold = False
        if len(text) <= p.boost_max_len and width > p.boost_min_box and height > p.boost_min_box:
            font_size = min(font_size * p.boost_factor, height * p.boost_height_cap)
            bold = True

        if orientation is Orientation.VERTICAL:
            count = len(vertical_chars(text))
            return FitResult(
                font_size=self.vertical_char_height(font_size, count, width, height),
                orientation=orientation,
                bold=bold,
                char_spacing=self.char_spacing(count),
            )

        return FitResult(font_size=font_size, orientation=orientation, bold=bold)

    def vertical_char_height(
        self, font_size: float, char_count: int, width: float, height: float
    ) -> float:
        p = self._params
        factor = p.vertical_char_factor_long
        for max_len, value in p.vertical_char_factors:
            if char_count <= max_len:
                factor = value
                break

        # 좁은 박스일수록 글자를 작게
        factor *= p.vertical_width_floor + min(1.0, width / p.vertical_width_reference) * p.vertical_width_span

        count = max(char_count, 1)
        char_height = min(font_size * p.vertical_char_height_factor, height / count * factor)
        # 쌓인 높이가 박스를 넘지 않고, 더 넓은 박스의 가로 배치보다 커지지 않도록
        char_height = min(char_height, height / count, font_size)
        return max(char_height, p.min_font_size)

    def char_spacing(self, char_count: int) -> float:
        p = self._params
        return p.char_spacing_short if char_count <= p.char_spacing_short_len else p.char_spacing
