"""폰트 크기/방향 결정 테스트

측정 함수는 고정폭(글자 수 × 크기)으로 대체한다.
"""

import pytest

from imgtrans.services.rendering.layout import LayoutFitter, Orientation, vertical_chars
from imgtrans.services.rendering.params import LayoutParams


def monospace(text: str, size: float) -> float:
    return len(text) * size


class TestOrientation:
    def setup_method(self) -> None:
        self.fitter = LayoutFitter()

    @pytest.mark.parametrize(
        ("text", "width", "height", "expected"),
        [
            ("Hello", 100, 30, Orientation.HORIZONTAL),
            ("四个汉字", 30, 150, Orientation.VERTICAL),  # 비율 5
            ("abc", 60, 70, Orientation.VERTICAL),  # 비율 > 1 이고 3글자
            ("ab", 60, 70, Orientation.HORIZONTAL),  # 비율 > 1 이지만 2글자
            ("ab", 90, 85, Orientation.VERTICAL),  # 높이 > 80, 폭 < 100
        ],
    )
    def test_orientation(self, text: str, width: int, height: int, expected: Orientation) -> None:
        assert self.fitter.orientation(text, width, height) is expected


class TestSeedFontSize:
    def test_multiplier_decreases_with_length(self) -> None:
        fitter = LayoutFitter()
        sizes = [fitter.seed_font_size(text, 100) for text in ("ab", "abcd", "abcdefgh")]
        assert sizes == sorted(sizes, reverse=True)

    def test_never_below_floor(self) -> None:
        assert LayoutFitter().seed_font_size("abcdefgh", 5) == 12.0


class TestFit:
    def setup_method(self) -> None:
        self.fitter = LayoutFitter()

    def test_short_cjk_text_in_wide_box(self) -> None:
        fit = self.fitter.fit("你好", 100, 30, monospace)

        assert fit.orientation is Orientation.HORIZONTAL
        assert 12 <= fit.font_size <= 30 * 1.4
        assert fit.font_size == pytest.approx(36.0)
        assert fit.bold

    def test_shrinks_until_width_fits(self) -> None:
        fit = self.fitter.fit("Hello", 100, 30, monospace)

        assert fit.font_size == 20.0
        assert monospace("Hello", fit.font_size) < 100 * 1.02
        assert not fit.bold

    def test_vertical_box_stacks_characters(self) -> None:
        fit = self.fitter.fit("四个汉字", 30, 150, monospace)

        assert fit.orientation is Orientation.VERTICAL
        assert fit.font_size == pytest.approx(12.0)
        assert fit.char_spacing == 0.9
        total = len(vertical_chars("四个汉字")) * fit.font_size * fit.char_spacing
        assert total <= 150 * fit.char_spacing

    def test_short_vertical_text_stays_inside_box(self) -> None:
        fit = self.fitter.fit("你好", 60, 100, monospace)

        assert fit.orientation is Orientation.VERTICAL
        assert fit.font_size == pytest.approx(38.4)
        assert fit.char_spacing == 0.85
        total = len(vertical_chars("你好")) * fit.font_size * fit.char_spacing
        assert total <= 100 * fit.char_spacing

    def test_vertical_char_height_bounded_by_box(self) -> None:
        assert LayoutFitter().vertical_char_height(80, 2, 60, 100) <= 50.0

    def test_overflowing_text_degrades_to_floor(self) -> None:
        fit = self.fitter.fit("a very long sentence", 20, 12, monospace)
        assert fit.font_size == 12.0

    def test_never_raises_when_measure_always_overflows(self) -> None:
        fit = self.fitter.fit("text", 50, 40, lambda text, size: 10_000.0)
        assert fit.font_size == 12.0

    def test_wider_box_never_yields_smaller_font(self) -> None:
        sizes = [self.fitter.fit("Hello world", w, 40, monospace).font_size for w in range(40, 400, 5)]
        assert sizes == sorted(sizes)

    def test_switch_to_horizontal_never_shrinks_font(self) -> None:
        narrow = self.fitter.fit("你好", 99, 100, monospace)
        wide = self.fitter.fit("你好", 100, 100, monospace)

        assert narrow.orientation is Orientation.VERTICAL
        assert wide.orientation is Orientation.HORIZONTAL
        assert narrow.font_size <= wide.font_size

    def test_monotonic_across_orientation_boundary(self) -> None:
        sizes = [self.fitter.fit("你好", w, 100, monospace).font_size for w in range(30, 200, 3)]
        assert sizes == sorted(sizes)

    def test_params_are_tunable(self) -> None:
        fitter = LayoutFitter(LayoutParams(min_font_size=8.0))
        assert fitter.fit("a very long sentence", 20, 12, monospace).font_size < 12.0


class TestVerticalChars:
    def test_skips_whitespace(self) -> None:
        assert vertical_chars("A B") == ["A", "B"]

    def test_whitespace_only_kept(self) -> None:
        assert vertical_chars("  ") == [" ", " "]
