"""배경색 추정

텍스트 박스 내부는 아직 원문 글자가 남아 있으므로 박스 바깥 링에서만 샘플링한다.
- 주색(단일 버킷 > 60%)이 있으면 그 색
- 두 색 대비가 뚜렷하면 UI 요소로 보고 큰 쪽 색 + 반투명 채우기
- 그 외에는 중심 거리 가중 평균을 전역 평균색 쪽으로 살짝 당긴 색
"""

import math
from dataclasses import dataclass, field

import numpy as np

from imgtrans.schemas.pipeline import TextRegion
from imgtrans.services.rendering.params import SamplerParams

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class ColorSample:
    x: int
    y: int
    color: RGB


@dataclass(frozen=True)
class BackgroundEstimate:
    color: RGB
    is_ui_element: bool = False


@dataclass
class _Bucket:
    count: int = 0
    total: list[int] = field(default_factory=lambda: [0, 0, 0])

    def add(self, color: RGB) -> None:
        self.count += 1
        for i in range(3):
            self.total[i] += color[i]

    @property
    def average(self) -> RGB:
        return _to_rgb([c / self.count for c in self.total])


def _to_rgb(values: "list[float] | np.ndarray") -> RGB:
    r, g, b = (min(255, max(0, int(round(float(v))))) for v in values)
    return (r, g, b)


def _clamp(value: float, upper: int) -> int:
    return min(upper, max(0, int(value)))


def _inside(region: TextRegion, px: int, py: int) -> bool:
    return region.x <= px < region.x + region.width and region.y <= py < region.y + region.height


def color_distance(a: RGB, b: RGB) -> float:
    """RGB 유클리드 거리 (순수 함수)"""
    return math.sqrt(sum((a[i] - b[i]) ** 2 for i in range(3)))


def luminance(color: RGB) -> float:
    return 0.299 * color[0] + 0.587 * color[1] + 0.114 * color[2]


class ColorSampler:
    """영역 주변 픽셀로 대표 배경색 추정

    랜덤 샘플은 호출마다 같은 seed로 새 generator를 만들기 때문에
    같은 이미지/영역에 대해 항상 같은 색을 반환한다.
    """

    def __init__(self, params: SamplerParams | None = None) -> None:
        self._params = params or SamplerParams()

    def global_average(self, image: np.ndarray) -> RGB:
        """이미지 전체에서 고정 개수 랜덤 포인트의 평균색"""
        h, w = image.shape[:2]
        rng = np.random.default_rng(self._params.seed)
        xs = rng.integers(0, w, size=self._params.global_samples)
        ys = rng.integers(0, h, size=self._params.global_samples)
        pixels = image[ys, xs, :3].astype(np.float64)
        return _to_rgb(pixels.mean(axis=0))

    def estimate(
        self,
        image: np.ndarray,
        region: TextRegion,
        global_average: RGB | None = None,
    ) -> BackgroundEstimate:
        p = self._params
        if global_average is None:
            global_average = self.global_average(image)

        samples = self.collect_samples(image, region)
        if not samples:
            return BackgroundEstimate(global_average)

        buckets: dict[RGB, _Bucket] = {}
        for sample in samples:
            buckets.setdefault(self._quantize(sample.color), _Bucket()).add(sample.color)

        ranked = sorted(buckets.values(), key=lambda b: b.count, reverse=True)
        total = len(samples)
        first = ranked[0]

        if len(ranked) >= 2:
            second = ranked[1]
            if (
                color_distance(first.average, second.average) > p.ui_color_distance
                and first.count / total > p.ui_first_share
                and second.count / total > p.ui_second_share
            ):
                return BackgroundEstimate(first.average, is_ui_element=True)

        if first.count / total > p.dominant_share:
            return BackgroundEstimate(first.average)

        return BackgroundEstimate(self._weighted_average(samples, region, global_average))

    def collect_samples(self, image: np.ndarray, region: TextRegion) -> list[ColorSample]:
        """링 샘플 좌표 수집 (중복 좌표 제거, 이미지 경계 내)"""
        h, w = image.shape[:2]
        points = self._ring_points(region, w, h)
        unique = dict.fromkeys(points)

        rng = np.random.default_rng(self._params.seed)
        rounds = 0
        while len(unique) < self._params.min_samples and rounds < self._params.random_max_rounds:
            for i in range(self._params.random_samples_per_round):
                point = self._directional_point(i % 4, region, rng, w, h)
                if not _inside(region, *point):
                    unique.setdefault(point)
            rounds += 1

        return [
            ColorSample(x=px, y=py, color=_to_rgb(image[py, px, :3])) for px, py in unique
        ]

    def _ring_points(self, region: TextRegion, w: int, h: int) -> list[tuple[int, int]]:
        p = self._params
        x, y, rw, rh = region.x, region.y, region.width, region.height
        m, n = p.edge_margin, p.edge_samples
        points: list[tuple[int, int]] = []

        # 밀착 링: 이미지 안쪽에 있는 변만
        if y > m:
            points += [(int(sx), y - m) for sx in self._spread(x, rw, n)]
        if y + rh + m < h:
            points += [(int(sx), y + rh + m) for sx in self._spread(x, rw, n)]
        if x > m:
            points += [(x - m, int(sy)) for sy in self._spread(y, rh, n)]
        if x + rw + m < w:
            points += [(x + rw + m, int(sy)) for sy in self._spread(y, rh, n)]
        points = [(px, py) for px, py in points if 0 <= px < w and 0 <= py < h]

        # 확장 링: 네 모서리
        e = p.corner_expand
        left, right = _clamp(x - e, w - 1), _clamp(x + rw + e, w - 1)
        top, bottom = _clamp(y - e, h - 1), _clamp(y + rh + e, h - 1)
        corners = [(left, top), (right, top), (left, bottom), (right, bottom)]
        # 경계에 붙은 영역은 클램프된 좌표가 박스 안으로 들어올 수 있음
        points += [pt for pt in corners if not _inside(region, *pt)]

        return points

    @staticmethod
    def _spread(start: int, length: int, count: int) -> list[float]:
        return [start + length * (i + 0.5) / count for i in range(count)]

    def _directional_point(
        self, direction: int, region: TextRegion, rng: np.random.Generator, w: int, h: int
    ) -> tuple[int, int]:
        """0: 위, 1: 오른쪽, 2: 아래, 3: 왼쪽"""
        p = self._params
        offset = p.random_offset_min + rng.random() * p.random_offset_range
        along = rng.random()
        x, y, rw, rh = region.x, region.y, region.width, region.height

        if direction == 0:
            px, py = x + along * rw, y - offset
        elif direction == 1:
            px, py = x + rw + offset, y + along * rh
        elif direction == 2:
            px, py = x + along * rw, y + rh + offset
        else:
            px, py = x - offset, y + along * rh

        return (_clamp(px, w - 1), _clamp(py, h - 1))

    def _quantize(self, color: RGB) -> RGB:
        q = self._params.quantize_level
        r, g, b = ((c // q) * q for c in color)
        return (r, g, b)

    def _weighted_average(
        self, samples: list[ColorSample], region: TextRegion, global_average: RGB
    ) -> RGB:
        """중심에 가까운 샘플일수록 큰 가중치, 이후 전역 평균색과 혼합"""
        p = self._params
        cx, cy = region.center
        weight_sum = 0.0
        weighted = [0.0, 0.0, 0.0]

        for sample in samples:
            distance = math.hypot(sample.x - cx, sample.y - cy)
            weight = 1 / (1 + distance * p.distance_falloff)
            weight_sum += weight
            for i in range(3):
                weighted[i] += sample.color[i] * weight

        local = [c / weight_sum for c in weighted]
        blend = p.global_blend
        return _to_rgb([local[i] * (1 - blend) + global_average[i] * blend for i in range(3)])
