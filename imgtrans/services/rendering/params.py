"""렌더링 휴리스틱 파라미터

배경색 추정, 폰트 크기/방향 결정, 채우기에 쓰이는 상수를 한 곳에 모은다.
알고리즘 코드는 이 값들을 직접 하드코딩하지 않는다.
"""

from pydantic import BaseModel


class SamplerParams(BaseModel):
    """배경색 추정 (영역 바깥 링 샘플링)"""

    edge_margin: int = 3  # 텍스트 박스 바깥 밀착 링 거리(px)
    edge_samples: int = 5  # 변마다 샘플 수
    corner_expand: int = 15  # 확장 링 (네 모서리) 거리(px)
    min_samples: int = 15  # 고유 좌표가 이보다 적으면 방향별 랜덤 샘플 추가
    random_samples_per_round: int = 10
    random_max_rounds: int = 3
    random_offset_min: float = 5.0
    random_offset_range: float = 20.0
    quantize_level: int = 8  # 채널당 버킷 크기
    dominant_share: float = 0.60  # 단일 주색 판정 비율
    ui_color_distance: float = 30.0  # 두 주색 간 RGB 유클리드 거리
    ui_first_share: float = 0.40
    ui_second_share: float = 0.15
    distance_falloff: float = 0.1  # weight = 1 / (1 + d * falloff)
    global_blend: float = 0.15  # 전역 평균색 쪽으로 섞는 비율
    global_samples: int = 50
    seed: int = 0


class LayoutParams(BaseModel):
    """폰트 크기 및 가로/세로 배치"""

    # 방향 판정
    vertical_ratio: float = 1.5
    vertical_ratio_multi_char: float = 1.0
    vertical_multi_char_min_len: int = 3
    vertical_min_height: int = 80
    vertical_max_width: int = 100

    # 초기 폰트 크기 = height * multiplier (길이가 길수록 작아짐)
    short_text_len: int = 2
    medium_text_len: int = 4
    seed_multiplier_short: float = 1.0
    seed_multiplier_medium: float = 0.9
    seed_multiplier_long: float = 0.8

    # 축소 루프
    min_font_size: float = 12.0
    font_step: float = 2.0
    width_tolerance_short: float = 1.1
    width_tolerance: float = 1.02

    # 짧은 텍스트 강조
    boost_max_len: int = 3
    boost_min_box: int = 20
    boost_factor: float = 1.2
    boost_height_cap: float = 1.2

    # 세로 배치
    vertical_char_height_factor: float = 1.5
    vertical_char_factors: tuple[tuple[int, float], ...] = ((2, 2.0), (4, 1.7), (6, 1.4))
    vertical_char_factor_long: float = 1.1
    vertical_width_reference: float = 40.0
    vertical_width_floor: float = 0.8
    vertical_width_span: float = 0.4
    char_spacing_short: float = 0.85
    char_spacing: float = 0.9
    char_spacing_short_len: int = 3


class PaintParams(BaseModel):
    """배경 채우기 및 텍스트 색상"""

    padding: int = 1
    ui_element_opacity: float = 0.85
    luminance_threshold: float = 128.0
    stroke_width: int = 1


class RenderingParams(BaseModel):
    sampler: SamplerParams = SamplerParams()
    layout: LayoutParams = LayoutParams()
    paint: PaintParams = PaintParams()
