"""파이프라인 데이터 모델

Recognition → Translation → Rendering 전체에서 사용하는 공통 스키마
"""

import math
from enum import StrEnum
from typing import Literal, Self

from pydantic import ConfigDict, model_validator

from imgtrans.schemas.base import BaseSchema


class TranslateSource(StrEnum):
    """번역 결과 출처 (provenance)"""

    NONE = ""
    BATCH = "batch"  # 일괄 요청 성공
    FALLBACK = "fallback"  # 영역별 개별 요청
    CACHE = "cache"  # 번역 캐시 적중
    ORIGINAL = "original"  # 번역 실패, 원문 유지


class BBox(BaseSchema):
    """바운딩 박스 [x1, y1, x2, y2]

    유효성:
    - x1 <= x2, y1 <= y2 보장 (자동 정렬)
    - 모든 좌표는 0 이상
    """

    x1: float
    y1: float
    x2: float
    y2: float

    @model_validator(mode="after")
    def validate_and_normalize(self) -> Self:
        if self.x1 > self.x2:
            self.x1, self.x2 = self.x2, self.x1
        if self.y1 > self.y2:
            self.y1, self.y2 = self.y2, self.y1

        self.x1 = max(0.0, self.x1)
        self.y1 = max(0.0, self.y1)
        self.x2 = max(0.0, self.x2)
        self.y2 = max(0.0, self.y2)

        return self

    @classmethod
    def from_vertices(cls, vertices: list[tuple[float, float]]) -> "BBox":
        """다각형 꼭짓점의 최소/최대 좌표로 외접 사각형 생성

        Raises:
            ValueError: 꼭짓점이 없거나 NaN/Inf 좌표가 있는 경우
        """
        if not vertices:
            raise ValueError("BBox requires at least one vertex")

        for i, (vx, vy) in enumerate(vertices):
            if not (math.isfinite(vx) and math.isfinite(vy)):
                raise ValueError(f"Vertex {i} is NaN or Inf")

        xs = [v[0] for v in vertices]
        ys = [v[1] for v in vertices]
        return cls(x1=min(xs), y1=min(ys), x2=max(xs), y2=max(ys))

    def to_tuple(self) -> tuple[int, int, int, int]:
        """정수 튜플로 변환 (round 사용, truncation 방지)"""
        return (round(self.x1), round(self.y1), round(self.x2), round(self.y2))

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1


class TextRegion(BaseSchema):
    """인식된 텍스트 영역 하나

    recognition 단계에서 생성되고, translation 단계에서 translated/translate_source가
    한 번 채워지며, rendering 단계에서는 읽기 전용으로 사용된다.
    width/height는 생성 시 1 이상으로 보정된다.
    """

    index: int = 0  # recognition 결과 순서
    text: str
    x: int = 0
    y: int = 0
    width: int = 1
    height: int = 1
    translated: str = ""
    translate_source: TranslateSource = TranslateSource.NONE
    confidence: float | None = None

    @model_validator(mode="after")
    def clamp_geometry(self) -> Self:
        self.x = max(0, self.x)
        self.y = max(0, self.y)
        self.width = max(1, self.width)
        self.height = max(1, self.height)
        return self

    @classmethod
    def from_bbox(
        cls, index: int, text: str, bbox: BBox, confidence: float | None = None
    ) -> "TextRegion":
        x1, y1, x2, y2 = bbox.to_tuple()
        return cls(
            index=index,
            text=text,
            x=x1,
            y=y1,
            width=x2 - x1,
            height=y2 - y1,
            confidence=confidence,
        )

    @property
    def bbox(self) -> BBox:
        return BBox(x1=self.x, y1=self.y, x2=self.x + self.width, y2=self.y + self.height)

    @property
    def center(self) -> tuple[float, float]:
        """중심점 (cx, cy)"""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def with_translation(self, translated: str, source: TranslateSource) -> "TextRegion":
        """번역 결과가 채워진 사본 반환 (원본 변이 없음)"""
        return self.model_copy(update={"translated": translated, "translate_source": source})


class RenderStats(BaseSchema):
    processed_count: int = 0
    skipped_count: int = 0


class PipelineSuccess(BaseSchema):
    """번역 완료 결과 (결과 캐시에 그대로 직렬화됨)"""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    status: Literal["completed"] = "completed"
    output_image: bytes
    output_format: str = "PNG"
    regions: list[TextRegion]
    processed_count: int
    skipped_count: int
    cached: bool = False


class NoTextDetected(BaseSchema):
    """사용 가능한 텍스트 영역이 없음 (실패와 구분되는 결과)"""

    status: Literal["no_text"] = "no_text"
    message: str = "이미지에서 텍스트를 찾지 못했습니다"


class PipelineFailure(BaseSchema):
    status: Literal["failed"] = "failed"
    code: str
    message: str


PipelineOutcome = PipelineSuccess | NoTextDetected | PipelineFailure


class ProviderStatus(BaseSchema):
    configured: bool
    provider: str


class ServiceStatus(BaseSchema):
    recognition: ProviderStatus
    translation: ProviderStatus
    result_cache: bool = False  # Redis 연결 가능 여부
