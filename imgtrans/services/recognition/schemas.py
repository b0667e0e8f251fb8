"""Recognition 스키마"""

from typing import Self

from pydantic import BaseModel, model_validator

from imgtrans.schemas.pipeline import BBox


class ImageSize(BaseModel):
    width: int
    height: int


class RecognizedSpan(BaseModel):
    """인식된 텍스트 한 덩어리

    좌표는 원본 이미지 기준 px. 백엔드에 따라 둘 중 하나를 채운다.
    - box: (left, top, width, height)
    - vertices: 다각형 꼭짓점 [(x, y), ...]
    """

    text: str
    box: tuple[float, float, float, float] | None = None
    vertices: list[tuple[float, float]] | None = None
    confidence: float | None = None

    @model_validator(mode="after")
    def require_geometry(self) -> Self:
        if self.box is None and not self.vertices:
            raise ValueError("box 또는 vertices 중 하나는 필요합니다")
        return self

    def to_bbox(self) -> BBox:
        if self.box is not None:
            left, top, width, height = self.box
            return BBox(x1=left, y1=top, x2=left + width, y2=top + height)
        return BBox.from_vertices(self.vertices or [])


class RecognitionResult(BaseModel):
    """인식 결과 (spans는 읽기 순서)"""

    engine: str
    spans: list[RecognizedSpan]
    image_size: ImageSize | None = None
