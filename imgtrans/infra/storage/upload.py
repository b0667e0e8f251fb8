"""업로드 이미지 검증

Content-Type 헤더, 실제 크기, 매직 바이트, 디코딩 가능 여부를 순서대로 확인한다.
"""

from io import BytesIO

from fastapi import HTTPException, UploadFile
from PIL import Image, UnidentifiedImageError

from imgtrans.constants import Limits

ALLOWED_TYPES = {"image/jpeg", "image/png", "image/webp", "image/bmp"}
CHUNK_SIZE = 1024 * 1024  # 1MB
MAX_PIXELS = 40_000_000

MAGIC_BYTES = {
    b"\xff\xd8\xff": "image/jpeg",
    b"\x89PNG": "image/png",
    b"BM": "image/bmp",
}

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
}


async def read_image_upload(file: UploadFile, max_size: int = Limits.MAX_UPLOAD_SIZE) -> tuple[bytes, str]:
    """업로드 파일을 검증하고 (내용, 실제 MIME 타입) 반환

    Raises:
        HTTPException(400): 파일 형식, 크기, 이미지 규격 위반 시
    """
    _validate_content_type(file.content_type)
    _validate_size_header(file.size, max_size)

    content = await _read_with_size_limit(file, max_size)
    detected_type = detect_image_type(content)
    _validate_content_type_match(detected_type, file.content_type)
    _validate_image_dimensions(content)
    return content, detected_type


def detect_image_type(content: bytes) -> str:
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"
    for magic, mime in MAGIC_BYTES.items():
        if content.startswith(magic):
            return mime
    raise HTTPException(status_code=400, detail="유효하지 않은 이미지 파일")


def _validate_content_type(content_type: str | None) -> None:
    if not content_type or content_type not in ALLOWED_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"지원하지 않는 파일 형식: {content_type or '알 수 없음'}",
        )


def _validate_size_header(size: int | None, max_size: int) -> None:
    if size is not None and size > max_size:
        raise HTTPException(
            status_code=400,
            detail=f"파일 크기 초과: {size} bytes (최대 {max_size} bytes)",
        )


def _validate_content_type_match(detected: str, declared: str | None) -> None:
    if declared and detected != declared:
        raise HTTPException(
            status_code=400,
            detail=f"파일 형식 불일치: 헤더 {declared}, 실제 {detected}",
        )


def _validate_image_dimensions(content: bytes) -> None:
    try:
        with Image.open(BytesIO(content)) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise HTTPException(status_code=400, detail="이미지 디코딩 실패") from e

    if width * height > MAX_PIXELS:
        raise HTTPException(
            status_code=400,
            detail=f"총 픽셀수 초과: {width}x{height} = {width * height} (최대 {MAX_PIXELS})",
        )


async def _read_with_size_limit(file: UploadFile, max_size: int) -> bytes:
    chunks: list[bytes] = []
    total_size = 0

    while chunk := await file.read(CHUNK_SIZE):
        total_size += len(chunk)
        if total_size > max_size:
            raise HTTPException(
                status_code=400,
                detail=f"파일 크기 초과: {total_size}+ bytes (최대 {max_size} bytes)",
            )
        chunks.append(chunk)

    return b"".join(chunks)
