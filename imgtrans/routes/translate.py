"""Translate API 라우트

업로드 이미지를 받아 동기적으로 인식 → 번역 → 렌더링 결과를 반환한다.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from imgtrans.infra.storage import read_image_upload
from imgtrans.schemas.pipeline import ServiceStatus
from imgtrans.services import translate as translate_service

router = APIRouter(tags=["translate"])
logger = logging.getLogger(__name__)

# 인식 백엔드 실패는 외부 서비스 문제로 보고 502
_FAILURE_STATUS = {
    "RECOGNITION_FAILED": status.HTTP_502_BAD_GATEWAY,
    "RENDER_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@router.post("/translate", response_model=translate_service.TranslateResponse)
async def translate_image(
    image: Annotated[UploadFile, File()],
    target_lang: Annotated[str, Form(alias="targetLang")] = "zh",
) -> translate_service.TranslateResponse:
    """이미지 번역"""
    content, content_type = await read_image_upload(image)

    try:
        return await translate_service.translate_image(content, content_type, target_lang)
    except translate_service.NoTextError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": "NO_TEXT_DETECTED", "message": e.message},
        ) from None
    except translate_service.PipelineFailedError as e:
        logger.error(f"번역 실패: {e}")
        raise HTTPException(
            status_code=_FAILURE_STATUS.get(e.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
            detail={"code": e.code, "message": e.message},
        ) from None


@router.get("/status", response_model=ServiceStatus)
def read_status() -> ServiceStatus:
    """백엔드 설정 상태"""
    return translate_service.get_service_status()
