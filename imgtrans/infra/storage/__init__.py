"""원본/결과 이미지 저장소

사용법:
    from imgtrans.infra.storage import get_storage

    path = get_storage().save_bytes(output_bytes, "result", result_id, ".png")
"""

from pathlib import Path

from imgtrans.config import get_settings

from .base import StorageBackend
from .local import LocalStorage
from .upload import read_image_upload

__all__ = ["StorageBackend", "LocalStorage", "get_storage", "read_image_upload", "set_storage"]


def _find_project_root() -> Path:
    """pyproject.toml 위치를 프로젝트 루트로 탐색"""
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    raise RuntimeError("프로젝트 루트를 찾을 수 없음")


def _upload_dir() -> Path:
    configured = get_settings().upload_dir
    if configured:
        return Path(configured)
    return _find_project_root() / "uploads"


class _StorageHolder:
    instance: StorageBackend | None = None


def get_storage() -> StorageBackend:
    if _StorageHolder.instance is None:
        _StorageHolder.instance = LocalStorage(base_dir=_upload_dir())
    return _StorageHolder.instance


def set_storage(storage: StorageBackend | None) -> None:
    """저장소 교체 (테스트용, None이면 설정 기준으로 다시 생성)"""
    _StorageHolder.instance = storage
