from typing import Protocol


class StorageBackend(Protocol):
    """결과 이미지 저장소 인터페이스. LocalStorage, S3Storage 등 구현체로 교체 가능."""

    def save_bytes(self, content: bytes, subdir: str, filename: str, ext: str) -> str: ...
    def get_url(self, relative_path: str) -> str: ...
    def exists(self, relative_path: str) -> bool: ...
    def delete(self, relative_path: str) -> bool: ...
