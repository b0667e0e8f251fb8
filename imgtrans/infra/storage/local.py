import uuid
from pathlib import Path


class LocalStorage:
    """로컬 파일 시스템 저장소 구현체. S3Storage로 교체 가능."""

    def __init__(self, base_dir: Path, base_url: str = "/static"):
        self.base_dir = base_dir
        self.base_url = base_url

    def save_bytes(
        self, content: bytes, subdir: str = "result", filename: str | None = None, ext: str = ".png"
    ) -> str:
        name = filename or uuid.uuid4().hex
        relative_path = f"{subdir}/{name}{ext}"
        save_path = self.base_dir / relative_path
        save_path.parent.mkdir(parents=True, exist_ok=True)

        save_path.write_bytes(content)
        return relative_path

    def get_url(self, relative_path: str) -> str:
        return f"{self.base_url}/{relative_path}"

    def exists(self, relative_path: str) -> bool:
        return (self.base_dir / relative_path).exists()

    def delete(self, relative_path: str) -> bool:
        file_path = self.base_dir / relative_path
        if file_path.exists():
            file_path.unlink()
            return True
        return False
