"""
이미지 저장소

상품 변형 이미지를 외부 저장소에 올리고 지우는 협력 객체입니다.
기본 구현(LocalAssetStore)은 로컬 디렉터리에 파일을 저장하고 정적 URL을 반환합니다.
삭제는 멱등이며, 이미 없는 파일을 지워도 오류가 아닙니다.
"""

import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from fastapi import Depends

from storefront.core.config import Settings, get_settings

_SAFE_SUFFIX = re.compile(r"^\.[a-z0-9]{1,10}$")


@dataclass
class UploadedImage:
    """
    요청으로 들어온 업로드 파일

    Attributes:
        field: 폼 필드 이름 (예: "variants[0][image]")
        filename: 원본 파일명
        content: 파일 내용
        content_type: MIME 타입
    """

    field: str
    filename: str
    content: bytes
    content_type: str | None = None


@dataclass
class StoredAsset:
    """저장된 이미지의 공개 URL과 저장소 참조 ID"""

    url: str
    public_id: str


class AssetStore(Protocol):
    def upload(self, image: UploadedImage) -> StoredAsset: ...

    def delete(self, public_id: str) -> None: ...


class LocalAssetStore:
    """로컬 파일 시스템 기반 이미지 저장소"""

    def __init__(self, upload_dir: str | Path, base_url: str):
        self.root = Path(upload_dir)
        self.base_url = base_url.rstrip("/")

    def upload(self, image: UploadedImage) -> StoredAsset:
        suffix = Path(image.filename or "").suffix.lower()
        if not _SAFE_SUFFIX.match(suffix):
            suffix = ""

        public_id = f"{uuid.uuid4().hex}{suffix}"
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / public_id).write_bytes(image.content)

        return StoredAsset(url=f"{self.base_url}/{public_id}", public_id=public_id)

    def delete(self, public_id: str) -> None:
        # 경로 조작 방지: 파일명 부분만 사용
        (self.root / Path(public_id).name).unlink(missing_ok=True)


def get_asset_store(settings: Settings = Depends(get_settings)) -> AssetStore:
    """FastAPI 의존성 주입용 이미지 저장소 팩토리"""
    return LocalAssetStore(settings.upload_dir, settings.asset_base_url)
