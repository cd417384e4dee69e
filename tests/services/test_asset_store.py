"""
로컬 이미지 저장소 테스트
"""

from storefront.services.asset_store import LocalAssetStore, UploadedImage


class TestLocalAssetStore:
    """Test: 업로드/삭제"""

    def test_upload_writes_file(self, tmp_path):
        store = LocalAssetStore(tmp_path / "uploads", "/uploads/")
        image = UploadedImage("variants[0][image]", "front.JPG", b"jpeg-bytes", "image/jpeg")

        asset = store.upload(image)

        assert asset.public_id.endswith(".jpg")
        assert asset.url == f"/uploads/{asset.public_id}"
        assert (tmp_path / "uploads" / asset.public_id).read_bytes() == b"jpeg-bytes"

    def test_unsafe_suffix_dropped(self, tmp_path):
        store = LocalAssetStore(tmp_path, "/uploads")

        asset = store.upload(UploadedImage("f", "evil.ph p", b"x"))

        assert "." not in asset.public_id

    def test_delete_is_idempotent(self, tmp_path):
        """Test: 이미 없는 파일을 지워도 오류가 아님"""
        store = LocalAssetStore(tmp_path, "/uploads")
        asset = store.upload(UploadedImage("f", "a.png", b"x"))

        store.delete(asset.public_id)
        store.delete(asset.public_id)

        assert not (tmp_path / asset.public_id).exists()

    def test_delete_ignores_directories_in_public_id(self, tmp_path):
        """Test: 저장소 디렉터리 밖의 파일은 건드리지 않음"""
        outside = tmp_path / "keep.txt"
        outside.write_text("keep")
        store = LocalAssetStore(tmp_path / "uploads", "/uploads")

        store.delete("../keep.txt")

        assert outside.exists()
