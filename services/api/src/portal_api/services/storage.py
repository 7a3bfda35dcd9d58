"""对象存储服务（当前为本地文件系统实现）。"""

from dataclasses import dataclass
from pathlib import Path

from portal_api.core.config import get_settings
from portal_api.core.errors import InvalidInputError
from portal_api.models.base import new_id, utc_now

DEFAULT_FILENAME = "upload.bin"


@dataclass
class StoredObject:
    """落盘后的对象信息。"""

    # 随机化后的文件名。
    name: str
    # 存储根目录下的对象键。
    object_key: str
    # 小写扩展名，不含点号。
    extension: str
    size: int


def safe_filename(filename: str | None) -> str:
    """仅保留文件名部分。"""
    return Path(filename or "").name or DEFAULT_FILENAME


def persist_upload(filename: str | None, content: bytes) -> StoredObject:
    """保存上传文件并返回对象信息。"""
    settings = get_settings()
    if len(content) > settings.storage_max_upload_bytes:
        raise InvalidInputError("File size exceeds limit")

    original = safe_filename(filename)
    suffix = Path(original).suffix.lower()
    name = f"{new_id()}{suffix}"
    now = utc_now()
    object_key = f"uploads/{now:%Y}/{now:%m}/{name}"

    target = Path(settings.storage_root).joinpath(object_key)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    return StoredObject(name=name, object_key=object_key, extension=suffix.lstrip("."), size=len(content))
