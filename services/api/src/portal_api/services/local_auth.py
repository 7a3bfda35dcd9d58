"""本地口令哈希服务。

哈希格式：``pbkdf2_sha256$<迭代次数>$<盐 base64>$<摘要 base64>``，
迭代次数随哈希保存，调整配置后旧哈希仍可校验。
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets

from portal_api.core.config import get_settings
from portal_api.core.errors import PasswordTooShortError

MIN_PASSWORD_LENGTH = 8
HASH_ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def validate_password(password: str) -> None:
    """校验口令长度，不足 8 个字符时报错。"""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordTooShortError()


def hash_password(password: str) -> str:
    """生成带随机盐的口令哈希。"""
    validate_password(password)

    iterations = get_settings().auth_password_hash_iterations
    salt = secrets.token_bytes(SALT_BYTES)
    return "$".join((HASH_ALGORITHM, str(iterations), _b64(salt), _b64(_derive(password, salt, iterations))))


def verify_password(password: str, password_hash: str) -> bool:
    """校验口令是否匹配，格式非法的哈希一律视为不匹配。"""
    try:
        algorithm, iterations_text, salt_b64, digest_b64 = password_hash.split("$", 3)
        if algorithm != HASH_ALGORITHM:
            return False
        iterations = int(iterations_text)
        salt = base64.b64decode(salt_b64.encode("ascii"), validate=True)
        expected = base64.b64decode(digest_b64.encode("ascii"), validate=True)
    except (ValueError, TypeError, binascii.Error):
        return False

    if iterations < 1:
        return False
    return hmac.compare_digest(_derive(password, salt, iterations), expected)
