"""文本规范化工具。"""

import re

_SEPARATOR_PATTERN = re.compile(r"[\W_]+", re.UNICODE)


def slugify(value: str) -> str:
    """小写化后将连续的非单词分隔符替换为单个连字符。"""
    return _SEPARATOR_PATTERN.sub("-", value.strip().lower()).strip("-")


def normalize_email(email: str) -> str:
    """邮箱去空白并统一小写。"""
    return email.strip().lower()


def blank_to_none(value: str | None) -> str | None:
    """空白字符串统一按未填写处理。"""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
