"""
BBCode 处理相关的异常类

渲染引擎本身不会抛出异常，这些异常只出现在服务边界（帖子内容处理、标签目录构造）。
"""

from __future__ import annotations


class MarkupError(Exception):
    """BBCode 处理错误基类"""

    def __init__(self, message: str, code: str = "markup_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class ContentTooLongError(MarkupError):
    """内容过长错误"""

    def __init__(self, current_length: int, max_length: int):
        message = f"Content too long. Maximum {max_length} characters allowed, got {current_length}."
        super().__init__(message, "content_too_long")
        self.current_length = current_length
        self.max_length = max_length


class ContentEmptyError(MarkupError):
    """内容为空错误"""

    def __init__(self):
        super().__init__("Content cannot be empty.", "content_empty")


class BBCodeValidationError(MarkupError):
    """BBCode验证错误"""

    def __init__(self, errors: list[str]):
        message = f"BBCode validation failed: {'; '.join(errors)}"
        super().__init__(message, "bbcode_validation_error")
        self.errors = errors


class DuplicateTagError(MarkupError):
    """标签目录中存在重名标签"""

    def __init__(self, tag: str):
        message = f"Tag '{tag}' is defined more than once."
        super().__init__(message, "duplicate_tag")
        self.tag = tag
