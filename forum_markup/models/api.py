"""
BBCode 相关的 API 模型
"""

from pydantic import BaseModel, Field


class RenderRequest(BaseModel):
    """渲染 BBCode 请求模型"""

    content: str = Field(
        description="BBCode 原始内容",
        max_length=60000,
        examples=["[b]Hello![/b] [url=https://example.com]link[/url]"],
    )


class RenderResponse(BaseModel):
    """渲染 BBCode 响应模型"""

    html: str = Field(description="渲染后的 HTML 内容")


class ValidateBBCodeRequest(BaseModel):
    """验证BBCode请求模型"""

    content: str = Field(description="要验证的BBCode内容", max_length=60000)


class ValidateBBCodeResponse(BaseModel):
    """验证BBCode响应模型"""

    valid: bool = Field(description="BBCode是否有效")
    errors: list[str] = Field(default_factory=list, description="错误列表")
    preview: dict[str, str] = Field(description="预览内容")


class PreviewRequest(BaseModel):
    """纯文本预览请求模型"""

    content: str = Field(description="BBCode 原始内容", max_length=60000)
    max_length: int | None = Field(default=None, ge=4, description="预览最大长度，为空使用默认值")


class PreviewResponse(BaseModel):
    """纯文本预览响应模型"""

    text: str = Field(description="去除标签后的预览文本")


class ToMarkupRequest(BaseModel):
    """HTML 转 BBCode 请求模型"""

    html: str = Field(description="HTML 内容", max_length=120000)


class ToMarkupResponse(BaseModel):
    """HTML 转 BBCode 响应模型"""

    markup: str = Field(description="转换后的 BBCode 内容")


class PostContentRequest(BaseModel):
    """帖子内容处理请求模型"""

    content: str = Field(description="帖子的 BBCode 原始内容")
    strict: bool = Field(default=False, description="存在未闭合或嵌套过深的标签时拒绝保存")


class PostContentResponse(BaseModel):
    """帖子内容处理响应模型（包含html和raw）"""

    html: str = Field(description="处理后的HTML内容")
    raw: str = Field(description="原始BBCode内容")
