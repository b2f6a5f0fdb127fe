from forum_markup.exceptions import MarkupError
from forum_markup.log import log
from forum_markup.models.api import (
    PostContentRequest,
    PostContentResponse,
    PreviewRequest,
    PreviewResponse,
    RenderRequest,
    RenderResponse,
    ToMarkupRequest,
    ToMarkupResponse,
    ValidateBBCodeRequest,
    ValidateBBCodeResponse,
)
from forum_markup.service.markup_service import markup_service

from fastapi import APIRouter, HTTPException

router = APIRouter(prefix="/api/markup", tags=["BBCode"])
logger = log("MarkupRouter")


@router.post("/render", response_model=RenderResponse, name="渲染BBCode")
async def render_bbcode(request: RenderRequest):
    """将 BBCode 渲染为 HTML，用于编辑器实时预览"""
    return RenderResponse(html=markup_service.render(request.content))


@router.post(
    "/validate",
    response_model=ValidateBBCodeResponse,
    name="验证BBCode",
    description="验证BBCode语法并返回预览。",
)
async def validate_bbcode(request: ValidateBBCodeRequest):
    """验证BBCode语法"""
    try:
        result = markup_service.validate(request.content)

        # 生成预览（如果没有语法错误）
        if result.is_valid:
            preview = markup_service.process_post_content(request.content)
        else:
            preview = {"raw": request.content, "html": ""}

        return ValidateBBCodeResponse(valid=result.is_valid, errors=result.errors, preview=preview)

    except MarkupError as e:
        return ValidateBBCodeResponse(valid=False, errors=[e.message], preview={"raw": request.content, "html": ""})
    except Exception:
        logger.exception("Failed to validate BBCode")
        raise HTTPException(status_code=500, detail={"error": "Failed to validate BBCode"})


@router.post("/preview", response_model=PreviewResponse, name="纯文本预览")
async def preview_bbcode(request: PreviewRequest):
    """去除标签并截断，用于通知、摘要和搜索索引"""
    return PreviewResponse(text=markup_service.preview(request.content, request.max_length))


@router.post("/to-markup", response_model=ToMarkupResponse, name="HTML转BBCode")
async def html_to_bbcode(request: ToMarkupRequest):
    """将 HTML 尽量还原为 BBCode（有损转换）"""
    return ToMarkupResponse(markup=markup_service.to_markup(request.html))


@router.post("/post", response_model=PostContentResponse, name="处理帖子内容")
async def process_post(request: PostContentRequest):
    """校验长度并渲染帖子内容，返回需要保存的 raw 和 html"""
    try:
        processed = markup_service.process_post_content(request.content, strict=request.strict)
        return PostContentResponse(html=processed["html"], raw=processed["raw"])
    except MarkupError as e:
        raise HTTPException(status_code=422, detail={"error": e.message, "code": e.code})
    except Exception:
        logger.exception("Failed to process post content")
        raise HTTPException(status_code=500, detail={"error": "Failed to process post content"})
