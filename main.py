from contextlib import asynccontextmanager
import json

from forum_markup.config import settings
from forum_markup.log import system_logger
from forum_markup.router import markup_router
from forum_markup.service.markup_service import markup_service

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    # === on startup ===
    config = markup_service.parser.config
    system_logger("Markup").info(
        f"BBCode parser ready - tags: {', '.join(markup_service.parser.active_tags)}, "
        f"max depth: {config.max_depth}, output sanitizer: {'on' if config.sanitize_output else 'off'}"
    )
    if not config.xss_protection:
        system_logger("Security").warning("markup_xss_protection is disabled, input pre-filtering is skipped.")

    yield


desc = """论坛 BBCode 渲染服务。

## 端点说明

所有端点均以 `/api/markup/` 开头：

- `render` 将 BBCode 渲染为安全的 HTML
- `validate` 检查标签是否配对、嵌套是否过深，并返回预览
- `preview` 生成纯文本摘要
- `to-markup` 将 HTML 尽量还原为 BBCode
- `post` 处理帖子内容，返回需要保存的 raw 和 html
"""

app = FastAPI(
    title="forum-markup",
    version="0.1.0",
    lifespan=lifespan,
    description=desc,
)

app.include_router(markup_router)


@app.get("/health", include_in_schema=False)
async def health_check():
    """健康检查端点"""
    return {"status": "ok"}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):  # noqa: ARG001
    return JSONResponse(
        status_code=422,
        content={
            "error": json.dumps(exc.errors(), default=str),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,  # 禁用uvicorn默认日志配置
        access_log=True,  # 启用访问日志
    )
