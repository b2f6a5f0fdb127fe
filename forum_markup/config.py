# ruff: noqa: I002
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
        json_schema_extra={
            "paragraphs_desc": {
                "BBCode 设置": (
                    "控制 BBCode 渲染引擎的默认行为。\n\n"
                    "这些值只在构造默认解析器时读取，解析引擎本身不会读取环境变量。"
                ),
            }
        },
    )

    # 服务器设置
    host: Annotated[
        str,
        Field(default="0.0.0.0", description="服务器监听地址"),
        "服务器设置",
    ]
    port: Annotated[
        int,
        Field(default=8000, description="服务器监听端口"),
        "服务器设置",
    ]
    debug: Annotated[
        bool,
        Field(default=False, description="是否启用调试模式"),
        "服务器设置",
    ]

    # 日志设置
    log_level: Annotated[
        str,
        Field(default="INFO", description="日志级别"),
        "日志设置",
    ]
    log_dir: Annotated[
        str | None,
        Field(default="logs", description="日志文件目录，为空表示只输出到标准输出"),
        "日志设置",
    ]

    # BBCode 设置
    markup_max_depth: Annotated[
        int,
        Field(default=10, ge=1, description="标签最大嵌套深度"),
        "BBCode 设置",
    ]
    markup_url_whitelist: Annotated[
        list[str],
        Field(default=[], description="允许的链接域名，以逗号分隔，为空表示不限制"),
        "BBCode 设置",
        NoDecode,
    ]
    markup_xss_protection: Annotated[
        bool,
        Field(default=True, description="解析前是否移除 script/iframe 等危险内容"),
        "BBCode 设置",
    ]
    markup_sanitize_output: Annotated[
        bool,
        Field(default=True, description="是否使用白名单清理渲染后的 HTML"),
        "BBCode 设置",
    ]
    markup_preview_length: Annotated[
        int,
        Field(default=150, ge=4, description="纯文本预览的默认最大长度"),
        "BBCode 设置",
    ]
    markup_max_content_length: Annotated[
        int,
        Field(default=60000, description="帖子内容最大长度"),
        "BBCode 设置",
    ]
    markup_regex_timeout: Annotated[
        float,
        Field(default=5, gt=0, description="单次渲染的正则匹配时间预算（秒）"),
        "BBCode 设置",
    ]

    @field_validator("markup_url_whitelist", mode="before")
    def validate_markup_url_whitelist(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            if v.strip().startswith("["):
                import json

                return json.loads(v)
            return [domain.strip() for domain in v.split(",") if domain.strip()]
        return v


settings = Settings()  # pyright: ignore[reportCallIssue]
