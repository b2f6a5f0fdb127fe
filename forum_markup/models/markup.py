"""
BBCode 渲染引擎的数据模型
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import html
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, field_validator, model_validator
import regex as re

TagTransform = Callable[[str, dict[str, str]], str]

TAG_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


@dataclass(frozen=True)
class TagDefinition:
    """A single entry of the tag catalog.

    ``transform`` receives the (already expanded) inner content and the parsed
    attributes and returns the HTML fragment that replaces the whole tag.
    The matchers and the engine pattern are derived from ``name``.
    """

    name: str
    transform: TagTransform
    allowed_attributes: tuple[str, ...] = ()
    self_closing: bool = False
    block_level: bool = False
    parse_content: bool = True

    open_matcher: re.Pattern = field(init=False, repr=False, compare=False)
    close_matcher: re.Pattern = field(init=False, repr=False, compare=False)
    token_pattern: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        name = self.name.lower()
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "allowed_attributes", tuple(self.allowed_attributes))

        escaped = re.escape(name)
        close_tag = rf"\[/{escaped}\]"
        object.__setattr__(self, "open_matcher", re.compile(rf"\[{escaped}(?:=[^\]]+)?\]", re.IGNORECASE))
        object.__setattr__(self, "close_matcher", re.compile(close_tag, re.IGNORECASE))

        # openers carry the attribute, closers are told apart by the "close" group
        open_tag = rf"\[{escaped}(?:=(?P<attr>[^\]]+))?\]"
        source = open_tag if self.self_closing else rf"(?P<close>{close_tag})|{open_tag}"
        object.__setattr__(self, "token_pattern", re.compile(source, re.IGNORECASE))

    def parse_attributes(self, raw: str | None) -> dict[str, str]:
        """Store the ``=value`` part of a tag under its first allowed attribute."""
        if raw is None or not self.allowed_attributes:
            return {}
        return {self.allowed_attributes[0]: raw}


class ParserConfig(BaseModel):
    """解析器配置，构造后不可修改"""

    model_config = ConfigDict(frozen=True)

    allowed_tags: frozenset[str] | None = Field(
        default=None,
        description="启用的内置标签，为空表示全部启用",
    )
    max_depth: int = Field(default=10, ge=1, description="标签最大嵌套深度")
    url_whitelist: tuple[str, ...] = Field(default=(), description="允许的链接域名，为空表示不限制")
    xss_protection: bool = Field(default=True, description="解析前移除危险内容")
    sanitize_output: bool = Field(default=True, description="使用白名单清理渲染后的 HTML")
    custom_tags: tuple[InstanceOf[TagDefinition], ...] = Field(default=(), description="自定义标签")
    regex_timeout: float = Field(default=5, gt=0, description="单次渲染的正则匹配时间预算（秒）")

    @field_validator("allowed_tags", mode="before")
    @classmethod
    def normalize_allowed_tags(cls, v):
        if v is None:
            return None
        return frozenset(tag.lower() for tag in v)

    @field_validator("url_whitelist", mode="before")
    @classmethod
    def normalize_url_whitelist(cls, v):
        return tuple(domain.strip().strip(".").lower() for domain in v if domain.strip().strip("."))


class ValidationResult(BaseModel):
    """BBCode 语法检查结果"""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class CustomBBCode(BaseModel):
    """管理员定义的 BBCode 标签

    ``replacement`` 中的 ``$1`` 会被替换为标签内容，``$option`` 会被替换为转义后的参数值。
    """

    tag: Annotated[str, Field(min_length=1, max_length=20)]
    replacement: Annotated[str, Field(min_length=1)]
    example: str | None = None
    description: str | None = None
    is_active: bool = True
    has_option: bool = False
    parse_content: bool = True

    @field_validator("tag")
    @classmethod
    def validate_tag(cls, v: str) -> str:
        if not TAG_NAME_PATTERN.match(v):
            raise ValueError("Tag must contain only letters, numbers, underscores, and hyphens")
        return v.lower()

    @model_validator(mode="after")
    def validate_replacement(self) -> CustomBBCode:
        if self.has_option and "$option" not in self.replacement:
            raise ValueError("Replacement string must contain $option when has_option is true")
        if self.parse_content and "$1" not in self.replacement:
            raise ValueError("Replacement string must contain $1 when parse_content is true")
        return self

    def to_tag_definition(self) -> TagDefinition:
        replacement = self.replacement

        def transform(content: str, attributes: dict[str, str]) -> str:
            option = html.escape(attributes.get("option", ""))
            return replacement.replace("$option", option).replace("$1", content)

        return TagDefinition(
            name=self.tag,
            transform=transform,
            allowed_attributes=("option",) if self.has_option else (),
            parse_content=self.parse_content,
        )
