"""
Structural BBCode checks for editor feedback.

The validator scans the raw markup once with a tag-name stack. It shares the
catalog with the rendering engine but not its matching, so it reports on
input the engine would silently tolerate.
"""

from forum_markup.models.markup import TagDefinition, ValidationResult
from forum_markup.service.sanitizer import REGEX_TIMEOUT
from forum_markup.service.tag_catalog import STRUCTURAL_MARKERS

import regex as re

TOKEN_PATTERN = re.compile(r"\[(/?)([\w=]++)(?:[^\]]*)\]", re.IGNORECASE)


class BBCodeValidator:
    def __init__(self, catalog: tuple[TagDefinition, ...], max_depth: int, timeout: float = REGEX_TIMEOUT):
        self.paired_tags = frozenset(tag.name for tag in catalog if not tag.self_closing)
        # [*], [tr], [td] and [th] only mean something inside their active parent tag
        self.markers = frozenset().union(
            *(markers for parent, markers in STRUCTURAL_MARKERS.items() if parent in self.paired_tags)
        )
        self.max_depth = max_depth
        self.timeout = timeout

    def tokens(self, content: str) -> list[tuple[bool, str]]:
        """``(is_closing, tag_name)`` for every bracket token, attributes removed."""
        # every token ends with "]", so nothing after the last one is scanned
        end = content.rfind("]") + 1
        return [
            (match.group(1) == "/", match.group(2).lower().split("=")[0])
            for match in TOKEN_PATTERN.finditer(content, endpos=end, timeout=self.timeout)
        ]

    def validate(self, content: str) -> ValidationResult:
        errors: list[str] = []
        if not content or not isinstance(content, str):
            return ValidationResult(is_valid=True, errors=errors)

        try:
            tokens = self.tokens(content)
        except TimeoutError:
            return ValidationResult(is_valid=False, errors=["Content is too complex to validate"])

        # check for balanced tags
        tag_stack: list[str] = []
        for is_closing, tag_name in tokens:
            if tag_name in self.markers:
                continue
            if is_closing:
                if not tag_stack:
                    errors.append(f"Unexpected closing tag: [/{tag_name}]")
                else:
                    last_tag = tag_stack.pop()
                    if last_tag != tag_name:
                        errors.append(f"Mismatched tags: expected [/{last_tag}], found [/{tag_name}]")
            elif tag_name in self.paired_tags:
                tag_stack.append(tag_name)

        # check for any unclosed tags
        for unclosed_tag in tag_stack:
            errors.append(f"Unclosed tag: [{unclosed_tag}]")

        if self.nesting_depth(tokens) > self.max_depth:
            errors.append(f"Nesting depth exceeds maximum of {self.max_depth}")

        return ValidationResult(is_valid=not errors, errors=errors)

    def nesting_depth(self, tokens: list[tuple[bool, str]]) -> int:
        max_depth = 0
        current_depth = 0
        for is_closing, tag_name in tokens:
            if tag_name not in self.paired_tags:
                continue
            if is_closing:
                current_depth = max(0, current_depth - 1)
            else:
                current_depth += 1
                max_depth = max(max_depth, current_depth)
        return max_depth
