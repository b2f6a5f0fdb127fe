import os

# keep test runs from writing log files
os.environ.setdefault("LOG_DIR", "")

from forum_markup.models.markup import ParserConfig  # noqa: E402
from forum_markup.service.bbcode_service import BBCodeParser  # noqa: E402

import pytest  # noqa: E402


@pytest.fixture
def raw_parser() -> BBCodeParser:
    """Parser without the output sanitizer, so the engine's HTML can be compared exactly."""
    return BBCodeParser(ParserConfig(sanitize_output=False))


@pytest.fixture
def parser() -> BBCodeParser:
    return BBCodeParser()
