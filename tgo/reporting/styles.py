"""
Terminal styling for reports.

All styles live in constant maps keyed by StyleCategory; nothing here is
mutated at runtime. `colorize` returns a rich Text so that test output is
never parsed as console markup.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from rich.style import Style
from rich.text import Text

from ..events.models import Status


class StyleCategory(str, Enum):
    """What a piece of report text represents."""
    DEFAULT = "default"
    LINE = "line"
    PACKAGE = "package"
    TEST = "test"
    TIME = "time"
    COVER = "cover"
    FAIL = "fail"
    NONE = "none"
    PASS = "pass"
    SKIP = "skip"
    FAIL_BOLD = "fail_bold"
    NONE_BOLD = "none_bold"
    PASS_BOLD = "pass_bold"


STYLES = MappingProxyType({
    StyleCategory.DEFAULT: Style.null(),
    StyleCategory.LINE: Style.null(),
    StyleCategory.PACKAGE: Style.null(),
    StyleCategory.TEST: Style(color="magenta"),
    StyleCategory.TIME: Style(color="cyan"),
    StyleCategory.COVER: Style(color="blue"),
    StyleCategory.FAIL: Style(color="red"),
    StyleCategory.NONE: Style(color="yellow"),
    StyleCategory.PASS: Style(color="green"),
    StyleCategory.SKIP: Style(color="bright_magenta"),
    StyleCategory.FAIL_BOLD: Style(color="red", bold=True),
    StyleCategory.NONE_BOLD: Style(color="yellow", bold=True),
    StyleCategory.PASS_BOLD: Style(color="green", bold=True),
})

STATUS_STYLES = MappingProxyType({
    Status.FAIL: StyleCategory.FAIL,
    Status.PASS: StyleCategory.PASS,
    Status.NONE: StyleCategory.NONE,
    Status.SKIP: StyleCategory.SKIP,
    Status.BENCH: StyleCategory.PASS,
})


def colorize(category: StyleCategory, text: str) -> Text:
    """Wrap `text` in the style for `category`."""
    return Text(text, style=STYLES[category])


def status_style(status: Status) -> StyleCategory:
    return STATUS_STYLES[status]
