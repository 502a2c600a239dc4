"""Output formatter registry.

WHY: The CLI and API need a single lookup to find a formatter by name.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["srt_captions"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from video_captioner.formatters.composition_props import CompositionPropsFormatter
from video_captioner.formatters.srt_captions import SRTCaptionFormatter

if TYPE_CHECKING:
    from video_captioner.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "composition_props": CompositionPropsFormatter,
    "srt_captions": SRTCaptionFormatter,
}
