"""SRT caption formatter: one subtitle cue per caption segment.

WHY: Besides burned-in overlays, users want a sidecar subtitle file for
players and editors that cannot consume the rendering project's props.

HOW: Each CaptionSegment becomes one numbered cue with its own span and
text. Timestamps are rounded to whole milliseconds.

RULES:
- Output suffix is ".srt", media type "application/x-subrip"
- Cue indices are 1-based and follow segment order
- Cue timing is the segment span verbatim (no padding or overlap fixes)
- A track without segments yields an empty string
"""

from __future__ import annotations

from typing import List

from video_captioner.core.ir import CaptionTrack
from video_captioner.formatters.base import BaseFormatter, FormatterOutput


def seconds_to_srt_time(seconds: float) -> str:
    """Convert seconds to SRT timestamp format: HH:MM:SS,mmm"""
    total_ms = int(round(seconds * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, secs, millis)


def generate_srt(track: CaptionTrack) -> str:
    lines: List[str] = []
    for i, segment in enumerate(track.segments, 1):
        lines.append(str(i))
        lines.append("{} --> {}".format(
            seconds_to_srt_time(segment.start_s),
            seconds_to_srt_time(segment.end_s),
        ))
        lines.append(segment.text)
        lines.append("")
    return "\n".join(lines)


class SRTCaptionFormatter(BaseFormatter):
    """Formatter that writes the caption segments as an SRT file."""

    @property
    def name(self) -> str:
        return "SRT Captions"

    def format(self, track: CaptionTrack) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=".srt",
                content=generate_srt(track),
                media_type="application/x-subrip",
            )
        ]
