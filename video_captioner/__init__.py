"""Video Captioner: transcribe uploaded videos and render timed caption overlays.

WHY: Short-form video needs burned-in captions. A speech-to-text service
returns a flat stream of timestamped words; a rendering framework needs
caption segments plus a per-frame answer to "what is on screen now".
This package sits between the two.

HOW: Four stages, each independently testable: upload (storage), ingest
(AssemblyAI client), segment (core builder), render (per-frame resolvers
and fade envelope, plus output formatters for the rendering framework).

RULES:
- The core (segmenter, timing, render) is pure and holds no state
- Word and CaptionSegment validate themselves at construction time
- Upstream failures surface as CaptionError subclasses, never retried here
"""

__version__ = "0.1.0"
