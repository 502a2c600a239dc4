"""Core caption model, segmentation, and per-frame render logic.

WHY: The core package holds the part of the system that must be exactly
right: turning a word stream into caption segments and deciding, for any
frame, which segment and which words are shown and how opaque they are.

HOW: ir.py defines the immutable data types, segmenter.py batches words
into segments, timing.py holds the resolvers and fade envelope, and
render.py dispatches one render rule per caption style.

RULES:
- No I/O and no shared mutable state anywhere in this package
- Malformed input raises ValueError at construction, never mid-render
"""
