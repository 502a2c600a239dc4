"""FastAPI application: upload, caption generation, render hand-off, preview.

WHY: The browser front end uploads a video, asks for captions, previews
them frame by frame, and finally needs the props and command to render
the captioned video. Each step is one HTTP endpoint.

HOW: A single FastAPI app with endpoints grouped by tags. Uploads are
written through UploadStore and served back under /uploads by the same
store. Caption
generation awaits the AssemblyAI pipeline inside the request. Every
CaptionError is turned into ``{error, category, details}`` at its status.

RULES:
- Error responses use a consistent ErrorResponse schema
- Request validation failures are 400 invalid_input, not 422
- Caption generation is not retried; the category tells the client why
- The upload store is a module singleton (tests repoint its root)
- /uploads is served through the store, so files are read from the same
  directory they were written to
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse

from video_captioner import __version__
from video_captioner.config import (
    UPLOADS_DIR,
    UPLOADS_URL_PREFIX,
    VIDEO_CAPTION_COMP_NAME,
    VIDEO_FPS,
)
from video_captioner.core.render import compute_render_state
from video_captioner.core.timing import duration_in_frames
from video_captioner.errors import CaptionError, ErrorCategory, InvalidInputError
from video_captioner.pipeline import generate_captions
from video_captioner.server.models import (
    CaptionResponse,
    CaptionSegmentModel,
    ErrorResponse,
    GenerateCaptionsRequest,
    HealthResponse,
    PreviewFrameRequest,
    RenderInstructions,
    RenderRequest,
    RenderResponse,
    RenderStateResponse,
    UploadResponse,
)
from video_captioner.storage import UploadStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

upload_store = UploadStore(UPLOADS_DIR)

app = FastAPI(
    title="Video Captioner API",
    description=(
        "Upload a video, generate word-timed captions with AssemblyAI, "
        "preview caption overlays frame by frame, and get the props and "
        "command to render the captioned video."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input or no speech detected"},
    500: {"model": ErrorResponse, "description": "Storage, configuration, or upstream failure"},
}


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


@app.exception_handler(CaptionError)
async def _caption_error_handler(request: Request, exc: CaptionError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append("{}: {}".format(location, error.get("msg")) if location else error.get("msg"))
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request",
            "category": ErrorCategory.INVALID_INPUT.value,
            "details": "; ".join(messages),
        },
    )


# ---------------------------------------------------------------------------
# Endpoints: Upload
# ---------------------------------------------------------------------------


@app.post(
    "/api/upload",
    response_model=UploadResponse,
    tags=["upload"],
    summary="Upload a video",
    description="Store a video file and return the public path used by the other endpoints.",
    responses=_ERROR_RESPONSES,
)
async def upload_video(
    video: Annotated[
        Optional[UploadFile],
        File(description="Video file to caption."),
    ] = None,
) -> UploadResponse:
    if video is None:
        raise InvalidInputError("No video file provided")
    if "video" not in (video.content_type or ""):
        raise InvalidInputError("File must be a video")

    content = await video.read()
    stored = upload_store.save(video.filename or "upload", content)
    logger.info("Stored upload %s (%d bytes)", stored.filename, stored.size)

    return UploadResponse(
        success=True,
        videoUrl=stored.public_url,
        filename=stored.filename,
        size=stored.size,
        path=stored.public_url,
    )


@app.get(
    UPLOADS_URL_PREFIX + "/{filename}",
    tags=["upload"],
    summary="Download an uploaded video",
    response_class=FileResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid video path"},
        404: {"model": ErrorResponse, "description": "Video not found"},
    },
)
async def serve_upload(filename: str) -> FileResponse:
    path = upload_store.resolve(filename)
    return FileResponse(path)


# ---------------------------------------------------------------------------
# Endpoints: Captions
# ---------------------------------------------------------------------------


@app.post(
    "/api/captions/generate",
    response_model=CaptionResponse,
    tags=["captions"],
    summary="Generate captions for an uploaded video",
    description=(
        "Transcribe the uploaded video with AssemblyAI and group the words "
        "into caption segments. Upstream failures are reported with a "
        "category (auth, rate limit, timeout, unavailable, generic)."
    ),
    responses={
        **_ERROR_RESPONSES,
        401: {"model": ErrorResponse, "description": "Upstream rejected the API key"},
        404: {"model": ErrorResponse, "description": "Video not found"},
        408: {"model": ErrorResponse, "description": "Upstream timeout"},
        429: {"model": ErrorResponse, "description": "Upstream rate limit"},
        503: {"model": ErrorResponse, "description": "Upstream unreachable"},
    },
)
async def generate_video_captions(request: GenerateCaptionsRequest) -> CaptionResponse:
    if not request.videoPath:
        raise InvalidInputError("No video path provided")
    video_path = upload_store.resolve(request.videoPath)

    try:
        track = await generate_captions(
            video_path, words_per_segment=request.wordsPerSegment
        )
    except CaptionError as exc:
        logger.exception("Caption generation failed (%s): %s", exc.category.value, exc.message)
        raise

    return CaptionResponse(
        success=True,
        captions=[CaptionSegmentModel.from_segment(s) for s in track.segments],
        language=track.language,
        duration=track.duration_s,
        durationInFrames=duration_in_frames(track.duration_s, VIDEO_FPS),
        confidence=track.confidence,
    )


# ---------------------------------------------------------------------------
# Endpoints: Render and preview
# ---------------------------------------------------------------------------


@app.post(
    "/api/render/local",
    response_model=RenderResponse,
    tags=["render"],
    summary="Get the local render command",
    description=(
        "Validate composition props and return the command that renders "
        "them with the rendering project's CLI."
    ),
    responses=_ERROR_RESPONSES,
)
async def render_local(request: RenderRequest) -> RenderResponse:
    if request.inputProps is None or not request.compositionId:
        raise InvalidInputError("Missing required parameters")

    output_name = request.outputFileName or "output.mp4"
    captions = request.inputProps.captions
    if captions:
        frames = duration_in_frames(max(c.end for c in captions), VIDEO_FPS)
    else:
        frames = duration_in_frames(0, VIDEO_FPS)

    command = "npx remotion render {} {}".format(request.compositionId, output_name)
    return RenderResponse(
        success=False,
        message="Local rendering is available via CLI. Use: " + command,
        instructions=RenderInstructions(
            command=command,
            note="Run this command in your terminal to render the video locally",
        ),
        durationInFrames=frames,
    )


@app.post(
    "/api/preview/frame",
    response_model=RenderStateResponse,
    tags=["render"],
    summary="Compute the caption overlay for one frame",
    description=(
        "Return the active caption, per-word highlight, and opacity the "
        "chosen style shows on the given frame."
    ),
    responses={400: {"model": ErrorResponse, "description": "Invalid captions or frame"}},
)
async def preview_frame(request: PreviewFrameRequest) -> RenderStateResponse:
    segments = [c.to_segment() for c in request.captions]
    state = compute_render_state(segments, request.style, request.frame, fps=request.fps)
    return RenderStateResponse.from_state(state)


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        message="{} composition API is running".format(VIDEO_CAPTION_COMP_NAME),
        version=__version__,
    )


def run_api(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Entry point for the video-captioner-api console script."""
    import uvicorn
    uvicorn.run(app, host=host, port=port)
