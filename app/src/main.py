"""FastAPI web app for emoji-wiggler animation generation."""

import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.requests import Request
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from emoji_wiggler.animation_pipeline import encode_animation
from emoji_wiggler.animation.models import AnimationParameters
from emoji_wiggler.constants import (
    DEFAULT_FRAME_COUNT,
    DEFAULT_FRAME_INTERVAL_MS,
    DEFAULT_IMAGE_SCALE,
    DEFAULT_MAX_DIMENSION,
    DEFAULT_OUTPUT_NAME,
    DEFAULT_SIZE_BUDGET_BYTES,
    DEFAULT_WIGGLE_INTENSITY,
)
from emoji_wiggler.decoding import decode_image
from emoji_wiggler.errors import BudgetUnreachableError, DecodeError, WigglerError
from emoji_wiggler.output import media_type_for_output_format

load_dotenv()

MAX_UPLOAD_BYTES = int(os.getenv("WIGGLER_MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

app = FastAPI(title="Emoji Wiggler")

templates = Jinja2Templates(directory=Path(__file__).parent / "templates")


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Serve the main page."""
    return templates.TemplateResponse(request, "index.html")


@app.post("/api/wiggle")
async def wiggle(
    request: Request,
    frames: int = Query(DEFAULT_FRAME_COUNT, ge=1, le=200, description="Frames per loop"),
    interval_ms: int = Query(DEFAULT_FRAME_INTERVAL_MS, ge=1, description="Milliseconds per frame"),
    intensity: float = Query(DEFAULT_WIGGLE_INTENSITY, gt=0, description="Wiggle intensity"),
    scale: float = Query(DEFAULT_IMAGE_SCALE, gt=0, le=1, description="Image scale on the canvas"),
    max_dimension: int = Query(DEFAULT_MAX_DIMENSION, ge=1, le=1024, description="Largest canvas side"),
    max_bytes: int = Query(DEFAULT_SIZE_BUDGET_BYTES, ge=1, description="GIF size ceiling"),
):
    """Animate the image sent as the request body and return the GIF."""
    raw_bytes = await request.body()
    if len(raw_bytes) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Image too large")

    try:
        content_type = request.headers.get("content-type", "").split(";")[0].strip()
        mime_hint = content_type if content_type.startswith("image/") else None
        source = decode_image(raw_bytes, mime_hint)
        params = AnimationParameters(
            frame_count=frames,
            frame_interval_ms=interval_ms,
            wiggle_intensity=intensity,
            image_scale=scale,
            target_max_dimension=max_dimension,
            size_budget_bytes=max_bytes,
        )
        artifact = await run_in_threadpool(encode_animation, source, params)
        return Response(
            content=artifact.data,
            media_type=media_type_for_output_format("gif"),
            headers={
                "Response-Type": "blob",
                "Content-Disposition": f"inline; filename={DEFAULT_OUTPUT_NAME}",
            },
        )
    except (ValueError, DecodeError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BudgetUnreachableError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except WigglerError as e:
        raise HTTPException(status_code=500, detail=f"Failed to generate animation: {e}")
