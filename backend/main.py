"""
S1 Palette Generator API
FastAPI application entry point.
"""
from dotenv import load_dotenv

# Load environment variables before config is read
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from s1palette import __version__
from s1palette.api.v1 import router as v1_router
from s1palette.schemas import HealthResponse
from s1palette.utils.logging import configure_logging

configure_logging()

app = FastAPI(
    title="S1 Palette Generator",
    description="Extract color palettes from images and export them as Studio One .colorpalette files",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(v1_router)


@app.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    """Health check."""
    return HealthResponse(ok=True, version=__version__, service="s1palette")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
