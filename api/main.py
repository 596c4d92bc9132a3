"""FastAPI application exposing the booklet export."""
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, Response

from api.dependencies import AppSettings, Design, HttpClient
from errors import UpstreamImageError, ValidationError
from models.booklet import BookletRequest
from models.design import DesignSystem
from pipeline.booklet import PDF_FILENAME, PDF_MEDIA_TYPE, build_booklet
from settings import Settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    design: DesignSystem | None = None,
    http_client: httpx.Client | None = None,
) -> FastAPI:
    """Build the application. Settings, design and HTTP client live for the whole process."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings or Settings()
        logging.getLogger().setLevel(app.state.settings.log_level)
        app.state.design = design or DesignSystem.load_or_default(
            app.state.settings.design_yaml_path
        )
        owns_client = http_client is None
        app.state.http_client = http_client or httpx.Client(
            timeout=app.state.settings.image_fetch_timeout
        )
        logger.info("Booklet API ready (design: %s)", app.state.settings.design_yaml_path)

        yield

        if owns_client:
            app.state.http_client.close()

    app = FastAPI(
        title="Story Booklet API",
        description="Typeset a story and up to three illustrations into a 3-page A4 PDF.",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})

    @app.exception_handler(UpstreamImageError)
    async def upstream_image_error_handler(request: Request, exc: UpstreamImageError):
        logger.warning("Booklet aborted: %s", exc)
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"error": str(exc)})

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.post(
        "/story/pdf",
        response_class=Response,
        tags=["Story"],
        summary="Export a story as a PDF booklet",
        responses={200: {"content": {PDF_MEDIA_TYPE: {}}}},
    )
    def story_pdf(body: BookletRequest, settings: AppSettings, design: Design, client: HttpClient):
        """Typeset the story into a 3-page booklet and return it as an attachment."""
        pdf_bytes = build_booklet(body, settings, design, client)
        return Response(
            content=pdf_bytes,
            media_type=PDF_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{PDF_FILENAME}"'},
        )

    return app


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)

app = create_app()


if __name__ == "__main__":
    import uvicorn  # lazy — only needed when serving directly

    uvicorn.run("api.main:app", host="0.0.0.0", port=8000)
