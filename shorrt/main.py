import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from . import database, models, schemas
from .cache import LinkCache
from .config import Settings, load_settings
from .crud import LinkStore
from .errors import ShortLinkError
from .qr_utils import QRCodeWriter
from .service import LinkService
from .tokens import TokenGenerator

logger = logging.getLogger("shorrt")

FRONTEND_DIR = Path(__file__).parent / "frontend"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.cache.close()
    app.state.engine.dispose()


def get_service(request: Request, db: Session = Depends(database.get_db)) -> LinkService:
    state = request.app.state
    return LinkService(
        store=LinkStore(db),
        cache=state.cache,
        tokens=state.tokens,
        artifacts=state.artifacts,
    )


def create_app(
    settings: Settings | None = None,
    cache: LinkCache | None = None,
    tokens: TokenGenerator | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    engine = database.make_engine(settings)
    # --- DB tables ---
    models.Base.metadata.create_all(bind=engine)

    app = FastAPI(
        title="shorrt",
        description="Short links with QR codes, access counts and optional expiration.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = database.make_session_factory(engine)
    app.state.cache = cache or LinkCache.from_url(settings.redis_url)
    app.state.tokens = tokens or TokenGenerator()
    app.state.artifacts = QRCodeWriter(
        settings.qr_dir,
        box_size=settings.qr_box_size,
        public_base_url=settings.public_base_url,
    )

    # --- CORS (allow frontend dev servers, etc.) ---
    origins = ["*"] if not settings.is_prod else [
        settings.public_base_url or "http://localhost:8080",
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s -> %s (%.2fms)", request.method, request.url.path,
                    response.status_code, duration_ms)
        return response

    @app.exception_handler(ShortLinkError)
    async def short_link_error(request: Request, exc: ShortLinkError):
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError):
        logger.info("Validation error: %s", exc.errors())
        return JSONResponse(status_code=400, content={"detail": "Invalid request body"})

    # ---- Generated QR codes and the static form ----
    Path(settings.qr_dir).mkdir(parents=True, exist_ok=True)
    app.mount("/qrcodes", StaticFiles(directory=settings.qr_dir), name="qrcodes")

    @app.get("/", include_in_schema=False)
    def serve_index():
        return FileResponse(FRONTEND_DIR / "index.html")

    # Health check (useful for uptime monitors & load balancers)
    @app.get("/health", response_model=schemas.HealthOut, include_in_schema=False)
    def health():
        return {"status": "ok", "env": settings.environment}

    # ---------- API ----------
    @app.post("/shorten", response_model=schemas.LinkOut)
    def shorten(link_in: schemas.LinkCreate, service: LinkService = Depends(get_service)):
        logger.info("Creating link: custom=%s original=%s", link_in.custom_short, link_in.original)
        return service.create(link_in.original, link_in.custom_short, link_in.expiration_date)

    @app.get("/urls", response_model=list[schemas.LinkOut])
    def list_urls(service: LinkService = Depends(get_service)):
        return service.list_all()

    # Registered last so the fixed paths above win
    @app.get("/{short}", include_in_schema=False)
    def redirect(short: str, service: LinkService = Depends(get_service)):
        original = service.resolve(short)
        return RedirectResponse(url=original, status_code=301)

    return app


if __name__ == "__main__":
    settings = load_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
