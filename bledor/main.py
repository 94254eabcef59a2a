# bledor/main.py
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from bledor.config import settings
from bledor.core.errors import BakeryError
from bledor.database import init_db

# Routers
from bledor.routes.auth import router as auth_router
from bledor.routes.client import router as client_router
from bledor.routes.logs import router as logs_router
from bledor.routes.orders import router as orders_router
from bledor.routes.owner import router as owner_router
from bledor.routes.products import router as products_router
from bledor.routes.stats import router as stats_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(create_tables: bool = True) -> FastAPI:
    if create_tables:
        init_db()

    app = FastAPI(title="Blé d'Or API", version="1.0.0")

    # CORS: local storefront plus the deployed one when configured
    origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    if settings.FRONTEND_URL:
        origins.append(settings.FRONTEND_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Every core error maps to its status code and stable message
    @app.exception_handler(BakeryError)
    async def bakery_error_handler(request: Request, exc: BakeryError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})

    app.include_router(auth_router)
    app.include_router(client_router)
    app.include_router(products_router)
    app.include_router(orders_router)
    app.include_router(owner_router)
    app.include_router(stats_router)
    app.include_router(logs_router)

    @app.get("/")
    def read_root():
        return {"message": "Blé d'Or API is running"}

    return app


app = create_app()
