"""
Module principal de l'application FastAPI de devis et commandes sérigraphie.

Configure l'instance FastAPI, le CORS, le cache du catalogue tarifaire,
le format des erreurs de validation et inclut les routeurs de l'API.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from screenprint.config import settings
from screenprint.core.cache import TTLCache
from screenprint.database import create_tables
from screenprint.pricing.config import settings as pricing_settings

# --- Importer les routeurs ---
from screenprint.pricing.router import pricing_router
from screenprint.garments.router import garment_router
from screenprint.quotes.router import quote_router
from screenprint.campaigns.router import campaign_router
from screenprint.discounts.router import discount_router
from screenprint.orders.router import order_router

# Configurer le logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_AUTO_CREATE_TABLES:
        logger.info("Création des tables manquantes (DB_AUTO_CREATE_TABLES).")
        await create_tables()
    yield

app = FastAPI(
    title=settings.APP_TITLE,
    description="API de devis (vêtements, impression, remises) et de commandes sérigraphie.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)

# Cache du catalogue tarifaire, propre à cette instance d'application
app.state.catalog_cache = TTLCache(ttl=pricing_settings.CATALOG_CACHE_TTL, name="catalog_cache")

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Requête invalide sur {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request data", "details": jsonable_encoder(exc.errors())},
    )

# ======================================================
# Inclure les routeurs
# ======================================================
app.include_router(pricing_router, prefix=settings.API_V1_PREFIX)
app.include_router(garment_router, prefix=settings.API_V1_PREFIX)
app.include_router(quote_router, prefix=settings.API_V1_PREFIX)
app.include_router(campaign_router, prefix=settings.API_V1_PREFIX)
app.include_router(discount_router, prefix=settings.API_V1_PREFIX)
app.include_router(order_router, prefix=settings.API_V1_PREFIX)

@app.get("/", tags=["Root"])
async def read_root():
    return {"message": f"{settings.APP_TITLE} - voir /docs"}

logger.info("Application FastAPI configurée.")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("screenprint.main:app", host="0.0.0.0", port=8000)
