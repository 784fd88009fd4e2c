import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from screenprint.core.cache import TTLCache
from screenprint.database import get_db_session
from screenprint.pricing.catalog import PricingCatalog
from screenprint.pricing.interfaces.repositories import (
    AbstractPricingTierRepository,
    AbstractPrintPricingRepository,
    AbstractAppConfigRepository,
)
from screenprint.pricing.repositories import (
    SQLAlchemyPricingTierRepository,
    SQLAlchemyPrintPricingRepository,
    SQLAlchemyAppConfigRepository,
)
from screenprint.pricing.service import PricingAdminService

logger = logging.getLogger(__name__)

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

# --- Repositories ---

def get_pricing_tier_repository(session: SessionDep) -> AbstractPricingTierRepository:
    return SQLAlchemyPricingTierRepository(db_session=session)

def get_print_pricing_repository(session: SessionDep) -> AbstractPrintPricingRepository:
    return SQLAlchemyPrintPricingRepository(db_session=session)

def get_app_config_repository(session: SessionDep) -> AbstractAppConfigRepository:
    return SQLAlchemyAppConfigRepository(db_session=session)

PricingTierRepositoryDep = Annotated[AbstractPricingTierRepository, Depends(get_pricing_tier_repository)]
PrintPricingRepositoryDep = Annotated[AbstractPrintPricingRepository, Depends(get_print_pricing_repository)]
AppConfigRepositoryDep = Annotated[AbstractAppConfigRepository, Depends(get_app_config_repository)]

# --- Catalogue ---

def get_catalog_cache(request: Request) -> Optional[TTLCache]:
    """Cache du catalogue porté par l'application (créé dans main.py)."""
    return getattr(request.app.state, "catalog_cache", None)

CatalogCacheDep = Annotated[Optional[TTLCache], Depends(get_catalog_cache)]

def get_pricing_catalog(
    tier_repository: PricingTierRepositoryDep,
    print_pricing_repository: PrintPricingRepositoryDep,
    app_config_repository: AppConfigRepositoryDep,
    cache: CatalogCacheDep,
) -> PricingCatalog:
    logger.debug("Providing PricingCatalog")
    return PricingCatalog(
        tier_repository=tier_repository,
        print_pricing_repository=print_pricing_repository,
        app_config_repository=app_config_repository,
        cache=cache,
    )

PricingCatalogDep = Annotated[PricingCatalog, Depends(get_pricing_catalog)]

# --- Service ---

def get_pricing_admin_service(
    tier_repository: PricingTierRepositoryDep,
    print_pricing_repository: PrintPricingRepositoryDep,
    app_config_repository: AppConfigRepositoryDep,
    catalog: PricingCatalogDep,
) -> PricingAdminService:
    logger.debug("Providing PricingAdminService")
    return PricingAdminService(
        tier_repository=tier_repository,
        print_pricing_repository=print_pricing_repository,
        app_config_repository=app_config_repository,
        catalog=catalog,
    )

PricingAdminServiceDep = Annotated[PricingAdminService, Depends(get_pricing_admin_service)]
