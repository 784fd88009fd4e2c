# Standard Library
import uuid
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional, Tuple

# Third-Party Libraries
import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# First-Party Libraries
from screenprint.main import app
from screenprint.core.clock import utc_now
from screenprint.database import get_db_session
from screenprint.garments.models import Garment
from screenprint.pricing.catalog import CatalogSnapshot
from screenprint.pricing.models import (
    PricingTier, PrintPricing, AppConfig,
    PricingTierRead, PrintPricingRead, AppConfigRead,
)

# URL de base pour la DB en mémoire
TEST_DATABASE_BASE_URL = "sqlite+aiosqlite:///:memory:"

# (nom, min, max, marge %)
TIER_TABLE: List[Tuple[str, int, Optional[int], str]] = [
    ("24-47", 24, 47, "50.00"),
    ("48-71", 48, 71, "40.00"),
    ("72-143", 72, 143, "35.00"),
    ("144+", 144, None, "30.00"),
]

# Coût par pièce selon le nombre de couleurs, par tranche; setup 25 $ par écran
PRINT_TABLE: Dict[str, Dict[int, str]] = {
    "24-47": {1: "2.50", 2: "3.00", 3: "3.50", 4: "4.00"},
    "48-71": {1: "2.25", 2: "2.75", 3: "3.25", 4: "3.75"},
    "72-143": {1: "2.00", 2: "2.50", 3: "3.00", 4: "3.50"},
    "144+": {1: "1.75", 2: "2.25", 3: "2.75", 4: "3.25"},
}
SETUP_FEE_PER_SCREEN = "25.00"


def build_snapshot(
    tier_table=TIER_TABLE,
    print_table=PRINT_TABLE,
    deposit_percentage: str = "50.00",
    min_order_quantity: int = 24,
) -> CatalogSnapshot:
    """Instantané de catalogue construit en mémoire, sans base."""
    now = utc_now()
    tiers = []
    rows = []
    for name, min_qty, max_qty, markup in tier_table:
        tier = PricingTierRead(
            id=uuid.uuid4(), name=name, min_qty=min_qty, max_qty=max_qty,
            garment_markup_percentage=Decimal(markup), created_at=now,
        )
        tiers.append(tier)
        for num_colors, cost in print_table.get(name, {}).items():
            rows.append(PrintPricingRead(
                id=uuid.uuid4(), tier_id=tier.id, num_colors=num_colors,
                cost_per_shirt=Decimal(cost), setup_fee_per_screen=Decimal(SETUP_FEE_PER_SCREEN),
            ))
    return CatalogSnapshot(
        tiers=tiers,
        print_pricing=rows,
        app_config=AppConfigRead(
            deposit_percentage=Decimal(deposit_percentage),
            min_order_quantity=min_order_quantity,
            max_ink_colors=4,
        ),
    )

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Crée un engine, des tables, et fournit une session DB en mémoire pour chaque test."""
    engine: AsyncEngine = create_async_engine(TEST_DATABASE_BASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def test_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Fournit un AsyncClient httpx qui utilise la session DB de test isolée."""
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    # Le cache du catalogue est porté par l'app: le vider entre deux tests
    app.state.catalog_cache.invalidate()
    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    del app.dependency_overrides[get_db_session]
    app.state.catalog_cache.invalidate()

@pytest.fixture
def catalog_snapshot() -> CatalogSnapshot:
    return build_snapshot()

# --- Fixtures Catalogue (en base) ---

@pytest_asyncio.fixture(scope="function")
async def pricing_tiers(db_session: AsyncSession) -> Dict[str, PricingTier]:
    """Tranches 24-47 / 48-71 / 72-143 / 144+ et leurs tarifs d'impression 1 à 4 couleurs."""
    tiers = {}
    for name, min_qty, max_qty, markup in TIER_TABLE:
        tier = PricingTier(name=name, min_qty=min_qty, max_qty=max_qty, garment_markup_percentage=Decimal(markup))
        db_session.add(tier)
        tiers[name] = tier
    await db_session.commit()

    for name, costs in PRINT_TABLE.items():
        for num_colors, cost in costs.items():
            db_session.add(PrintPricing(
                tier_id=tiers[name].id,
                num_colors=num_colors,
                cost_per_shirt=Decimal(cost),
                setup_fee_per_screen=Decimal(SETUP_FEE_PER_SCREEN),
            ))
    db_session.add(AppConfig(deposit_percentage=Decimal("50.00"), min_order_quantity=24, max_ink_colors=4))
    await db_session.commit()
    return tiers

@pytest_asyncio.fixture(scope="function")
async def test_garment(db_session: AsyncSession, pricing_tiers: Dict[str, PricingTier]) -> Garment:
    """Vêtement à 10 $ de coût fournisseur."""
    garment = Garment(
        name="Classic Tee",
        brand="Gildan",
        base_cost=Decimal("10.00"),
        pricing_tier_id=pricing_tiers["24-47"].id,
        available_colors=["Black", "White"],
        size_range=["S", "M", "L", "XL"],
    )
    db_session.add(garment)
    await db_session.commit()
    await db_session.refresh(garment)
    return garment

@pytest_asyncio.fixture(scope="function")
async def second_garment(db_session: AsyncSession, pricing_tiers: Dict[str, PricingTier]) -> Garment:
    garment = Garment(
        name="Premium Hoodie",
        brand="Bella+Canvas",
        base_cost=Decimal("20.00"),
        pricing_tier_id=pricing_tiers["24-47"].id,
        available_colors=["Heather Grey"],
        size_range=["M", "L"],
    )
    db_session.add(garment)
    await db_session.commit()
    await db_session.refresh(garment)
    return garment

@pytest.fixture
def front_two_colors() -> dict:
    return {"locations": {"front": {"enabled": True, "num_colors": 2}}}

@pytest.fixture
def snapshot_factory():
    """Construit des instantanés personnalisés (tranches, tarifs, acompte)."""
    return build_snapshot
