"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from protein_ledger.api.models import (
    DayResponse,
    MealCreateRequest,
    ProductLogRequest,
    ProductResponse,
    ProgressResponse,
    RatioAllocationResponse,
    RatioRequest,
    RatioResponse,
    RecipeCreateRequest,
    RecipeLogRequest,
    TargetPayload,
)
from protein_ledger.app_logging import configure_logging
from protein_ledger.containers import AppContainer
from protein_ledger.domain.drafts import MealDraft, RecipeDraft, RecipeIngredientDraft
from protein_ledger.domain.ledger import DailyRollup, Meal, Recipe
from protein_ledger.domain.products import Product, SearchFilters
from protein_ledger.domain.ratios import RatioIngredient
from protein_ledger.errors import (
    LedgerValidationError,
    MissingProteinDataError,
    RecipeNotFoundError,
)
from protein_ledger.services.ledger import LedgerService, require_day
from protein_ledger.services.products import meal_draft_from_product
from protein_ledger.services.ratios import solve_ratio, summarize
from protein_ledger.services.recipes import parse_portion

HTTP_422_UNPROCESSABLE = 422


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        loaded = await state_container.ledger_service.load_data()
        if not loaded:
            logger.warning("Starting with default ledger data")
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(LedgerValidationError)
    async def validation_error(
        request: Request, exc: LedgerValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=HTTP_422_UNPROCESSABLE,
            content={"detail": str(exc)},
        )

    @app.exception_handler(MissingProteinDataError)
    async def missing_protein(
        request: Request, exc: MissingProteinDataError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=HTTP_422_UNPROCESSABLE,
            content={"detail": str(exc)},
        )

    @app.exception_handler(RecipeNotFoundError)
    async def recipe_not_found(
        request: Request, exc: RecipeNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health(request: Request) -> dict[str, str]:
        """Simple health check endpoint."""
        ledger = _ledger(request)
        return {"status": "ok", "ledger": ledger.phase.value}

    @app.get("/ledger/today")
    async def today(request: Request) -> DayResponse:
        """Return today's rollup and progress."""
        ledger = _ledger(request)
        return _day_response(ledger, ledger.today())

    @app.get("/ledger/days")
    async def list_days(request: Request) -> dict[str, list[DailyRollup]]:
        """Return stored daily rollups, newest first."""
        return {"days": _ledger(request).list_daily_rollups()}

    @app.get("/ledger/days/{day}")
    async def get_day(day: str, request: Request) -> DayResponse:
        """Return the rollup and progress for a day."""
        require_day(day)
        return _day_response(_ledger(request), day)

    @app.post("/ledger/meals", status_code=status.HTTP_201_CREATED)
    async def add_meal(payload: MealCreateRequest, request: Request) -> Meal:
        """Log a meal entered by hand."""
        ledger = _ledger(request)
        return await ledger.add_meal(
            MealDraft(
                name=payload.name,
                protein_per_100g=payload.protein_per_100g,
                grams_eaten=payload.grams_eaten,
                date=payload.date or ledger.today(),
            )
        )

    @app.get("/ledger/target")
    async def get_target(request: Request) -> TargetPayload:
        """Return the daily protein target."""
        return TargetPayload(target_protein=_ledger(request).target_protein)

    @app.put("/ledger/target")
    async def set_target(payload: TargetPayload, request: Request) -> TargetPayload:
        """Update the daily protein target."""
        ledger = _ledger(request)
        await ledger.set_target_protein(payload.target_protein)
        return TargetPayload(target_protein=ledger.target_protein)

    @app.get("/recipes")
    async def list_recipes(request: Request) -> dict[str, list[Recipe]]:
        """Return saved recipes."""
        return {"recipes": _ledger(request).list_recipes()}

    @app.post("/recipes", status_code=status.HTTP_201_CREATED)
    async def create_recipe(payload: RecipeCreateRequest, request: Request) -> Recipe:
        """Save a recipe; totals are derived from its ingredients."""
        draft = RecipeDraft(
            name=payload.name,
            ingredients=[
                RecipeIngredientDraft(
                    name=item.name,
                    protein_per_100g=item.protein_per_100g,
                    grams_in_recipe=item.grams_in_recipe,
                )
                for item in payload.ingredients
            ],
            total_protein=payload.total_protein,
            total_grams=payload.total_grams,
        )
        return await _ledger(request).add_recipe(draft)

    @app.get("/recipes/{recipe_id}")
    async def get_recipe(recipe_id: str, request: Request) -> Recipe:
        """Return one recipe."""
        recipe = _ledger(request).get_recipe(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(recipe_id)
        return recipe

    @app.delete("/recipes/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_recipe(recipe_id: str, request: Request) -> Response:
        """Delete a recipe; unknown ids are ignored."""
        await _ledger(request).delete_recipe(recipe_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/recipes/{recipe_id}/log", status_code=status.HTTP_201_CREATED)
    async def log_recipe(
        recipe_id: str, payload: RecipeLogRequest, request: Request
    ) -> Meal:
        """Log a number of servings or grams of a recipe for today."""
        portion = parse_portion(payload.amount, payload.unit)
        return await _ledger(request).add_meal_from_recipe(recipe_id, portion)

    @app.post("/ratios/solve")
    async def solve(payload: RatioRequest, request: Request) -> RatioResponse:
        """Work out ingredient amounts for a protein target."""
        ledger = _ledger(request)
        target = payload.target_protein
        if target is None:
            target = ledger.remaining_protein(ledger.today())
        ingredients = [
            RatioIngredient(
                name=item.name,
                protein_per_100g=item.protein_per_100g,
                weight=item.weight,
            )
            for item in payload.ingredients
        ]
        allocations = solve_ratio(target, ingredients)
        summary = summarize(allocations)
        return RatioResponse(
            target_protein=target,
            allocations=[
                RatioAllocationResponse(
                    name=item.ingredient.name,
                    protein_per_100g=item.ingredient.protein_per_100g,
                    weight=item.ingredient.weight,
                    share_percent=share,
                    protein_provided=item.protein_provided,
                    grams_needed=item.grams_needed,
                    feasible=item.feasible,
                )
                for item, share in zip(
                    allocations, summary.share_percent, strict=True
                )
            ],
            total_protein=summary.total_protein,
            total_grams=summary.total_grams,
            infeasible=summary.infeasible,
        )

    @app.get("/products/barcode/{barcode}")
    async def product_by_barcode(barcode: str, request: Request) -> ProductResponse:
        """Look up a product by barcode."""
        product = await _container(request).product_service.lookup_by_barcode(
            barcode
        )
        if product is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _product_response(product)

    @app.get("/products/search")
    async def search_products(  # noqa: PLR0913
        request: Request,
        term: str,
        page: int = 1,
        page_size: int = 10,
        category: str | None = None,
        brand: str | None = None,
        min_protein: float | None = None,
        max_protein: float | None = None,
    ) -> dict[str, list[ProductResponse]]:
        """Search products by name."""
        products = await _container(request).product_service.search(
            term,
            page=page,
            page_size=page_size,
            filters=SearchFilters(
                category=category,
                brand=brand,
                min_protein=min_protein,
                max_protein=max_protein,
            ),
        )
        return {"products": [_product_response(product) for product in products]}

    @app.post("/products/barcode/{barcode}/log", status_code=status.HTTP_201_CREATED)
    async def log_product(
        barcode: str, payload: ProductLogRequest, request: Request
    ) -> Meal:
        """Log a scanned product as a meal for today."""
        state_container = _container(request)
        product = await state_container.product_service.lookup_by_barcode(barcode)
        if product is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        ledger = state_container.ledger_service
        draft = meal_draft_from_product(product, payload.grams, ledger.today())
        return await ledger.add_meal(draft)

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _ledger(request: Request) -> LedgerService:
    return _container(request).ledger_service


def _day_response(ledger: LedgerService, day: str) -> DayResponse:
    progress = ledger.get_daily_progress(day)
    return DayResponse(
        rollup=ledger.get_daily_rollup(day),
        progress=ProgressResponse(
            consumed=progress.consumed,
            target=progress.target,
            remaining=progress.remaining,
            percentage=progress.percentage,
            near_limit=progress.near_limit,
            over_limit=progress.over_limit,
        ),
    )


def _product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        barcode=product.barcode,
        name=product.name,
        brand=product.brand,
        protein_per_100g=product.protein_per_100g,
    )
