"""Ledger service owning meals, recipes, daily rollups and the target."""

import asyncio
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Protocol
from uuid import uuid4
from zoneinfo import ZoneInfo

from protein_ledger.domain.drafts import MealDraft, Portion, RecipeDraft
from protein_ledger.domain.ledger import (
    DEFAULT_TARGET_PROTEIN,
    DailyRollup,
    Meal,
    Recipe,
    Snapshot,
)
from protein_ledger.domain.progress import DailyProgress
from protein_ledger.errors import LedgerValidationError, RecipeNotFoundError
from protein_ledger.services.recipes import build_recipe, compose_meal, protein_for

_logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    """Key-value persistence for the serialized ledger."""

    async def load(self) -> str | None:
        """Return the stored blob, or None when absent or unreadable."""

    async def save(self, payload: str) -> bool:
        """Store the blob and return True on success."""


class LedgerPhase(StrEnum):
    """Lifecycle of a ledger instance."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _new_id() -> str:
    return str(uuid4())


@dataclass
class LedgerService:
    """Single source of truth for the protein ledger.

    Every mutation runs under one lock and ends by persisting the whole
    snapshot, so saves reach storage in the order mutations happened.
    Daily rollups are only written by ``_append_meal``.
    """

    store: SnapshotStore
    timezone: str = "UTC"
    default_target_protein: float = DEFAULT_TARGET_PROTEIN
    clock: Callable[[], datetime] = _utc_now
    id_factory: Callable[[], str] = _new_id
    phase: LedgerPhase = field(default=LedgerPhase.UNINITIALIZED, init=False)
    _target_protein: float = field(init=False)
    _meals: list[Meal] = field(default_factory=list, init=False)
    _rollups: dict[str, DailyRollup] = field(default_factory=dict, init=False)
    _recipes: list[Recipe] = field(default_factory=list, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self) -> None:
        self._target_protein = self.default_target_protein

    @property
    def target_protein(self) -> float:
        return self._target_protein

    def today(self) -> str:
        """Return the ledger's local calendar day as YYYY-MM-DD."""
        return self.clock().astimezone(ZoneInfo(self.timezone)).date().isoformat()

    async def add_meal(self, draft: MealDraft) -> Meal:
        """Validate and record a meal, then persist the ledger."""
        async with self._lock:
            meal = self._append_meal(draft)
            await self._save_locked()
        return meal

    async def add_meal_from_recipe(self, recipe_id: str, portion: Portion) -> Meal:
        """Log a portion of a saved recipe as a meal dated today."""
        async with self._lock:
            recipe = self._find_recipe(recipe_id)
            if recipe is None:
                raise RecipeNotFoundError(recipe_id)
            draft = compose_meal(recipe, portion, self.today())
            meal = self._append_meal(draft)
            await self._save_locked()
        return meal

    async def set_target_protein(self, value: float) -> None:
        """Update the daily target; stored rollups keep their own target."""
        if not math.isfinite(value) or value <= 0:
            raise LedgerValidationError("Target protein must be a positive number")
        async with self._lock:
            self._target_protein = float(value)
            await self._save_locked()

    async def add_recipe(self, draft: RecipeDraft) -> Recipe:
        """Save a new recipe with totals derived from its ingredients."""
        recipe = build_recipe(
            draft, id_factory=self.id_factory, created_at=self._now_millis()
        )
        async with self._lock:
            self._recipes.append(recipe)
            await self._save_locked()
        return recipe

    async def delete_recipe(self, recipe_id: str) -> None:
        """Remove a recipe; unknown ids leave the recipe list untouched."""
        async with self._lock:
            self._recipes = [
                recipe for recipe in self._recipes if recipe.id != recipe_id
            ]
            await self._save_locked()

    def get_daily_rollup(self, day: str) -> DailyRollup:
        """Return the rollup for a day, or an unsaved empty one."""
        rollup = self._rollups.get(day)
        if rollup is not None:
            return rollup
        return DailyRollup(
            date=day,
            total_protein=0.0,
            target_protein=self._target_protein,
            meals=(),
        )

    def get_today_rollup(self) -> DailyRollup:
        return self.get_daily_rollup(self.today())

    def get_daily_progress(self, day: str) -> DailyProgress:
        """Compare a day's total with the current target."""
        rollup = self.get_daily_rollup(day)
        return DailyProgress.compute(day, rollup.total_protein, self._target_protein)

    def remaining_protein(self, day: str) -> float:
        """Protein still to eat on ``day``; never negative."""
        return max(self.get_daily_progress(day).remaining, 0.0)

    def list_daily_rollups(self) -> list[DailyRollup]:
        """Return stored rollups, newest day first."""
        return sorted(self._rollups.values(), key=lambda r: r.date, reverse=True)

    def list_meals(self, day: str | None = None) -> list[Meal]:
        if day is None:
            return list(self._meals)
        return [meal for meal in self._meals if meal.date == day]

    def list_recipes(self) -> list[Recipe]:
        return list(self._recipes)

    def get_recipe(self, recipe_id: str) -> Recipe | None:
        return self._find_recipe(recipe_id)

    def snapshot(self) -> Snapshot:
        """Return the full ledger state as one immutable value."""
        return Snapshot(
            target_protein=self._target_protein,
            meals=tuple(self._meals),
            daily_rollups=dict(self._rollups),
            recipes=tuple(self._recipes),
        )

    async def load_data(self) -> bool:
        """Replace in-memory state with the stored snapshot.

        Returns False when the stored data could not be read; the current
        state is kept and the ledger is still marked ready.
        """
        async with self._lock:
            try:
                payload = await self.store.load()
                snapshot = Snapshot.from_json(payload) if payload else None
            except Exception:
                _logger.exception("Failed to load ledger data")
                self.phase = LedgerPhase.READY
                return False
            if snapshot is not None:
                self._target_protein = snapshot.target_protein
                self._meals = list(snapshot.meals)
                self._rollups = dict(snapshot.daily_rollups)
                self._recipes = list(snapshot.recipes)
                _logger.info(
                    "Loaded ledger: meals=%s recipes=%s",
                    len(self._meals),
                    len(self._recipes),
                )
            self.phase = LedgerPhase.READY
            return True

    async def save_data(self) -> bool:
        """Persist the current state; failures are logged, not raised."""
        async with self._lock:
            return await self._save_locked()

    async def _save_locked(self) -> bool:
        payload = self.snapshot().to_json()
        try:
            saved = await self.store.save(payload)
        except Exception:
            _logger.exception("Failed to save ledger data")
            return False
        if not saved:
            _logger.warning("Ledger data was not saved")
        return saved

    def _append_meal(self, draft: MealDraft) -> Meal:
        name = draft.name.strip()
        if not name:
            raise LedgerValidationError("Meal name is required")
        if not math.isfinite(draft.protein_per_100g) or draft.protein_per_100g < 0:
            raise LedgerValidationError("Protein per 100g must be zero or more")
        if not math.isfinite(draft.grams_eaten) or draft.grams_eaten <= 0:
            raise LedgerValidationError("Grams eaten must be a positive number")
        require_day(draft.date)

        meal = Meal(
            id=self.id_factory(),
            name=name,
            protein_per_100g=draft.protein_per_100g,
            grams_eaten=draft.grams_eaten,
            total_protein=protein_for(draft.protein_per_100g, draft.grams_eaten),
            date=draft.date,
            timestamp=self._now_millis(),
        )
        self._meals.append(meal)
        self._recompute_rollup(meal.date)
        return meal

    def _recompute_rollup(self, day: str) -> None:
        meals = tuple(meal for meal in self._meals if meal.date == day)
        self._rollups[day] = DailyRollup(
            date=day,
            total_protein=math.fsum(meal.total_protein for meal in meals),
            target_protein=self._target_protein,
            meals=meals,
        )

    def _find_recipe(self, recipe_id: str) -> Recipe | None:
        for recipe in self._recipes:
            if recipe.id == recipe_id:
                return recipe
        return None

    def _now_millis(self) -> int:
        return int(self.clock().timestamp() * 1000)


def require_day(value: str) -> None:
    """Raise ``LedgerValidationError`` unless ``value`` is a YYYY-MM-DD day."""
    try:
        parsed = date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise LedgerValidationError(f"Invalid date: {value!r}") from exc
    if parsed.isoformat() != value:
        raise LedgerValidationError(f"Date must be YYYY-MM-DD: {value!r}")
