"""
Price resolver and recipe costing.

Missing references resolve to 0 so reports stay renderable with partial
data, but every miss is logged once and kept for the report's warnings.
Cost and revenue bases never fall back to each other.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from stockledger.config import get_logger
from stockledger.core.entities import (
    EntityKind,
    Material,
    PriceBasis,
    Product,
    Recipe,
    RecipeMaterial,
)
from stockledger.core.exceptions import PriceBasisRequiredError, ValidationError

logger = get_logger(__name__)


class PriceResolver:
    """Maps an entity id to its current unit price from reference tables."""

    def __init__(
        self,
        materials: Iterable[Material] = (),
        products: Iterable[Product] = (),
        recipes: Iterable[Recipe] = (),
    ):
        self._materials = {m.id: m for m in materials}
        self._products = {p.id: p for p in products}
        # First recipe per product wins
        self._recipes: dict[str, Recipe] = {}
        for recipe in recipes:
            self._recipes.setdefault(recipe.product_id, recipe)
        self._missing: set[tuple[EntityKind, str, str]] = set()

    @property
    def missing(self) -> list[str]:
        """Human-readable warnings for every reference that resolved to 0."""
        return [
            f"No {basis} price for {kind.value} '{entity_id}'"
            for kind, entity_id, basis in sorted(self._missing)
        ]

    def _miss(self, kind: EntityKind, entity_id: str, basis: str) -> float:
        key = (kind, entity_id, basis)
        if key not in self._missing:
            self._missing.add(key)
            logger.warning(
                "price_reference_missing",
                entity_kind=kind.value,
                entity_id=entity_id,
                basis=basis,
            )
        return 0.0

    def price_of(
        self,
        entity_id: str,
        kind: EntityKind | str,
        basis: PriceBasis | str | None = None,
    ) -> float:
        """
        Current unit price of an entity.

        Materials ignore the basis and read unit_price. Products must say
        which basis: cost reads the recipe's unit_cost; revenue reads the
        product's price, then the recipe's selling_price.
        """
        kind = EntityKind(kind)
        if kind is EntityKind.MATERIAL:
            return self._material_price(entity_id)

        if basis is None:
            raise PriceBasisRequiredError(entity_id)
        basis = PriceBasis(basis)
        if basis is PriceBasis.COST:
            return self._product_cost(entity_id)
        return self._product_revenue(entity_id)

    def _material_price(self, material_id: str) -> float:
        material = self._materials.get(material_id)
        if material is None or material.unit_price is None:
            return self._miss(EntityKind.MATERIAL, material_id, "unit")
        return material.unit_price

    def _product_cost(self, product_id: str) -> float:
        recipe = self._recipes.get(product_id)
        if recipe is None or recipe.unit_cost is None:
            return self._miss(EntityKind.PRODUCT, product_id, PriceBasis.COST.value)
        return recipe.unit_cost

    def _product_revenue(self, product_id: str) -> float:
        product = self._products.get(product_id)
        if product is not None and product.price is not None:
            return product.price
        recipe = self._recipes.get(product_id)
        if recipe is not None and recipe.selling_price is not None:
            return recipe.selling_price
        return self._miss(EntityKind.PRODUCT, product_id, PriceBasis.REVENUE.value)

    def recipe_for(self, product_id: str) -> Recipe | None:
        return self._recipes.get(product_id)


@dataclass(frozen=True)
class RecipeCosting:
    """Material cost of one batch and the resulting cost per unit."""

    material_cost: float
    unit_cost: float


def cost_recipe(
    materials_used: Iterable[RecipeMaterial],
    resolver: PriceResolver,
    yield_quantity: float,
) -> RecipeCosting:
    """Cost a recipe from current material prices."""
    if yield_quantity <= 0:
        raise ValidationError("yield", "Recipe yield must be positive", yield_quantity)

    material_cost = sum(
        resolver.price_of(line.material_id, EntityKind.MATERIAL) * line.quantity
        for line in materials_used
    )
    return RecipeCosting(
        material_cost=material_cost,
        unit_cost=material_cost / yield_quantity,
    )
