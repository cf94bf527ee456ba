from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError

from core_backend.exceptions import (
    OrderValidationError,
    PriceCalculationError,
    ReferentialError,
)
from payments.money import from_minor, to_minor
from .models import Deal, MenuItem, SelectionMode, VariantOption
from .selections import (
    MultiSelection,
    SelectedOption,
    SingleSelection,
    VariantSelection,
    selections_to_json,
)

logger = logging.getLogger(__name__)


class CatalogResolver:
    """Read-only access to menu items, deals and variant options for pricing."""

    @staticmethod
    def get_menu_item(menu_item_id) -> MenuItem:
        try:
            menu_item = (
                MenuItem.objects.select_related("category__parent")
                .prefetch_related("variant_links__variant")
                .get(pk=menu_item_id)
            )
        except (MenuItem.DoesNotExist, DjangoValidationError, ValueError):
            raise ReferentialError("menu_items", menu_item_id)

        if not menu_item.is_available:
            raise OrderValidationError(f"{menu_item.name} is not available")
        return menu_item

    @staticmethod
    def get_deal(deal_id) -> Deal:
        try:
            deal = (
                Deal.objects.select_related("category__parent")
                .prefetch_related(
                    "items__menu_item__variant_links__variant",
                    "variant_links__variant",
                )
                .get(pk=deal_id)
            )
        except (Deal.DoesNotExist, DjangoValidationError, ValueError):
            raise ReferentialError("deals", deal_id)

        if not deal.is_available:
            raise OrderValidationError(f"{deal.name} is not available")
        return deal

    @staticmethod
    def get_variant_options(variant_id, allowed_ids: Optional[Iterable[str]] = None) -> List[VariantOption]:
        """
        Options currently offered for a variant. ``allowed_ids`` narrows them
        to the subset an item exposes; empty or None means all.
        """
        options = VariantOption.objects.filter(variant_id=variant_id, is_available=True)
        allowed = {str(option_id) for option_id in allowed_ids or []}
        if allowed:
            return [option for option in options if str(option.id) in allowed]
        return list(options)


# ============================================================================
# SELECTION STRATEGIES
# ============================================================================

class BaseSelectionStrategy:
    def build(self, assignment, raw: Dict, offered: Dict[str, VariantOption]) -> VariantSelection:
        raise NotImplementedError("Subclasses must implement this method.")

    def validate(self, assignment, selection: VariantSelection) -> None:
        raise NotImplementedError("Subclasses must implement this method.")

    @staticmethod
    def _option(assignment, offered, option_id) -> SelectedOption:
        option = offered.get(str(option_id))
        if option is None:
            raise OrderValidationError(f"Invalid option for {assignment.variant.name}")
        return SelectedOption(
            option_id=str(option.id),
            option_name=option.name,
            price_modifier=option.price_modifier,
        )


class SingleSelectionStrategy(BaseSelectionStrategy):
    def build(self, assignment, raw, offered):
        option_id = raw.get("option_id")
        option = self._option(assignment, offered, option_id) if option_id else None
        return SingleSelection(
            variant_id=str(assignment.variant_id),
            variant_name=assignment.variant.name,
            option=option,
        )

    def validate(self, assignment, selection):
        if not selection.chosen_options:
            raise OrderValidationError(f"Select one option for {assignment.variant.name}")


class MultipleSelectionStrategy(BaseSelectionStrategy):
    mode = SelectionMode.MULTIPLE

    def build(self, assignment, raw, offered):
        option_ids = raw.get("option_ids") or []
        return MultiSelection(
            variant_id=str(assignment.variant_id),
            variant_name=assignment.variant.name,
            selection_mode=self.mode,
            options=tuple(self._option(assignment, offered, option_id) for option_id in option_ids),
        )

    def validate(self, assignment, selection):
        if not selection.chosen_options:
            raise OrderValidationError(
                f"Select at least one option for {assignment.variant.name}"
            )


class AllSelectionStrategy(MultipleSelectionStrategy):
    """Every option starts selected; the cashier may untick some."""

    mode = SelectionMode.ALL

    def validate(self, assignment, selection):
        if assignment.is_required and not selection.chosen_options:
            raise OrderValidationError(
                f"At least one option required for {assignment.variant.name}"
            )


# ============================================================================
# VARIANT PRICING
# ============================================================================

class VariantPricingService:
    """
    Prices order lines from the catalog. Selections are always rebuilt from
    catalog options so stored modifiers come from the menu, not the client.
    """

    STRATEGIES = {
        SelectionMode.SINGLE: SingleSelectionStrategy(),
        SelectionMode.MULTIPLE: MultipleSelectionStrategy(),
        SelectionMode.ALL: AllSelectionStrategy(),
    }

    @classmethod
    def strategy_for(cls, mode) -> BaseSelectionStrategy:
        try:
            return cls.STRATEGIES[SelectionMode(mode)]
        except (KeyError, ValueError):
            raise OrderValidationError(f"Unsupported selection mode '{mode}'")

    @classmethod
    def resolve_selections(cls, assignments: Sequence, raw_selections: Optional[List[Dict]]) -> List[VariantSelection]:
        """
        Turns client input ``{"variant_id", "option_id" | "option_ids"}`` into
        catalog-backed selections. Input for variants the item does not carry
        is dropped.
        """
        raw_by_variant = {
            str(raw.get("variant_id")): raw for raw in raw_selections or [] if raw.get("variant_id") is not None
        }
        selections = []
        for assignment in assignments:
            raw = raw_by_variant.get(str(assignment.variant_id))
            if raw is None:
                continue
            offered = {
                str(option.id): option
                for option in CatalogResolver.get_variant_options(
                    assignment.variant_id, assignment.offered_option_ids()
                )
            }
            strategy = cls.strategy_for(assignment.selection_mode)
            selections.append(strategy.build(assignment, raw, offered))
        return selections

    @classmethod
    def validate_selections(cls, assignments: Sequence, selections: List[VariantSelection]) -> None:
        """
        Raises OrderValidationError naming the first variant whose selection
        breaks its required/mode rule.
        """
        by_variant = {selection.variant_id: selection for selection in selections}
        for assignment in assignments:
            selection = by_variant.get(str(assignment.variant_id))
            if selection is None:
                if assignment.is_required:
                    raise OrderValidationError(f"{assignment.variant.name} is required")
                continue
            cls.strategy_for(assignment.selection_mode).validate(assignment, selection)

    @staticmethod
    def calculate_unit_price(base_price, selections: List[VariantSelection]) -> Decimal:
        """
        Base price plus the modifier of every chosen option, summed in minor units.
        """
        currency = settings.CURRENCY
        amounts = [Decimal(str(base_price))]
        for selection in selections:
            amounts.extend(option.price_modifier for option in selection.chosen_options)

        if any(not amount.is_finite() for amount in amounts):
            raise PriceCalculationError()

        total_minor = sum(to_minor(currency, amount) for amount in amounts)
        if total_minor < 0:
            raise PriceCalculationError()
        return from_minor(currency, total_minor)

    @classmethod
    def price_menu_item(cls, menu_item: MenuItem, raw_selections) -> Tuple[Decimal, List[VariantSelection]]:
        assignments = list(menu_item.variant_links.all())
        selections = cls.resolve_selections(assignments, raw_selections)
        cls.validate_selections(assignments, selections)
        unit_price = cls.calculate_unit_price(menu_item.price, selections)
        logger.debug(
            "Priced menu_item=%s base=%s unit=%s selections=%d",
            menu_item.id,
            menu_item.price,
            unit_price,
            len(selections),
        )
        return unit_price, selections

    @classmethod
    def price_deal(cls, deal: Deal, raw_selections, raw_breakdown) -> Tuple[Decimal, List[VariantSelection], List[Dict]]:
        """
        Deals sell at their own price. The breakdown lists each bundled item
        with its variant choices for the kitchen and does not affect price.
        """
        assignments = list(deal.variant_links.all())
        selections = cls.resolve_selections(assignments, raw_selections)
        cls.validate_selections(assignments, selections)

        raw_by_item = {
            str(entry.get("menu_item_id")): entry for entry in raw_breakdown or []
        }
        breakdown = []
        for deal_item in deal.items.all():
            menu_item = deal_item.menu_item
            raw_entry = raw_by_item.get(str(menu_item.id), {})
            item_assignments = list(menu_item.variant_links.all())
            item_selections = cls.resolve_selections(
                item_assignments, raw_entry.get("selected_variants")
            )
            if deal_item.requires_variant_selection:
                cls.validate_selections(item_assignments, item_selections)
            breakdown.append(
                {
                    "menu_item_id": str(menu_item.id),
                    "menu_item_name": menu_item.name,
                    "quantity": deal_item.quantity,
                    "selected_variants": selections_to_json(item_selections),
                }
            )

        unit_price = cls.calculate_unit_price(deal.price, [])
        return unit_price, selections, breakdown
