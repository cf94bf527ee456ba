"""
Variant selection records stored on order lines.

A selection is either a ``SingleSelection`` (one option, ``single`` mode) or a
``MultiSelection`` (zero or more options, ``multiple`` or ``all`` mode). Both
serialize to the JSON shape kept in ``OrderItem.selected_variants``.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple, Union

from core_backend.exceptions import OrderValidationError
from .models import SelectionMode


def _to_decimal(value) -> Decimal:
    try:
        return Decimal(str(value if value is not None else "0"))
    except (InvalidOperation, ValueError):
        raise OrderValidationError(f"Invalid price modifier: {value!r}")


@dataclass(frozen=True)
class SelectedOption:
    option_id: str
    option_name: str
    price_modifier: Decimal = Decimal("0")

    def to_dict(self) -> Dict:
        return {
            "option_id": self.option_id,
            "option_name": self.option_name,
            "price_modifier": str(self.price_modifier),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "SelectedOption":
        return cls(
            option_id=str(data.get("option_id") or ""),
            option_name=data.get("option_name") or "",
            price_modifier=_to_decimal(data.get("price_modifier")),
        )


@dataclass(frozen=True)
class SingleSelection:
    variant_id: str
    variant_name: str
    option: Optional[SelectedOption] = None

    selection_mode = SelectionMode.SINGLE

    @property
    def option_id(self) -> Optional[str]:
        return self.option.option_id if self.option else None

    @property
    def chosen_options(self) -> Tuple[SelectedOption, ...]:
        return (self.option,) if self.option else ()

    def to_dict(self) -> Dict:
        data = {
            "variant_id": self.variant_id,
            "variant_name": self.variant_name,
            "selection_mode": self.selection_mode.value,
            "option_id": None,
            "option_name": "",
            "price_modifier": "0",
        }
        if self.option:
            data.update(self.option.to_dict())
        return data


@dataclass(frozen=True)
class MultiSelection:
    variant_id: str
    variant_name: str
    selection_mode: SelectionMode = SelectionMode.MULTIPLE
    options: Tuple[SelectedOption, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.selection_mode not in (SelectionMode.MULTIPLE, SelectionMode.ALL):
            raise OrderValidationError(
                f"MultiSelection cannot use selection mode '{self.selection_mode}'"
            )

    @property
    def chosen_options(self) -> Tuple[SelectedOption, ...]:
        return self.options

    def to_dict(self) -> Dict:
        return {
            "variant_id": self.variant_id,
            "variant_name": self.variant_name,
            "selection_mode": SelectionMode(self.selection_mode).value,
            "selected_options": [option.to_dict() for option in self.options],
        }


VariantSelection = Union[SingleSelection, MultiSelection]


def selection_from_dict(data: Dict) -> VariantSelection:
    """Rebuilds a stored selection; the ``selection_mode`` tag picks the type."""
    try:
        mode = SelectionMode(data.get("selection_mode") or SelectionMode.SINGLE)
    except ValueError:
        raise OrderValidationError(
            f"Unknown selection mode '{data.get('selection_mode')}'"
        )

    variant_id = str(data.get("variant_id") or "")
    variant_name = data.get("variant_name") or ""

    if mode == SelectionMode.SINGLE:
        option = None
        if data.get("option_id"):
            option = SelectedOption.from_dict(data)
        return SingleSelection(variant_id=variant_id, variant_name=variant_name, option=option)

    return MultiSelection(
        variant_id=variant_id,
        variant_name=variant_name,
        selection_mode=mode,
        options=tuple(
            SelectedOption.from_dict(option) for option in data.get("selected_options") or []
        ),
    )


def selections_to_json(selections: List[VariantSelection]) -> List[Dict]:
    return [selection.to_dict() for selection in selections]


def selections_from_json(data: Optional[List[Dict]]) -> List[VariantSelection]:
    return [selection_from_dict(item) for item in data or []]
