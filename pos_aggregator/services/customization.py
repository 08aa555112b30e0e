"""
Customization rules: default modifier resolution, selection bounds, unit
pricing and the human-readable customization line shown on cart items.
"""
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence
from pos_aggregator.models.menu_models import MenuItem, MenuItemModifierList

Selections = Dict[str, List[str]]


def default_modifier_ids(modifier_list: MenuItemModifierList) -> List[str]:
    """Initial selection for one list.

    Flagged defaults win. Otherwise the first modifier is preselected for
    single-select lists, and for multi-select lists that require at least
    one choice. Anything else starts empty.
    """
    defaults = [m.id for m in modifier_list.default_modifiers]
    if defaults or not modifier_list.modifiers:
        return defaults

    first = modifier_list.modifiers[0].id
    if modifier_list.is_single_selection or modifier_list.max_selections == 1:
        return [first]
    if modifier_list.min_selections > 0:
        return [first]
    return []


def default_modifier_selections(item: MenuItem) -> Selections:
    return {ml.id: default_modifier_ids(ml) for ml in item.modifier_lists}


def toggle_modifier(modifier_list: MenuItemModifierList, selected: Sequence[str], modifier_id: str) -> List[str]:
    """Flip ``modifier_id`` in ``selected`` within the list's bounds.

    Deselecting at the minimum and selecting at the maximum are no-ops.
    """
    current = list(selected)
    if modifier_id in current:
        if len(current) > modifier_list.min_selections:
            current.remove(modifier_id)
        return current

    if modifier_list.find_modifier(modifier_id) is None:
        return current
    if modifier_list.allows_more(len(current)):
        current.append(modifier_id)
    return current


def choose_single_modifier(modifier_list: MenuItemModifierList, modifier_id: str) -> List[str]:
    """Radio-style choice for single-select lists: replaces the current pick."""
    if modifier_list.find_modifier(modifier_id) is None:
        return []
    return [modifier_id]


def normalize_selections(selections: Optional[Mapping[str, Sequence[str]]]) -> Selections:
    """Canonical form used for line identity: sorted ids, empty lists dropped."""
    return {
        list_id: sorted(set(ids))
        for list_id, ids in sorted((selections or {}).items())
        if ids
    }


def validate_selections(item: MenuItem, selections: Mapping[str, Sequence[str]]) -> List[str]:
    """Describe every list whose selection count falls outside its bounds."""
    problems = []
    for modifier_list in item.modifier_lists:
        count = len(set(selections.get(modifier_list.id, [])))
        if count < modifier_list.min_selections:
            problems.append(f"{modifier_list.name}: select at least {modifier_list.min_selections}")
        elif not modifier_list.is_unbounded and count > modifier_list.max_selections:
            problems.append(f"{modifier_list.name}: select at most {modifier_list.max_selections}")
    return problems


def selection_requirement_text(modifier_list: MenuItemModifierList) -> str:
    low, high = modifier_list.min_selections, modifier_list.max_selections
    if low > 0 and (high > 1 or modifier_list.is_unbounded):
        if modifier_list.is_unbounded:
            return f"Select at least {low}"
        if low == high:
            return f"Select {low}"
        return f"Select {low}-{high}"
    if low > 0:
        return f"Select at least {low}"
    if high > 1:
        return f"Select up to {high}"
    return ""


def resolve_unit_price(
    item: MenuItem,
    variation_id: Optional[str] = None,
    selections: Optional[Mapping[str, Sequence[str]]] = None,
) -> Decimal:
    """Variation price (absolute) or item price, plus every selected modifier's delta."""
    variation = item.find_variation(variation_id) if variation_id else None
    price = variation.price if variation else item.base_price

    for list_id, modifier_ids in (selections or {}).items():
        modifier_list = item.find_modifier_list(list_id)
        if modifier_list is None:
            continue
        for modifier_id in set(modifier_ids):
            modifier = modifier_list.find_modifier(modifier_id)
            if modifier is not None:
                price += modifier.price
    return price


def build_customization_description(
    item: MenuItem,
    variation_id: Optional[str] = None,
    selections: Optional[Mapping[str, Sequence[str]]] = None,
) -> Optional[str]:
    """``Size: Large | Milk: Oat Milk`` style summary. Default modifiers are omitted."""
    parts = []
    if item.variations:
        variation = (item.find_variation(variation_id) if variation_id else None) or item.default_variation
        parts.append(f"Size: {variation.name}")

    for modifier_list in item.modifier_lists:
        chosen = set((selections or {}).get(modifier_list.id, []))
        names = [m.name for m in modifier_list.modifiers if m.id in chosen and not m.is_default]
        if names:
            parts.append(f"{modifier_list.name}: {', '.join(names)}")

    return " | ".join(parts) or None
