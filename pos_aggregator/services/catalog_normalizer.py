"""
Catalog Normalizer: converts vendor catalog payloads into MenuCategory lists.

Both vendors follow the same shape:
    1. build a modifier-list lookup keyed by vendor group id
    2. walk vendor categories in vendor order and claim member items
    3. unclaimed items land in a synthetic "Other" category
    4. categories are sorted by name; items keep vendor order

The functions are pure so the same payload always yields the same menu.
"""
from typing import Dict, Iterable, List, Optional
from pos_aggregator.models.clover_schemas import CloverCategory, CloverItem, CloverModifierGroup
from pos_aggregator.models.menu_models import (
    UNBOUNDED,
    MenuCategory,
    MenuItem,
    MenuItemModifier,
    MenuItemModifierList,
    MenuItemVariation,
    SelectionType,
    money_from_cents,
)
from pos_aggregator.models.square_schemas import (
    SquareCatalogObject,
    SquareModifierListData,
    SquareModifierListInfo,
)
import logging

logger = logging.getLogger(__name__)

OTHER_CATEGORY = "Other"


def _assemble_categories(
    categories: Iterable[tuple],
    items: List[tuple],
) -> List[MenuCategory]:
    """Group ``(item_id, category_ids, MenuItem)`` tuples under ``(category_id, name)`` pairs."""
    claimed = set()
    menu: List[MenuCategory] = []

    for category_id, category_name in categories:
        members = []
        for item_id, category_ids, menu_item in items:
            if category_id in category_ids:
                claimed.add(item_id)
                members.append(menu_item)
        if members:
            menu.append(MenuCategory(name=category_name, items=members))

    leftovers = [menu_item for item_id, _, menu_item in items if item_id not in claimed]
    if leftovers:
        menu.append(MenuCategory(name=OTHER_CATEGORY, items=leftovers))

    return sorted(menu, key=lambda c: c.name)


def _resolve_bounds(
    base_min: int,
    base_max: int,
    min_override: Optional[int],
    max_override: Optional[int],
) -> tuple:
    """Apply min/max overrides on top of inherited bounds. Negative max means unbounded."""
    min_selections = base_min
    if min_override is not None and min_override >= 0:
        min_selections = min_override

    max_selections = base_max
    if max_override is not None:
        max_selections = UNBOUNDED if max_override < 0 else max_override

    if max_selections != UNBOUNDED and max_selections < min_selections:
        max_selections = min_selections
    return min_selections, max_selections


# --- Square ---

def _square_list_bounds(data: SquareModifierListData, selection_type: SelectionType) -> tuple:
    default_max = 1 if selection_type == SelectionType.SINGLE else UNBOUNDED
    return _resolve_bounds(0, default_max, data.min_selected_modifiers, data.max_selected_modifiers)


def build_square_modifier_lists(objects: Iterable[SquareCatalogObject]) -> Dict[str, MenuItemModifierList]:
    mapping: Dict[str, MenuItemModifierList] = {}

    for obj in objects:
        if obj.type != "MODIFIER_LIST" or obj.is_deleted or not obj.modifier_list_data:
            continue
        data = obj.modifier_list_data

        try:
            selection_type = SelectionType((data.selection_type or "SINGLE").upper())
        except ValueError:
            selection_type = SelectionType.SINGLE

        modifiers = []
        ordered = sorted(
            (m for m in data.modifiers or [] if m.modifier_data and not m.is_deleted),
            key=lambda m: m.modifier_data.ordinal or 0,
        )
        for modifier in ordered:
            modifier_data = modifier.modifier_data
            if modifier_data.hidden_online:
                continue
            modifiers.append(
                MenuItemModifier(
                    id=modifier.id,
                    name=modifier_data.name or "",
                    price=money_from_cents(modifier_data.price_money.amount if modifier_data.price_money else 0),
                    is_default=bool(modifier_data.on_by_default),
                )
            )

        min_selections, max_selections = _square_list_bounds(data, selection_type)
        mapping[obj.id] = MenuItemModifierList(
            id=obj.id,
            name=data.name or "",
            selection_type=selection_type,
            min_selections=min_selections,
            max_selections=max_selections,
            modifiers=modifiers,
        )

    return mapping


def _square_item_modifier_lists(
    infos: Optional[List[SquareModifierListInfo]],
    lookup: Dict[str, MenuItemModifierList],
) -> List[MenuItemModifierList]:
    result = []
    for info in infos or []:
        if info.enabled is False or info.hidden_from_customer:
            continue
        base = lookup.get(info.modifier_list_id)
        if base is None or not base.modifiers:
            continue
        min_selections, max_selections = _resolve_bounds(
            base.min_selections, base.max_selections, info.min_selected_modifiers, info.max_selected_modifiers
        )
        result.append(base.model_copy(update={"min_selections": min_selections, "max_selections": max_selections}))
    return result


def _square_variations(obj: SquareCatalogObject) -> List[MenuItemVariation]:
    variations = [
        MenuItemVariation(
            id=v.id,
            name=v.item_variation_data.name or "Size",
            price=money_from_cents(v.item_variation_data.price_money.amount if v.item_variation_data.price_money else 0),
            ordinal=v.item_variation_data.ordinal or 0,
        )
        for v in obj.item_data.variations or []
        if v.item_variation_data and not v.is_deleted
    ]
    return sorted(variations, key=lambda v: v.ordinal)


def normalize_square_catalog(objects: Iterable[SquareCatalogObject]) -> List[MenuCategory]:
    """Build the unified menu from Square catalog objects (primary + related)."""
    by_id: Dict[str, SquareCatalogObject] = {}
    for obj in objects:
        by_id.setdefault(obj.id, obj)
    catalog = list(by_id.values())

    images = {
        obj.id: obj.image_data.url
        for obj in catalog
        if obj.type == "IMAGE" and obj.image_data and obj.image_data.url
    }
    modifier_lists = build_square_modifier_lists(catalog)

    categories = [
        (obj.id, obj.category_data.name or "")
        for obj in catalog
        if obj.type == "CATEGORY" and obj.category_data and not obj.is_deleted
    ]

    items = []
    for obj in catalog:
        if obj.type != "ITEM" or obj.is_deleted or not obj.item_data or obj.item_data.is_archived:
            continue
        data = obj.item_data
        variations = _square_variations(obj)
        image_url = next((images[i] for i in data.image_ids or [] if i in images), None)
        menu_item = MenuItem(
            id=obj.id,
            name=data.name or "",
            description=data.description,
            price=variations[0].price if variations else money_from_cents(0),
            variations=variations or None,
            modifier_lists=_square_item_modifier_lists(data.modifier_list_info, modifier_lists),
            image_url=image_url,
        )
        items.append((obj.id, data.category_ids(), menu_item))

    menu = _assemble_categories(categories, items)
    logger.debug(f"Normalized Square catalog: {len(menu)} categories, {len(items)} items")
    return menu


# --- Clover ---

def build_clover_modifier_lists(groups: Iterable[CloverModifierGroup]) -> Dict[str, MenuItemModifierList]:
    mapping: Dict[str, MenuItemModifierList] = {}

    for group in groups:
        modifiers = [
            MenuItemModifier(id=m.id, name=m.name or "", price=money_from_cents(m.price))
            for m in (group.modifiers.elements or [] if group.modifiers else [])
            if m.available is not False
        ]
        max_allowed = group.maxAllowed if group.maxAllowed is not None else 1
        min_required = max(group.minRequired or 0, 0)
        if max_allowed < 0:
            max_allowed = UNBOUNDED
        elif max_allowed < min_required:
            max_allowed = min_required

        mapping[group.id] = MenuItemModifierList(
            id=group.id,
            name=group.name or "",
            selection_type=SelectionType.MULTIPLE if max_allowed == UNBOUNDED or max_allowed > 1 else SelectionType.SINGLE,
            min_selections=min_required,
            max_selections=max_allowed,
            modifiers=modifiers,
        )

    return mapping


def normalize_clover_catalog(
    categories: Iterable[CloverCategory],
    items: Iterable[CloverItem],
    modifier_groups: Iterable[CloverModifierGroup],
) -> List[MenuCategory]:
    """Build the unified menu from the three Clover inventory listings.

    Clover items carry a single price and no size variations.
    """
    lookup = build_clover_modifier_lists(modifier_groups)

    menu_items = []
    for item in items:
        if item.hidden:
            continue
        modifier_lists = [
            lookup[group_id]
            for group_id in item.modifier_group_ids()
            if group_id in lookup and lookup[group_id].modifiers
        ]
        menu_item = MenuItem(
            id=item.id,
            name=item.name or "",
            price=money_from_cents(item.price),
            variations=None,
            modifier_lists=modifier_lists,
        )
        menu_items.append((item.id, item.category_ids(), menu_item))

    menu = _assemble_categories(((c.id, c.name or "") for c in categories), menu_items)
    logger.debug(f"Normalized Clover catalog: {len(menu)} categories, {len(menu_items)} items")
    return menu
