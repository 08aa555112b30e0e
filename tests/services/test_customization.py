from decimal import Decimal
from pos_aggregator.models.menu_models import MenuItemModifier, MenuItemModifierList, SelectionType
from pos_aggregator.services.customization import (
    build_customization_description,
    choose_single_modifier,
    default_modifier_ids,
    default_modifier_selections,
    normalize_selections,
    resolve_unit_price,
    selection_requirement_text,
    toggle_modifier,
    validate_selections,
)


def test_unit_price_adds_modifier_deltas(latte):
    selections = {"milk": ["oat"], "syrup": ["vanilla"]}
    # Small 3.50 + oat 0.50 + vanilla 0.75
    assert resolve_unit_price(latte, "small", selections) == Decimal("4.75")
    assert resolve_unit_price(latte, "small", selections) * 3 == Decimal("14.25")


def test_unit_price_variation_is_absolute(latte):
    assert resolve_unit_price(latte, "large") == Decimal("4.25")
    assert resolve_unit_price(latte) == Decimal("3.50")


def test_unit_price_ignores_unknown_ids(latte):
    assert resolve_unit_price(latte, "small", {"milk": ["almond"], "nope": ["x"]}) == Decimal("3.50")


def test_defaults_prefer_flagged_modifiers(milk_list, syrup_list):
    assert default_modifier_ids(milk_list) == ["whole"]
    assert default_modifier_ids(syrup_list) == []


def test_defaults_preselect_first_when_required():
    required = MenuItemModifierList(
        id="shots",
        name="Shots",
        selection_type=SelectionType.MULTIPLE,
        min_selections=1,
        max_selections=3,
        modifiers=[MenuItemModifier(id="single", name="Single"), MenuItemModifier(id="double", name="Double")],
    )
    single = required.model_copy(update={"selection_type": SelectionType.SINGLE, "min_selections": 0, "max_selections": 1})

    assert default_modifier_ids(required) == ["single"]
    assert default_modifier_ids(single) == ["single"]


def test_default_selections_per_item(latte):
    assert default_modifier_selections(latte) == {"milk": ["whole"], "syrup": []}


def test_toggle_respects_min(milk_list):
    assert toggle_modifier(milk_list, ["whole"], "whole") == ["whole"]


def test_toggle_respects_max(milk_list):
    assert toggle_modifier(milk_list, ["whole"], "oat") == ["whole"]
    assert choose_single_modifier(milk_list, "oat") == ["oat"]
    assert choose_single_modifier(milk_list, "almond") == []


def test_toggle_unbounded(syrup_list):
    selected = toggle_modifier(syrup_list, [], "vanilla")
    selected = toggle_modifier(syrup_list, selected, "caramel")
    assert selected == ["vanilla", "caramel"]
    assert toggle_modifier(syrup_list, selected, "vanilla") == ["caramel"]
    assert toggle_modifier(syrup_list, selected, "unknown") == selected


def test_normalize_selections():
    assert normalize_selections({"b": ["y", "x", "x"], "a": [], "c": ["z"]}) == {"b": ["x", "y"], "c": ["z"]}
    assert normalize_selections(None) == {}


def test_validate_selections(latte):
    assert validate_selections(latte, {"milk": ["whole"]}) == []
    assert validate_selections(latte, {}) == ["Milk: select at least 1"]
    assert validate_selections(latte, {"milk": ["whole", "oat"]}) == ["Milk: select at most 1"]


def test_selection_requirement_text(milk_list, syrup_list):
    assert selection_requirement_text(milk_list) == "Select at least 1"
    assert selection_requirement_text(syrup_list) == ""
    ranged = syrup_list.model_copy(update={"min_selections": 1, "max_selections": 2})
    assert selection_requirement_text(ranged) == "Select 1-2"
    capped = syrup_list.model_copy(update={"max_selections": 3})
    assert selection_requirement_text(capped) == "Select up to 3"


def test_customization_description(latte, cookie):
    assert build_customization_description(latte, "large", {"milk": ["oat"], "syrup": ["vanilla", "caramel"]}) == (
        "Size: Large | Milk: Oat Milk | Syrup: Vanilla, Caramel"
    )
    # Default modifiers are omitted; size falls back to the default variation
    assert build_customization_description(latte, None, {"milk": ["whole"]}) == "Size: Small"
    assert build_customization_description(cookie) is None
