"""Tests for specforge.casing -- casing predicates and suggestions."""

from __future__ import annotations

import pytest

from specforge.casing import (
    detect_casing_style,
    is_camel_case,
    is_kebab_case,
    is_pascal_case,
    is_snake_case,
    is_upper_snake_case,
    is_valid_operation_id_casing,
    suggest_camel_case,
    suggest_kebab_case,
    suggest_pascal_case,
    to_pascal_case,
)


class TestPredicates:
    """Casing predicates."""

    @pytest.mark.parametrize("value", ["getPetById", "pets", "v2Items"])
    def test_camel_case(self, value: str) -> None:
        assert is_camel_case(value)

    @pytest.mark.parametrize("value", ["GetPet", "get_pet", "get-pet", "", None])
    def test_not_camel_case(self, value: str) -> None:
        assert not is_camel_case(value)

    def test_pascal_case(self) -> None:
        assert is_pascal_case("PetStore")
        assert not is_pascal_case("petStore")
        assert not is_pascal_case("Pet_Store")

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("pet-store", True),
            ("pet-store-2", True),
            ("pet", True),
            ("pet--store", False),
            ("pet-", False),
            ("pet-Store", False),
            ("-pet", False),
        ],
    )
    def test_kebab_case(self, value: str, expected: bool) -> None:
        assert is_kebab_case(value) is expected

    def test_snake_case(self) -> None:
        assert is_snake_case("pet_store")
        assert not is_snake_case("pet__store")
        assert not is_snake_case("Pet_store")

    def test_upper_snake_case(self) -> None:
        assert is_upper_snake_case("NOT_FOUND_2")
        assert not is_upper_snake_case("Not_Found")

    def test_operation_id_casing(self) -> None:
        assert is_valid_operation_id_casing("listPets")
        assert is_valid_operation_id_casing("list-pets")
        assert not is_valid_operation_id_casing("ListPets")
        assert not is_valid_operation_id_casing("list_pets")


class TestDetectCasingStyle:
    """Human-readable style names."""

    @pytest.mark.parametrize(
        ("value", "style"),
        [
            ("getPet", "camelCase"),
            ("pet-store", "kebab-case"),
            ("PetStore", "PascalCase"),
            ("pet_store", "snake_case"),
            ("NOT_FOUND", "UPPER_SNAKE_CASE"),
            ("Pet-Store", "mixed (contains hyphens)"),
            ("Pet_Store", "mixed (contains underscores)"),
            ("", "empty"),
        ],
    )
    def test_styles(self, value: str, style: str) -> None:
        assert detect_casing_style(value) == style


class TestSuggestions:
    """Rewrites offered in diagnostics."""

    def test_suggest_camel_case(self) -> None:
        assert suggest_camel_case("Get-Pet_by id") == "getPetById"
        assert suggest_camel_case("PetStore") == "petStore"

    def test_suggest_pascal_case(self) -> None:
        assert suggest_pascal_case("pet_store") == "PetStore"
        assert suggest_pascal_case("petStore") == "PetStore"
        assert suggest_pascal_case("PET_STORE") == "PetStore"

    def test_suggest_kebab_case(self) -> None:
        assert suggest_kebab_case("PetStore") == "pet-store"
        assert suggest_kebab_case("pet_store") == "pet-store"

    def test_empty_input(self) -> None:
        assert suggest_camel_case("") == ""
        assert suggest_pascal_case("") == ""
        assert suggest_kebab_case("") == ""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("user-profiles", "UserProfiles"), ("orderItems", "OrderItems"), ("v2/items", "V2Items")],
    )
    def test_to_pascal_case(self, value: str, expected: str) -> None:
        assert to_pascal_case(value) == expected
