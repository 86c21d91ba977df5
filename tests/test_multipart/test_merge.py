"""Tests for specforge.multipart.merge -- section folding and part hygiene."""

from __future__ import annotations

import textwrap

import pytest

from specforge import rules
from specforge.models import MergeResult, MergeStrategy, MultiPartConfiguration, SpecificationFile
from specforge.multipart import merge_specifications, validate_part_file
from specforge.parser import specification_from_content


def _spec(name: str, text: str) -> SpecificationFile:
    return specification_from_content(name, textwrap.dedent(text), base_name="Shop")


BASE = """\
    openapi: 3.0.3
    info:
      title: Shop
      version: 1.0.0
    x-multipart:
      discovery: auto
    tags:
      - name: Users
    paths:
      /users:
        get:
          operationId: listUsers
          responses:
            '200':
              description: OK
    components:
      securitySchemes:
        apiKey:
          type: apiKey
          in: header
          name: X-Key
      schemas:
        User:
          type: object
"""


def _rule_ids(result: MergeResult) -> list[str]:
    return [d.rule_id for d in result.diagnostics]


class TestMergeBasics:
    """Folding of paths, components, and tags."""

    def test_no_parts_returns_base(self) -> None:
        base = _spec("Shop.yaml", BASE)
        result = merge_specifications(base, [])
        assert result.is_success
        assert not result.is_multi_part
        assert result.document == base.document

    def test_unparsed_base_fails(self) -> None:
        base = _spec("Shop.yaml", "key: [broken\n")
        result = merge_specifications(base, [])
        assert result.document is None
        assert _rule_ids(result) == [rules.PARSING_ERROR]

    def test_parts_are_folded_in_order(self) -> None:
        base = _spec("Shop.yaml", BASE)
        orders = _spec("Shop_Orders.yaml", """\
            paths:
              /orders:
                get:
                  operationId: listOrders
                  responses:
                    '200':
                      description: OK
            components:
              schemas:
                Order:
                  type: object
                  properties:
                    user:
                      $ref: '#/components/schemas/User'
              parameters:
                Limit:
                  name: limit
                  in: query
        """)
        result = merge_specifications(base, [orders])
        assert result.is_success
        doc = result.document
        assert list(doc.paths) == ["/users", "/orders"]
        assert list(doc.schemas) == ["User", "Order"]
        assert list(doc.parameters) == ["Limit"]
        assert "apiKey" in doc.security_schemes
        assert "x-multipart" not in doc.raw
        assert _rule_ids(result) == [rules.MULTI_PART_MERGE_SUCCESSFUL]
        assert result.diagnostics[0].message == "Successfully merged 1 part file(s) with base file"

    def test_part_info_servers_and_security_are_ignored(self) -> None:
        base = _spec("Shop.yaml", BASE)
        part = _spec("Shop_Extra.yaml", """\
            info:
              title: Extra
              version: 9.9.9
            servers:
              - url: https://other.example.com
            security:
              - other: []
            components:
              securitySchemes:
                other:
                  type: http
                  scheme: basic
        """)
        result = merge_specifications(base, [part])
        doc = result.document
        assert doc.info["version"] == "1.0.0"
        assert doc.servers == []
        assert doc.security is None
        assert list(doc.security_schemes) == ["apiKey"]
        assert _rule_ids(result) == [
            rules.PART_FILE_HAS_INFO_VERSION,
            rules.PART_FILE_CONTAINS_PROHIBITED_SECTION,
            rules.PART_FILE_CONTAINS_PROHIBITED_SECTION,
            rules.MULTI_PART_MERGE_SUCCESSFUL,
        ]

    def test_unparsed_part_is_reported(self) -> None:
        base = _spec("Shop.yaml", BASE)
        broken = _spec("Shop_Broken.yaml", "paths: [unclosed\n")
        result = merge_specifications(base, [broken])
        assert not result.is_success
        assert rules.PARSING_ERROR in _rule_ids(result)
        assert result.part_files == []

    def test_unresolved_reference_after_merge(self) -> None:
        base = _spec("Shop.yaml", BASE)
        part = _spec("Shop_Orders.yaml", """\
            components:
              schemas:
                Order:
                  properties:
                    item:
                      $ref: '#/components/schemas/Item'
                    again:
                      $ref: '#/components/schemas/Item'
        """)
        result = merge_specifications(base, [part])
        warnings = [d for d in result.diagnostics if d.rule_id == rules.UNRESOLVED_REFERENCE_AFTER_MERGE]
        assert len(warnings) == 1
        assert "#/components/schemas/Item" in warnings[0].message
        assert result.is_success

    def test_empty_components_in_base(self) -> None:
        base = _spec("Shop.yaml", "openapi: 3.0.3\ninfo:\n  title: Shop\npaths: {}\ncomponents:\n")
        part = _spec("Shop_Orders.yaml", """\
            components:
              schemas:
                Order:
                  type: object
        """)
        assert base.document.raw["components"] is None
        result = merge_specifications(base, [part])
        assert result.is_success
        assert list(result.document.schemas) == ["Order"]


class TestMergeStrategies:
    """Per-section conflict policies."""

    DUPLICATE_PATH = """\
        paths:
          /users:
            post:
              operationId: createUser
              responses:
                '201':
                  description: Created
    """

    def test_error_on_duplicate_path(self) -> None:
        base = _spec("Shop.yaml", BASE)
        part = _spec("Shop_Users.yaml", self.DUPLICATE_PATH)
        result = merge_specifications(base, [part])
        assert not result.is_success
        assert _rule_ids(result) == [rules.DUPLICATE_PATH_IN_PART]
        assert result.diagnostics[0].file_path == "Shop_Users.yaml"
        assert "/users" not in result.document.paths

    def test_duplicate_reported_once(self) -> None:
        base = _spec("Shop.yaml", BASE)
        first = _spec("Shop_A.yaml", self.DUPLICATE_PATH)
        second = _spec("Shop_B.yaml", self.DUPLICATE_PATH)
        result = merge_specifications(base, [first, second])
        assert _rule_ids(result).count(rules.DUPLICATE_PATH_IN_PART) == 1

    def test_append_unique_unions_methods(self) -> None:
        base = _spec("Shop.yaml", BASE)
        part = _spec("Shop_Users.yaml", self.DUPLICATE_PATH)
        config = MultiPartConfiguration(paths_merge_strategy=MergeStrategy.APPEND_UNIQUE)
        result = merge_specifications(base, [part], config)
        assert result.is_success
        assert list(result.document.paths["/users"]) == ["get", "post"]

    @pytest.mark.parametrize(
        ("strategy", "expected"),
        [(MergeStrategy.FIRST_WINS, "string"), (MergeStrategy.LAST_WINS, "integer")],
    )
    def test_first_and_last_wins(self, strategy: MergeStrategy, expected: str) -> None:
        base = _spec("Shop.yaml", BASE)
        a = _spec("Shop_A.yaml", "components:\n  schemas:\n    Id:\n      type: string\n")
        b = _spec("Shop_B.yaml", "components:\n  schemas:\n    Id:\n      type: integer\n")
        config = MultiPartConfiguration(schemas_merge_strategy=strategy)
        result = merge_specifications(base, [a, b], config)
        assert result.is_success
        assert result.document.schemas["Id"]["type"] == expected

    def test_merge_if_identical(self) -> None:
        base = _spec("Shop.yaml", BASE)
        same = _spec("Shop_Same.yaml", "components:\n  schemas:\n    User:\n      type: object\n")
        different = _spec("Shop_Diff.yaml", "components:\n  schemas:\n    User:\n      type: string\n")
        config = MultiPartConfiguration(schemas_merge_strategy=MergeStrategy.MERGE_IF_IDENTICAL)

        assert merge_specifications(base, [same], config).is_success
        result = merge_specifications(base, [different], config)
        assert _rule_ids(result) == [rules.DUPLICATE_SCHEMA_IN_PART]
        assert "different definition" in result.diagnostics[0].message

    def test_parameters_default_to_merge_if_identical(self) -> None:
        base = _spec("Shop.yaml", BASE)
        param = "components:\n  parameters:\n    Limit:\n      name: limit\n      in: query\n"
        a = _spec("Shop_A.yaml", param)
        b = _spec("Shop_B.yaml", param)
        result = merge_specifications(base, [a, b])
        assert result.is_success
        assert list(result.document.parameters) == ["Limit"]

    def test_tags_unique_case_insensitively(self) -> None:
        base = _spec("Shop.yaml", BASE)
        part = _spec("Shop_Orders.yaml", "tags:\n  - name: users\n  - name: Orders\n")
        result = merge_specifications(base, [part])
        assert result.document.tag_names == ["Users", "Orders"]

    def test_tag_conflict_with_error_strategy(self) -> None:
        base = _spec("Shop.yaml", BASE)
        part = _spec("Shop_Orders.yaml", "tags:\n  - name: users\n    description: dup\n")
        config = MultiPartConfiguration(tags_merge_strategy=MergeStrategy.ERROR_ON_DUPLICATE)
        result = merge_specifications(base, [part], config)
        assert _rule_ids(result) == [rules.DUPLICATE_TAG_IN_PART]
        assert result.document.tag_names == []


class TestValidatePartFile:
    """Warnings for sections only the base file may declare."""

    def test_clean_part(self) -> None:
        part = _spec("Shop_Orders.yaml", "info:\n  title: Orders\npaths: {}\n")
        assert validate_part_file(part) == []

    def test_unparsed_part(self) -> None:
        part = _spec("Shop_Orders.yaml", "paths: [\n")
        assert validate_part_file(part) == []
