"""Tests for source file lookup."""

from __future__ import annotations

from pathlib import Path

from testgen.source import SourceLocator, split_class_name
from testgen.source.locator import declares_package


def test_find_source_uses_package_path(write_sources) -> None:
    root = write_sources(
        {
            "com/acme/PaymentService.java": """
                package com.acme;

                public class PaymentService {}
            """,
        }
    )

    text = SourceLocator().find_source("com.acme.PaymentService", root)
    assert text.startswith("package com.acme;")


def test_find_source_searches_tree_for_matching_package(write_sources) -> None:
    root = write_sources(
        {
            "legacy/PaymentService.java": """
                package org.other;

                public class PaymentService {}
            """,
            "moved/PaymentService.java": """
                package com.acme;

                public class PaymentService { int marker; }
            """,
        }
    )

    text = SourceLocator().find_source("com.acme.PaymentService", root)
    assert "int marker;" in text


def test_nested_class_maps_to_outer_file(write_sources) -> None:
    root = write_sources(
        {
            "com/acme/Cart.java": """
                package com.acme;

                public class Cart { static class Line {} }
            """,
        }
    )

    assert "class Line" in SourceLocator().find_source("com.acme.Cart$Line", root)


def test_missing_source_returns_empty_string(write_sources, tmp_path: Path) -> None:
    root = write_sources({"com/acme/Other.java": "package com.acme;\n"})

    locator = SourceLocator()
    assert locator.find_source("com.acme.PaymentService", root) == ""
    assert locator.find_source("com.acme.PaymentService", tmp_path / "absent") == ""


def test_default_package_class_ignores_files_with_a_package(write_sources) -> None:
    root = write_sources(
        {
            "a/b/Foo.java": """
                package a.b;

                public class Foo {}
            """,
        }
    )

    assert SourceLocator().find_source("Foo", root) == ""

    write_sources({"legacy/Foo.java": "public class Foo { int local; }\n"})
    assert "int local;" in SourceLocator().find_source("Foo", root)


def test_package_prefix_is_not_a_match(write_sources) -> None:
    root = write_sources(
        {
            "x/PaymentService.java": """
                package com.acmex;

                public class PaymentService {}
            """,
        }
    )

    assert SourceLocator().find_source("com.acme.PaymentService", root) == ""


def test_declares_package() -> None:
    assert declares_package("// header\npackage com.acme;\nclass A {}", "com.acme")
    assert not declares_package("package com.acmex;\n", "com.acme")
    assert declares_package("class A {}\n", "")
    assert not declares_package("package a.b;\nclass A {}\n", "")


def test_split_class_name_handles_default_package() -> None:
    assert split_class_name("a.b.Outer$Inner") == ("a.b", "Outer")
    assert split_class_name("Main") == ("", "Main")
