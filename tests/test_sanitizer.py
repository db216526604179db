"""Tests for plgen.sanitizer."""

from __future__ import annotations

import pytest

from plgen.analyzer import SourceAnalyzer
from plgen.errors import NameCollisionError
from plgen.sanitizer import sanitize
from tests._fixtures.package_builder import PackageBuilder

PLGO_SOURCE = """
// Package demo uses the plgo helpers.
package main

import (
	"fmt"

	"github.com/algonode/plgo"
)

// Greet says hello.
func Greet(name string) string {
	logger := plgo.NewNoticeLogger("", 0)
	logger.Println("greeting", name)
	return fmt.Sprintf("hello %s", name)
}

// Twice doubles a value using Add.
func Twice(x int64) int64 {
	return Add(x, x)
}

func Add(a, b int64) int64 {
	return a + b
}

// main is required by go build.
func main() {
	fmt.Println(Twice(2))
}
"""


def _load(builder: PackageBuilder, files: dict):
    return SourceAnalyzer().load_package(builder.write(files))


def test_sanitize_removes_entry_point_and_unexports_functions(package_builder: PackageBuilder) -> None:
    package = _load(package_builder, {"demo.go": PLGO_SOURCE})

    sanitized = sanitize(package)
    text = sanitized.files[0].text

    assert "func main()" not in text
    assert "main is required" not in text
    assert "func greet(name string) string" in text
    assert "func twice(x int64) int64" in text
    assert "return add(x, x)" in text
    assert "func add(a, b int64) int64" in text
    assert "// Greet says hello." in text


def test_sanitize_resolves_glue_package_references(package_builder: PackageBuilder) -> None:
    package = _load(package_builder, {"demo.go": PLGO_SOURCE})

    text = sanitize(package).files[0].text

    assert "github.com/algonode/plgo" not in text
    assert "plgo." not in text
    assert "logger := NewNoticeLogger(\"\", 0)" in text
    assert '"fmt"' in text


def test_sanitize_does_not_mutate_input(package_builder: PackageBuilder) -> None:
    package = _load(package_builder, {"demo.go": PLGO_SOURCE})
    original = package.files[0].source

    sanitize(package)

    assert package.files[0].source == original
    assert b"func main()" in package.files[0].source


def test_sanitize_is_idempotent(package_builder: PackageBuilder) -> None:
    package = _load(package_builder, {"demo.go": PLGO_SOURCE})

    once = sanitize(package)
    twice = sanitize(once)

    assert [file.source for file in twice.files] == [file.source for file in once.files]


def test_sanitize_is_noop_without_rewritable_constructs(package_builder: PackageBuilder) -> None:
    package = _load(
        package_builder,
        {
            "lib.go": """
            package main

            func helper(a int64) int64 {
            	return a * 2
            }
            """
        },
    )

    sanitized = sanitize(package)

    assert sanitized.files[0].source == package.files[0].source


def test_sanitize_renames_across_files(package_builder: PackageBuilder) -> None:
    package = _load(
        package_builder,
        {
            "a.go": "package main\n\nfunc Double(x int64) int64 { return Add(x, x) }\n",
            "b.go": "package main\n\nfunc Add(a, b int64) int64 { return a + b }\n",
        },
    )

    first, second = sanitize(package).files

    assert "func double(x int64) int64 { return add(x, x) }" in first.text
    assert "func add(a, b int64) int64" in second.text


def test_sanitize_handles_aliased_single_import(package_builder: PackageBuilder) -> None:
    package = _load(
        package_builder,
        {
            "lib.go": """
            package main

            import pl "github.com/algonode/plgo"

            func Notice(message string) {
            	pl.NewNoticeLogger("", 0).Println(message)
            }
            """
        },
    )

    text = sanitize(package).files[0].text

    assert "import" not in text
    assert "pl." not in text
    assert "NewNoticeLogger(\"\", 0).Println(message)" in text


def test_sanitize_rejects_name_collisions(package_builder: PackageBuilder) -> None:
    package = _load(
        package_builder,
        {
            "lib.go": """
            package main

            func add(a, b int64) int64 { return a + b }

            func Add(a, b int64) int64 { return add(a, b) }
            """
        },
    )

    with pytest.raises(NameCollisionError) as excinfo:
        sanitize(package)

    assert "'add'" in str(excinfo.value)


def test_sanitize_rejects_reserved_generated_names(package_builder: PackageBuilder) -> None:
    package = _load(package_builder, {"lib.go": "package main\n\nfunc RaiseError() {}\n"})

    with pytest.raises(NameCollisionError):
        sanitize(package)


@pytest.mark.parametrize("name", ["Select", "Default", "Range", "Type", "Map", "Func"])
def test_sanitize_rejects_functions_named_after_keywords(package_builder: PackageBuilder, name: str) -> None:
    package = _load(package_builder, {"lib.go": f"package main\n\nfunc {name}(a int64) int64 {{ return a }}\n"})

    with pytest.raises(NameCollisionError) as excinfo:
        sanitize(package)

    assert f"Cannot unexport {name}" in str(excinfo.value)
    assert "keyword" in str(excinfo.value)


def test_sanitize_keeps_composite_literal_keys(package_builder: PackageBuilder) -> None:
    package = _load(
        package_builder,
        {
            "lib.go": """
            package main

            type Ops struct{ Add int64 }

            func Add(a, b int64) int64 { return a + b }

            func Total() int64 { return Ops{Add: Add(1, 2)}.Add }
            """
        },
    )

    text = sanitize(package).files[0].text

    assert "Ops{Add: add(1, 2)}.Add" in text
    assert "func add(a, b int64) int64" in text


@pytest.mark.parametrize(
    "declaration",
    [
        "func raiseError(v interface{}) {}",
        "func toDatum(v interface{}) int64 { return 0 }",
        "type Datum int64",
        "var funcInfo = 1",
    ],
)
def test_sanitize_rejects_user_declarations_of_glue_names(
    package_builder: PackageBuilder, declaration: str
) -> None:
    package = _load(package_builder, {"lib.go": f"package main\n\n{declaration}\n\nfunc Add(a int64) int64 {{ return a }}\n"})

    with pytest.raises(NameCollisionError) as excinfo:
        sanitize(package)

    assert "generated glue code" in str(excinfo.value)
