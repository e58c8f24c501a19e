from __future__ import annotations

from pathlib import Path

from pubmirror.core.result import Err, Ok
from pubmirror.publish.model import PackageDetails, PackageRegistry
from pubmirror.publish.order import topological_sort


def _registry(graph: dict[str, tuple[str, ...]]) -> PackageRegistry:
    return {
        name: PackageDetails(
            name=name, dir=Path("packages") / name, version="1.0.0", local_deps=deps
        )
        for name, deps in graph.items()
    }


def _names(registry: PackageRegistry) -> list[str]:
    result = topological_sort(registry)
    assert isinstance(result, Ok)
    return [p.name for p in result.value]


def _closure(graph: dict[str, tuple[str, ...]], name: str) -> set[str]:
    seen: set[str] = set()
    todo = list(graph[name])
    while todo:
        dep = todo.pop()
        if dep not in seen:
            seen.add(dep)
            todo.extend(graph[dep])
    return seen


def test_chain_publishes_leaf_first() -> None:
    assert _names(_registry({"a": ("b",), "b": ("c",), "c": ()})) == ["c", "b", "a"]


def test_independent_packages_keep_registry_order() -> None:
    assert _names(_registry({"x": (), "y": (), "z": ()})) == ["x", "y", "z"]


def test_diamond_emits_shared_dependency_once() -> None:
    graph: dict[str, tuple[str, ...]] = {
        "app": ("ui", "store"),
        "ui": ("utils",),
        "store": ("utils",),
        "utils": (),
    }
    order = _names(_registry(graph))
    assert order == ["utils", "ui", "store", "app"]


def test_every_package_follows_its_transitive_deps() -> None:
    graph: dict[str, tuple[str, ...]] = {
        "tldraw": ("editor", "ui", "utils"),
        "ui": ("editor", "primitives"),
        "editor": ("store", "tlschema", "utils"),
        "tlschema": ("store", "validate"),
        "store": ("utils",),
        "validate": ("utils",),
        "primitives": ("utils",),
        "utils": (),
        "assets": (),
    }
    order = _names(_registry(graph))

    assert sorted(order) == sorted(graph)
    position = {name: i for i, name in enumerate(order)}
    for name in graph:
        for dep in _closure(graph, name):
            assert position[dep] < position[name], f"{dep} must precede {name}"


def test_deep_chain_does_not_recurse() -> None:
    depth = 5000
    graph = {f"p{i}": ((f"p{i + 1}",) if i + 1 < depth else ()) for i in range(depth)}
    order = _names(_registry(graph))
    assert order[0] == f"p{depth - 1}"
    assert order[-1] == "p0"


def test_missing_dependency_names_package_and_chain() -> None:
    result = topological_sort(_registry({"a": ("b",), "b": ("ghost",)}))

    assert isinstance(result, Err)
    assert result.error.kind == "missing_dependency"
    assert "ghost" in result.error.message
    assert "a -> b -> ghost" in result.error.message


def test_cycle_terminates() -> None:
    order = _names(_registry({"a": ("b",), "b": ("a",)}))
    assert sorted(order) == ["a", "b"]


def test_empty_registry() -> None:
    assert topological_sort({}) == Ok(())
