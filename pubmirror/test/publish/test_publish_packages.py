from __future__ import annotations

import json
from pathlib import Path

from pubmirror.core.result import Err, Ok
from pubmirror.publish.model import PackageDetails
from pubmirror.publish.packages import load_all_packages, load_package_details


def _write_package(
    root: Path,
    dirname: str,
    *,
    name: str,
    version: str = "2.0.0",
    deps: dict[str, str] | None = None,
    private: bool = False,
) -> Path:
    pkg = root / dirname
    pkg.mkdir(parents=True)
    manifest: dict[str, object] = {"name": name, "version": version}
    if deps is not None:
        manifest["dependencies"] = deps
    if private:
        manifest["private"] = True
    (pkg / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    return pkg


class TestLoadPackageDetails:
    def test_keeps_only_namespaced_deps(self, tmp_path: Path) -> None:
        pkg = _write_package(
            tmp_path,
            "tldraw",
            name="@tldraw/tldraw",
            version="2.0.0-canary.1",
            deps={"@tldraw/editor": "workspace:*", "react": "^18", "@tldraw/store": "2.0.0"},
        )

        result = load_package_details(pkg, namespace="@tldraw/")

        assert result == Ok(
            PackageDetails(
                name="@tldraw/tldraw",
                dir=pkg,
                version="2.0.0-canary.1",
                local_deps=("@tldraw/editor", "@tldraw/store"),
            )
        )

    def test_no_manifest(self, tmp_path: Path) -> None:
        assert load_package_details(tmp_path, namespace="@tldraw/") == Ok(None)

    def test_private_skipped(self, tmp_path: Path) -> None:
        pkg = _write_package(tmp_path, "internal", name="@tldraw/internal", private=True)
        assert load_package_details(pkg, namespace="@tldraw/") == Ok(None)

    def test_truthy_private_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "@tldraw/internal", "version": "1.0.0", "private": "true"}),
            encoding="utf-8",
        )
        assert load_package_details(tmp_path, namespace="@tldraw/") == Ok(None)

    def test_private_false_is_public(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "@tldraw/utils", "version": "1.0.0", "private": False}),
            encoding="utf-8",
        )
        result = load_package_details(tmp_path, namespace="@tldraw/")
        assert isinstance(result, Ok) and result.value is not None

    def test_no_dependencies(self, tmp_path: Path) -> None:
        pkg = _write_package(tmp_path, "utils", name="@tldraw/utils")
        result = load_package_details(pkg, namespace="@tldraw/")
        assert isinstance(result, Ok) and result.value is not None
        assert result.value.local_deps == ()

    def test_invalid_json(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text("{not json", encoding="utf-8")
        result = load_package_details(tmp_path, namespace="@tldraw/")
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"

    def test_invalid_version(self, tmp_path: Path) -> None:
        pkg = _write_package(tmp_path, "utils", name="@tldraw/utils", version="next")
        result = load_package_details(pkg, namespace="@tldraw/")
        assert isinstance(result, Err)
        assert "invalid version" in result.error.message

    def test_missing_name(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text('{"version": "1.0.0"}', encoding="utf-8")
        result = load_package_details(tmp_path, namespace="@tldraw/")
        assert isinstance(result, Err)


class TestLoadAllPackages:
    def test_registry_keyed_by_name_in_listing_order(self, tmp_path: Path) -> None:
        _write_package(tmp_path, "tldraw", name="@tldraw/tldraw", deps={"@tldraw/editor": "*"})
        _write_package(tmp_path, "editor", name="@tldraw/editor")
        _write_package(tmp_path, "docs", name="@tldraw/docs", private=True)
        (tmp_path / "scripts").mkdir()
        (tmp_path / "README.md").write_text("not a package")

        result = load_all_packages(tmp_path, namespace="@tldraw/")

        assert isinstance(result, Ok)
        assert list(result.value) == ["@tldraw/editor", "@tldraw/tldraw"]
        assert result.value["@tldraw/tldraw"].local_deps == ("@tldraw/editor",)

    def test_duplicate_names_last_wins(self, tmp_path: Path) -> None:
        _write_package(tmp_path, "a", name="@tldraw/dup", version="1.0.0")
        _write_package(tmp_path, "b", name="@tldraw/dup", version="2.0.0")

        result = load_all_packages(tmp_path, namespace="@tldraw/")

        assert isinstance(result, Ok)
        assert result.value["@tldraw/dup"].version == "2.0.0"

    def test_missing_root(self, tmp_path: Path) -> None:
        result = load_all_packages(tmp_path / "packages", namespace="@tldraw/")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_bad_manifest_fails_whole_load(self, tmp_path: Path) -> None:
        _write_package(tmp_path, "ok", name="@tldraw/ok")
        (tmp_path / "broken").mkdir()
        (tmp_path / "broken" / "package.json").write_text("[]", encoding="utf-8")

        result = load_all_packages(tmp_path, namespace="@tldraw/")

        assert isinstance(result, Err)
