from __future__ import annotations

import json

import pytest

from adminflow.errors import ConfigurationError, InvalidExportFormatError, ValidationError
from adminflow.infra.exporter import TabularExporter, neutralize_formula
from adminflow.infra.translator import YamlCatalogTranslator


def _write_catalog(directory, name: str, content: str) -> None:  # type: ignore[no-untyped-def]
    (directory / name).write_text(content, encoding="utf-8")


@pytest.mark.unit
def test_translator_interpolates_and_falls_back(tmp_path) -> None:  # type: ignore[no-untyped-def]
    _write_catalog(tmp_path, "admin.zh_CN.yaml", 'messages:\n  flash_edit_success: "对象 \\"%name%\\" 已更新."\n')
    _write_catalog(
        tmp_path,
        "admin.en.yaml",
        'messages:\n  flash_edit_success: "updated"\n  flash_delete_success: "Item %name% deleted."\n',
    )
    translator = YamlCatalogTranslator("zh_CN", catalog_dir=tmp_path)

    assert translator.trans("flash_edit_success", {"name": "文章"}) == '对象 "文章" 已更新.'
    assert translator.trans("flash_delete_success", {"%name%": "A"}) == "Item A deleted."
    assert translator.trans("flash_unknown") == "flash_unknown"
    assert translator.trans("flash_edit_success", domain="other") == "flash_edit_success"


@pytest.mark.unit
def test_packaged_catalogs_cover_feedback_keys() -> None:
    from adminflow.constants import AdminMessageKeys

    keys = [value for name, value in vars(AdminMessageKeys).items() if name.isupper() and name != "DOMAIN"]
    for locale in ("zh_CN", "en"):
        translator = YamlCatalogTranslator(locale)
        for key in keys:
            assert translator.trans(key) != key, f"{locale} 缺少 {key}"


@pytest.mark.unit
def test_translator_rejects_broken_catalog(tmp_path) -> None:  # type: ignore[no-untyped-def]
    _write_catalog(tmp_path, "admin.en.yaml", "messages: [unclosed\n")

    with pytest.raises(ConfigurationError):
        YamlCatalogTranslator("en", catalog_dir=tmp_path).trans("anything")


@pytest.mark.unit
def test_translator_validates_catalog_shape(tmp_path) -> None:  # type: ignore[no-untyped-def]
    _write_catalog(tmp_path, "admin.en.yaml", "messages:\n  - a\n  - b\n")

    with pytest.raises(ValidationError):
        YamlCatalogTranslator("en", catalog_dir=tmp_path).trans("anything")


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("=1+2", "'=1+2"),
        ("  @SUM(A1)", "'  @SUM(A1)"),
        ("-5", "'-5"),
        ("plain", "plain"),
        (None, ""),
        (42, 42),
    ],
)
def test_neutralize_formula(value, expected) -> None:  # type: ignore[no-untyped-def]
    assert neutralize_formula(value) == expected


@pytest.mark.unit
def test_exporter_writes_json() -> None:
    content, mimetype = TabularExporter().export("json", iter([{"id": 1, "title": "=x"}]))

    assert mimetype.startswith("application/json")
    assert json.loads(content) == [{"id": 1, "title": "=x"}]


@pytest.mark.unit
def test_exporter_empty_csv_and_unknown_format() -> None:
    content, _mimetype = TabularExporter().export("csv", [])

    assert content == ""
    with pytest.raises(InvalidExportFormatError):
        TabularExporter().export("xlsx", [])
