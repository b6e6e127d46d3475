from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import yaml

import rover_gen


def test_t_01_short_name_drops_class_prefix() -> None:
    prop = rover_gen.PropertyDescriptor(name="UIListLayout.Padding", type="UDim")

    assert prop.short_name == "Padding"


def test_t_02_short_name_without_dot_uses_whole_name() -> None:
    prop = rover_gen.PropertyDescriptor(name=" Padding ", type="UDim")

    assert prop.short_name == "Padding"


def test_t_03_parse_class_document_normalizes_null_fields() -> None:
    clazz = rover_gen.parse_class_document(
        {"name": "UIBase", "inherits": None, "properties": None, "description": None},
        "UIBase.yaml",
    )

    assert clazz == rover_gen.ClassDocument(name="UIBase")


def test_t_04_parse_class_document_keeps_inherit_and_property_order() -> None:
    clazz = rover_gen.parse_class_document(
        {
            "name": "UIListLayout",
            "inherits": ["UIGridStyleLayout", "Instance"],
            "properties": [
                {"name": "UIListLayout.Padding", "type": "UDim", "category": "Data"},
                {"name": "UIListLayout.Wraps", "type": "bool"},
            ],
            "summary": "Positions siblings in a list.",
            "description": "Long text.",
            "methods": [],
        },
        "UIListLayout.yaml",
    )

    assert clazz.inherits == ("UIGridStyleLayout", "Instance")
    assert [p.short_name for p in clazz.properties] == ["Padding", "Wraps"]
    assert clazz.summary == "Positions siblings in a list."
    assert clazz.description == "Long text."


@pytest.mark.parametrize(
    "raw",
    [
        None,
        ["not", "a", "mapping"],
        {"inherits": []},
        {"name": ""},
        {"name": 42},
    ],
)
def test_t_05_parse_class_document_requires_mapping_with_name(raw: object) -> None:
    with pytest.raises(rover_gen.DocumentError) as exc_info:
        rover_gen.parse_class_document(raw, "bad.yaml")

    assert exc_info.value.source == "bad.yaml"


@pytest.mark.parametrize(
    "raw",
    [
        {"name": "A", "inherits": "Base"},
        {"name": "A", "inherits": [1]},
        {"name": "A", "properties": {"x": "int"}},
        {"name": "A", "properties": ["x"]},
        {"name": "A", "properties": [{"name": "A.x"}]},
        {"name": "A", "properties": [{"type": "int"}]},
        {"name": "A", "description": ["not", "text"]},
    ],
)
def test_t_06_parse_class_document_rejects_wrong_shapes(raw: object) -> None:
    with pytest.raises(rover_gen.DocumentError):
        rover_gen.parse_class_document(raw, "A.yaml")


def test_t_07_load_class_documents_reads_yaml_in_filename_order(
    write_corpus: Callable[..., Path],
) -> None:
    docs_dir = write_corpus(
        [
            {"name": "Zeta", "inherits": ["Alpha"], "properties": []},
            {"name": "Alpha", "properties": [{"name": "Alpha.x", "type": "int"}]},
        ]
    )
    (docs_dir / "classes" / "README.md").write_text("# not a class\n", encoding="utf-8")

    classes = rover_gen.load_class_documents(docs_dir / "classes")

    assert list(classes) == ["Alpha", "Zeta"]
    assert classes["Zeta"].inherits == ("Alpha",)
    assert classes["Alpha"].properties[0].type == "int"


def test_t_08_load_class_documents_malformed_yaml_is_document_error(
    existing_paths: dict[str, Path],
) -> None:
    classes_dir = existing_paths["docs_dir"] / "classes"
    (classes_dir / "Broken.yaml").write_text("name: [unclosed\n", encoding="utf-8")

    with pytest.raises(rover_gen.DocumentError) as exc_info:
        rover_gen.load_class_documents(classes_dir)

    assert "Broken.yaml" in exc_info.value.source
    assert "malformed YAML" in exc_info.value.message


def test_t_09_load_class_documents_duplicate_name_is_document_error(
    existing_paths: dict[str, Path],
) -> None:
    classes_dir = existing_paths["docs_dir"] / "classes"
    (classes_dir / "a.yaml").write_text("name: Frame\n", encoding="utf-8")
    (classes_dir / "b.yaml").write_text("name: Frame\n", encoding="utf-8")

    with pytest.raises(rover_gen.DocumentError, match="duplicate class name"):
        rover_gen.load_class_documents(classes_dir)


def test_t_10_load_enum_names_collects_names(
    write_corpus: Callable[..., Path],
) -> None:
    docs_dir = write_corpus([], enums=["FillDirection", "Font", "SortOrder"])

    assert rover_gen.load_enum_names(docs_dir / "enums") == frozenset(
        {"FillDirection", "Font", "SortOrder"}
    )


def test_t_11_load_enum_names_missing_name_is_fatal(
    existing_paths: dict[str, Path],
) -> None:
    enums_dir = existing_paths["docs_dir"] / "enums"
    (enums_dir / "Nameless.yaml").write_text("items: []\n", encoding="utf-8")

    with pytest.raises(rover_gen.DocumentError, match="missing required field 'name'"):
        rover_gen.load_enum_names(enums_dir)


def test_t_12_load_corpus_missing_subdirectory_raises_os_error(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        rover_gen.load_corpus(tmp_path)


def test_t_13_yaml_loader_prefers_c_safe_loader() -> None:
    assert rover_gen._YAML_LOADER is getattr(yaml, "CSafeLoader", yaml.SafeLoader)
    assert issubclass(rover_gen._YAML_LOADER, yaml.constructor.SafeConstructor)


def test_t_14_load_class_documents_rejects_python_tags(
    existing_paths: dict[str, Path],
) -> None:
    classes_dir = existing_paths["docs_dir"] / "classes"
    (classes_dir / "Tagged.yaml").write_text(
        "name: !!python/object/apply:os.getcwd []\n", encoding="utf-8"
    )

    with pytest.raises(rover_gen.DocumentError, match="malformed YAML"):
        rover_gen.load_class_documents(classes_dir)


def test_t_15_load_class_documents_keeps_non_ascii_text(
    existing_paths: dict[str, Path],
) -> None:
    classes_dir = existing_paths["docs_dir"] / "classes"
    (classes_dir / "Label.yaml").write_text(
        "name: Label\ndescription: Étiquette café\n", encoding="utf-8"
    )

    classes = rover_gen.load_class_documents(classes_dir)

    assert classes["Label"].description == "Étiquette café"
