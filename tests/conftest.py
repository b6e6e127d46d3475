import argparse
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
import yaml

GENERATOR_DIR = Path(__file__).resolve().parent.parent
if str(GENERATOR_DIR) not in sys.path:
    sys.path.insert(0, str(GENERATOR_DIR))

import rover_gen  # noqa: E402


@pytest.fixture
def existing_paths(tmp_path: Path) -> dict[str, Path]:
    docs_dir = tmp_path / "engine"
    (docs_dir / "classes").mkdir(parents=True)
    (docs_dir / "enums").mkdir(parents=True)

    host = tmp_path / "Rover.luau"
    host.write_text("--!strict\nlocal Rover = {}\n-- AUTOGEN\nreturn Rover\n", encoding="utf-8")

    return {
        "docs_dir": docs_dir,
        "host": host,
        "output": tmp_path / "out" / "build.luau",
    }


@pytest.fixture
def make_args(existing_paths: dict[str, Path]) -> Callable[..., argparse.Namespace]:
    def _make_args(**overrides: object) -> argparse.Namespace:
        base_args: dict[str, object] = {
            "docs_dir": existing_paths["docs_dir"],
            "host": existing_paths["host"],
            "output": existing_paths["output"],
            "flatten": False,
            "comments": False,
            "allow": None,
            "internal_suffix": None,
            "list_classes": False,
            "info": None,
        }
        base_args.update(overrides)
        return argparse.Namespace(**base_args)

    return _make_args


@pytest.fixture
def make_class() -> Callable[..., rover_gen.ClassDocument]:
    def _make_class(
        name: str,
        *,
        inherits: tuple[str, ...] = (),
        properties: dict[str, str] | None = None,
        description: str = "",
    ) -> rover_gen.ClassDocument:
        props = tuple(
            rover_gen.PropertyDescriptor(name=f"{name}.{prop}", type=prop_type)
            for prop, prop_type in (properties or {}).items()
        )
        return rover_gen.ClassDocument(
            name=name,
            inherits=tuple(inherits),
            properties=props,
            description=description,
        )

    return _make_class


@pytest.fixture
def make_classes(
    make_class: Callable[..., rover_gen.ClassDocument],
) -> Callable[[dict[str, tuple[str, ...]]], dict[str, rover_gen.ClassDocument]]:
    """Build a property-less class mapping from name -> parents."""

    def _make_classes(
        graph: dict[str, tuple[str, ...]],
    ) -> dict[str, rover_gen.ClassDocument]:
        return {name: make_class(name, inherits=parents) for name, parents in graph.items()}

    return _make_classes


@pytest.fixture
def write_corpus(existing_paths: dict[str, Path]) -> Callable[..., Path]:
    """Write class and enum YAML documents into the fixture docs dir."""

    def _write_corpus(
        classes: list[dict[str, object]],
        enums: tuple[str, ...] = (),
    ) -> Path:
        docs_dir = existing_paths["docs_dir"]
        for doc in classes:
            path = docs_dir / "classes" / f"{doc['name']}.yaml"
            path.write_text(yaml.safe_dump(doc, sort_keys=False), encoding="utf-8")
        for enum_name in enums:
            path = docs_dir / "enums" / f"{enum_name}.yaml"
            path.write_text(
                yaml.safe_dump({"name": enum_name, "type": "enum", "items": []}),
                encoding="utf-8",
            )
        return docs_dir

    return _write_corpus
