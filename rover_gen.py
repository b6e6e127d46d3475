"""Rover Luau bindings generator.

Generates typed component wrappers for the Rover UI library from the
creator-docs engine reference (one YAML document per class and per enum).
The generated block is spliced into src/lua/Rover.luau and written to
build.luau.

Usage:
    python rover_gen.py
    python rover_gen.py --flatten --output build.luau
    python rover_gen.py --list-classes
"""

import argparse
import hashlib
import json
import re
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

import yaml

# Defaults are relative to the Rover checkout the tool is run from.
DEFAULT_DOCS_DIR = Path("creator-docs") / "content" / "en-us" / "reference" / "engine"
DEFAULT_HOST_SOURCE = Path("src") / "lua" / "Rover.luau"
DEFAULT_OUTPUT = Path("build.luau")
CLASSES_SUBDIR = "classes"
ENUMS_SUBDIR = "enums"


# ===--- CLI config contracts ---=== #


@dataclass(frozen=True)
class GenerateConfig:
    docs_dir: Path
    host_source: Path
    output: Path
    allowed_classes: tuple[str, ...]
    named_types: bool
    render_comments: bool
    internal_suffix: str | None


@dataclass(frozen=True)
class DiscoveryConfig:
    command: str
    info_class: str | None
    docs_dir: Path
    allowed_classes: tuple[str, ...]
    named_types: bool


VALID_ERROR_CODES = {
    "PATH_NOT_FOUND",
    "INVALID_CLASS_NAME",
    "INVALID_SUFFIX",
    "CONFLICT_GENERATE_DISCOVERY",
}
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_SUFFIX_RE = re.compile(r"^[A-Za-z0-9]+$")


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


def validate_class_name(name: str) -> str:
    if _IDENTIFIER_RE.match(name):
        return name
    raise ConfigError(
        "INVALID_CLASS_NAME",
        f"Invalid class name: {name}",
        "Class names are plain identifiers (for example UIListLayout).",
    )


def validate_internal_suffix(suffix: str) -> str:
    if _SUFFIX_RE.match(suffix):
        return suffix
    raise ConfigError(
        "INVALID_SUFFIX",
        f"Invalid internal suffix: {suffix!r}",
        "Use letters and digits only, e.g. --internal-suffix 3f9a1c.",
    )


def validate_path_exists(
    path: Path | None, flag: str, suggestion: str | None = None
) -> Path:
    if path is None:
        raise ConfigError(
            "PATH_NOT_FOUND",
            f"{flag} is required: no path provided.",
            suggestion or f"Pass the path explicitly: {flag} /path/to/resource",
        )
    if path.exists():
        return path
    raise ConfigError(
        "PATH_NOT_FOUND",
        f"Path for {flag} does not exist: {path}",
        suggestion or "Provide an existing path for this flag.",
    )


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate Rover Luau bindings")

    parser.add_argument("--docs-dir", type=Path, default=DEFAULT_DOCS_DIR)
    parser.add_argument("--host", type=Path, default=DEFAULT_HOST_SOURCE)
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT)

    parser.add_argument("--flatten", action="store_true", default=False)
    parser.add_argument("--comments", action="store_true", default=False)
    parser.add_argument("--allow", action="append", nargs="+", default=None)
    parser.add_argument("--internal-suffix", type=str, default=None)

    discovery_group = parser.add_mutually_exclusive_group()
    discovery_group.add_argument("--list-classes", action="store_true", default=False)
    discovery_group.add_argument("--info", type=str, default=None)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def normalize_allowed(raw_allowed: object) -> tuple[str, ...]:
    if raw_allowed is None:
        return tuple()
    if not isinstance(raw_allowed, list):
        raise ConfigError(
            "INVALID_CLASS_NAME",
            f"Invalid --allow value type: {type(raw_allowed).__name__}",
            "Pass class names as --allow ClassName.",
        )

    normalized: list[str] = []
    for entry in raw_allowed:
        names = entry if isinstance(entry, list) else [entry]
        for name in names:
            if not isinstance(name, str):
                raise ConfigError(
                    "INVALID_CLASS_NAME",
                    f"Invalid class name type: {type(name).__name__}",
                    "Pass class names as --allow ClassName.",
                )
            normalized.append(validate_class_name(name))

    return tuple(normalized)


def build_allowed_classes(extra: tuple[str, ...]) -> tuple[str, ...]:
    """Return the default seed followed by extra names, without duplicates."""
    seen = set(DEFAULT_ALLOWED_CLASSES)
    combined = list(DEFAULT_ALLOWED_CLASSES)
    for name in extra:
        if name not in seen:
            seen.add(name)
            combined.append(name)
    return tuple(combined)


def validate_config(args: argparse.Namespace) -> GenerateConfig | DiscoveryConfig:
    allowed = build_allowed_classes(normalize_allowed(args.allow))
    has_discovery_command = bool(args.list_classes or args.info)
    has_generate_only_input = bool(args.comments or args.internal_suffix)

    if has_discovery_command and has_generate_only_input:
        raise ConfigError(
            "CONFLICT_GENERATE_DISCOVERY",
            "--comments and --internal-suffix cannot be combined with discovery flags.",
            "Choose either generate mode or one discovery command.",
        )

    docs_dir = validate_path_exists(
        args.docs_dir,
        "--docs-dir",
        "Clone creator-docs:\n"
        "  git clone https://github.com/Roblox/creator-docs.git creator-docs\n"
        "Or pass a custom path: --docs-dir /your/path/to/reference/engine",
    )

    if has_discovery_command:
        command = "list-classes" if args.list_classes else "info"
        info_class = validate_class_name(args.info) if args.info is not None else None
        return DiscoveryConfig(
            command=command,
            info_class=info_class,
            docs_dir=docs_dir,
            allowed_classes=allowed,
            named_types=not args.flatten,
        )

    host_source = validate_path_exists(
        args.host,
        "--host",
        "Run from the repository root or pass --host /path/to/Rover.luau",
    )
    internal_suffix = (
        validate_internal_suffix(args.internal_suffix)
        if args.internal_suffix is not None
        else None
    )

    return GenerateConfig(
        docs_dir=docs_dir,
        host_source=host_source,
        output=args.output,
        allowed_classes=allowed,
        named_types=not args.flatten,
        render_comments=bool(args.comments),
        internal_suffix=internal_suffix,
    )


def build_config(argv: list[str] | None = None) -> GenerateConfig | DiscoveryConfig:
    return validate_config(parse_args(argv))


# ===--- Constants ---=== #

# Minimum root set; the closure pulls in every subclass and every ancestor.
DEFAULT_ALLOWED_CLASSES: tuple[str, ...] = (
    "GuiObject",
    "UIAspectRatioConstraint",
    "UIBase",
    "UIComponent",
    "UIConstraint",
    "UICorner",
    "UIFlexItem",
    "UIGradient",
    "UIGridLayout",
    "UIGridStyleLayout",
    "UILayout",
    "UIListLayout",
    "UIPadding",
    "UIPageLayout",
    "UIScale",
    "UISizeConstraint",
    "UIStroke",
    "UITableLayout",
    "UITextSizeConstraint",
)

BUILTIN_TYPE_MAP = {
    "bool": "boolean",
    "int": "number",
    "float": "number",
    "int64": "number",
    "double": "number",
    "UniqueId": "unknown",
    "Content": "unknown",
    "QDir": "unknown",
    "QFont": "unknown",
    "BinaryString": "unknown",
    "ProtectedString": "unknown",
    "Path2DControlPoint": "unknown",
}

# Datatype names that collide with enum names and must stay datatypes.
ENUM_SUBSTITUTION_EXCLUDED = frozenset({"Font"})

LUAU_RESERVED = frozenset(
    {
        "and",
        "break",
        "do",
        "else",
        "elseif",
        "end",
        "false",
        "for",
        "function",
        "if",
        "in",
        "local",
        "nil",
        "not",
        "or",
        "repeat",
        "return",
        "then",
        "true",
        "until",
        "while",
    }
)

SPLICE_MARKER = "-- AUTOGEN"
BEGIN_MARKER = "-- BEGIN AUTOGEN"
END_MARKER = "-- END AUTOGEN"
TYPES_HEADER = "-- Types"
CODE_HEADER = "-- Code"

STRICT_DIRECTIVE = "--!strict\n"
NOCHECK_DIRECTIVE = (
    "--!nocheck\n-- Typechecking is disabled due to the sheer number of autogen types\n"
)

INTERNAL_SYMBOL = "_internal"
DRAW_PRIMITIVE = "Rover.drawInstance" + INTERNAL_SYMBOL
_DERIVED_SUFFIX_LENGTH = 12


# ===--- Data classes ---=== #


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    type: str

    @property
    def short_name(self) -> str:
        """Property identifier without the owning class prefix."""
        _, sep, tail = self.name.rpartition(".")
        return (tail if sep else self.name).strip()


@dataclass(frozen=True)
class ClassDocument:
    name: str
    inherits: tuple[str, ...] = ()
    properties: tuple[PropertyDescriptor, ...] = ()
    description: str = ""
    summary: str = ""


# ===--- YAML document loading ---=== #


_DOCUMENT_SUFFIXES = (".yaml", ".yml")
_YAML_LOADER = getattr(yaml, "CSafeLoader", yaml.SafeLoader)


class DocumentError(Exception):
    """A corpus document could not be turned into the expected shape."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


def _optional_text(raw: dict, key: str, source: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DocumentError(source, f"'{key}' must be a string")
    return value


def _require_name(raw: object, source: str) -> str:
    if not isinstance(raw, dict):
        raise DocumentError(
            source, f"expected a mapping, got {type(raw).__name__}"
        )
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise DocumentError(source, "missing required field 'name'")
    return name.strip()


def parse_property(raw: object, source: str) -> PropertyDescriptor:
    if not isinstance(raw, dict):
        raise DocumentError(source, f"property entry must be a mapping, got {raw!r}")
    name = raw.get("name")
    prop_type = raw.get("type")
    if not isinstance(name, str) or not name:
        raise DocumentError(source, "property entry missing 'name'")
    if not isinstance(prop_type, str) or not prop_type:
        raise DocumentError(source, f"property '{name}' missing 'type'")
    return PropertyDescriptor(name=name, type=prop_type)


def parse_class_document(raw: object, source: str) -> ClassDocument:
    """Validate one parsed YAML class document and convert it to a ClassDocument.

    Only the fields the generator consumes are checked; everything else in
    the document (methods, events, callbacks, tags, ...) is ignored.

    Args:
        raw: Parsed YAML for one document.
        source: Human-readable origin used in error messages (usually a path).

    Returns:
        ClassDocument with inherits and properties normalised to tuples.

    Raises:
        DocumentError: If the document is not a mapping, lacks a name, or has
            inherits/properties of the wrong shape.
    """
    name = _require_name(raw, source)

    raw_inherits = raw.get("inherits") or []
    if not isinstance(raw_inherits, list) or not all(
        isinstance(parent, str) for parent in raw_inherits
    ):
        raise DocumentError(source, "'inherits' must be a list of class names")

    raw_properties = raw.get("properties") or []
    if not isinstance(raw_properties, list):
        raise DocumentError(source, "'properties' must be a list")

    return ClassDocument(
        name=name,
        inherits=tuple(raw_inherits),
        properties=tuple(parse_property(p, source) for p in raw_properties),
        description=_optional_text(raw, "description", source),
        summary=_optional_text(raw, "summary", source),
    )


def _document_paths(directory: Path) -> list[Path]:
    return sorted(
        path
        for path in Path(directory).iterdir()
        if path.is_file() and path.suffix in _DOCUMENT_SUFFIXES
    )


def read_document(path: Path) -> object:
    try:
        return yaml.load(path.read_text(encoding="utf-8"), Loader=_YAML_LOADER)
    except yaml.YAMLError as err:
        raise DocumentError(str(path), f"malformed YAML: {err}") from err


def load_class_documents(classes_dir: Path) -> dict[str, ClassDocument]:
    """Load every class document in classes_dir, keyed by class name.

    Files are read in filename order so the mapping order (and therefore the
    generated output order) is stable across platforms.

    Raises:
        DocumentError: On malformed YAML, a bad document shape, or two
            documents declaring the same class name.
        OSError: If the directory or a file cannot be read.
    """
    classes: dict[str, ClassDocument] = {}
    for path in _document_paths(classes_dir):
        clazz = parse_class_document(read_document(path), str(path))
        if clazz.name in classes:
            raise DocumentError(str(path), f"duplicate class name '{clazz.name}'")
        classes[clazz.name] = clazz
    return classes


def load_enum_names(enums_dir: Path) -> frozenset[str]:
    """Load the names of every enum document in enums_dir."""
    names: set[str] = set()
    for path in _document_paths(enums_dir):
        names.add(_require_name(read_document(path), str(path)))
    return frozenset(names)


# ===--- Class graph pruning ---=== #


@dataclass(frozen=True)
class PruneStats:
    """Diagnostics from a single prune_classes run.

    Attributes:
        seed_count: Number of distinct names in the seed set.
        descendants_added: Names pulled in because an ancestor was allowed.
        ancestors_added: Names pulled in because a descendant was allowed.
            May include dangling parent names that are not classes.
        retained_count: Number of classes left in the mapping.
        removed: Class names deleted from the mapping.
    """

    seed_count: int
    descendants_added: frozenset[str]
    ancestors_added: frozenset[str]
    retained_count: int
    removed: frozenset[str]


def build_inherit_index(
    classes: dict[str, ClassDocument],
) -> tuple[dict[str, tuple[str, ...]], dict[str, list[str]]]:
    """Build child -> parents and parent -> children indices in one pass.

    Parent names are indexed even when they are not keys of classes, so a
    dangling reference still links its children to it.
    """
    parents: dict[str, tuple[str, ...]] = {}
    children: dict[str, list[str]] = {}
    for name, clazz in classes.items():
        parents[name] = clazz.inherits
        for parent in clazz.inherits:
            children.setdefault(parent, []).append(name)
    return parents, children


def close_over(seed: set[str], edges: dict) -> set[str]:
    """Return every name reachable from seed along edges, seed included."""
    reached: set[str] = set(seed)
    frontier = list(seed)
    while frontier:
        name = frontier.pop()
        for neighbour in edges.get(name, ()):
            if neighbour not in reached:
                reached.add(neighbour)
                frontier.append(neighbour)
    return reached


def prune_classes(
    classes: dict[str, ClassDocument],
    allowed: tuple[str, ...] | list[str] | frozenset[str],
) -> PruneStats:
    """Reduce classes in place to the inheritance closure of allowed.

    Two passes, in this order:
      1. Every class with an allowed parent becomes allowed (descendants).
      2. Every parent of an allowed class becomes allowed (ancestors).
    The second pass starts from the result of the first, so siblings of a
    seed class are not pulled in unless they descend from another allowed
    class. Survivors keep their original mapping order.

    Args:
        classes: Class mapping to prune. Mutated.
        allowed: Seed class names. Names absent from classes are tolerated.

    Returns:
        PruneStats describing what the closure added and removed.
    """
    parents, children = build_inherit_index(classes)
    seed = set(allowed)

    with_descendants = close_over(seed, children)
    final = close_over(with_descendants, parents)

    removed = [name for name in classes if name not in final]
    for name in removed:
        del classes[name]

    return PruneStats(
        seed_count=len(seed),
        descendants_added=frozenset(with_descendants - seed),
        ancestors_added=frozenset(final - with_descendants),
        retained_count=len(classes),
        removed=frozenset(removed),
    )


# ===--- Luau type rendering ---=== #


def props_type_name(class_name: str) -> str:
    return f"_{class_name}Props"


def own_property_map(clazz: ClassDocument) -> dict[str, str]:
    props: dict[str, str] = {}
    for prop in clazz.properties:
        props[prop.short_name] = prop.type
    return props


def flattened_property_map(
    classes: dict[str, ClassDocument], name: str
) -> dict[str, str]:
    """Merge a class's own properties with those of all of its ancestors.

    Own properties are visited first and the first writer of a key wins, so
    a child's declaration shadows an ancestor's property of the same name.
    Ancestors are walked depth-first in declared inherit order; each one is
    visited once, which also makes cyclic or diamond hierarchies safe.
    Parents missing from classes contribute nothing.
    """
    props: dict[str, str] = {}
    visited: set[str] = set()

    def _visit(class_name: str) -> None:
        if class_name in visited or class_name not in classes:
            return
        visited.add(class_name)
        clazz = classes[class_name]
        for key, prop_type in own_property_map(clazz).items():
            props.setdefault(key, prop_type)
        for parent in clazz.inherits:
            _visit(parent)

    _visit(name)
    return props


class TypeStrategy(ABC):
    """How property maps are built and how a class's props type is exposed."""

    named = False

    @abstractmethod
    def property_map(
        self, classes: dict[str, ClassDocument], name: str
    ) -> dict[str, str]:
        raise NotImplementedError

    @abstractmethod
    def contents(
        self, classes: dict[str, ClassDocument], name: str, prop_map_text: str
    ) -> str:
        raise NotImplementedError

    @abstractmethod
    def declaration(self, name: str, contents: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def props_type(self, name: str, contents: str) -> str:
        raise NotImplementedError


class NamedTypeStrategy(TypeStrategy):
    """One `type _XProps` per class, composed with its parents by intersection."""

    named = True

    def property_map(self, classes, name):
        return own_property_map(classes[name])

    def contents(self, classes, name, prop_map_text):
        parent_refs = "".join(
            f" & {props_type_name(parent)}" for parent in classes[name].inherits
        )
        return prop_map_text + parent_refs

    def declaration(self, name, contents):
        return f"type {props_type_name(name)} = {contents}\n"

    def props_type(self, name, contents):
        return props_type_name(name)


class FlattenedTypeStrategy(TypeStrategy):
    """Inline every inherited property into each wrapper's parameter type."""

    def property_map(self, classes, name):
        return flattened_property_map(classes, name)

    def contents(self, classes, name, prop_map_text):
        return prop_map_text

    def declaration(self, name, contents):
        return ""

    def props_type(self, name, contents):
        return contents


def select_strategy(named_types: bool) -> TypeStrategy:
    return NamedTypeStrategy() if named_types else FlattenedTypeStrategy()


def format_property_key(name: str) -> str:
    """Return a Luau table-type key for a property name.

    Names that are not plain identifiers (punctuation, spaces, non-ASCII,
    reserved words) are emitted in bracket form with a quoted string.
    """
    name = name.strip()
    quoted = json.dumps(name, ensure_ascii=False)
    if (
        quoted != f'"{name}"'
        or " " in name
        or not _IDENTIFIER_RE.match(name)
        or name in LUAU_RESERVED
    ):
        return f"[{quoted}]"
    return name


def resolve_property_type(raw_type: str, enum_names: frozenset[str]) -> str:
    """Map a documented type name to the Luau type used in generated code.

    Enum names become `Enum.<Name>` (except the excluded datatype names),
    builtin scalars and opaque engine types go through BUILTIN_TYPE_MAP,
    and anything else passes through verbatim.
    """
    if raw_type in enum_names and raw_type not in ENUM_SUBSTITUTION_EXCLUDED:
        return f"Enum.{raw_type}"
    return BUILTIN_TYPE_MAP.get(raw_type, raw_type)


def render_property_line(key: str, luau_type: str) -> str:
    return f"\t{key}: {luau_type} | Signal<{luau_type}> | nil"


def render_property_map(props: dict[str, str], enum_names: frozenset[str]) -> str:
    lines = [
        render_property_line(
            format_property_key(prop_name),
            resolve_property_type(prop_type, enum_names),
        )
        for prop_name, prop_type in props.items()
    ]
    return "{\n" + ",\n".join(lines) + "\n}"


@dataclass
class RenderContext:
    """Mutable state shared by every render call of one generation run.

    Attributes:
        classes: Pruned class mapping. Read-only during rendering.
        enum_names: Known enum names for Enum.<Name> substitution.
        strategy: Named or flattened type strategy, chosen once per run.
        property_maps: Class name -> property short name -> raw type.
            Filled by build_property_maps.
        contents: Class name -> rendered props type contents. Filled by
            render_type.
    """

    classes: dict[str, ClassDocument]
    enum_names: frozenset[str]
    strategy: TypeStrategy
    property_maps: dict[str, dict[str, str]] = field(default_factory=dict)
    contents: dict[str, str] = field(default_factory=dict)


def build_property_maps(context: RenderContext) -> dict[str, dict[str, str]]:
    for name in context.classes:
        context.property_maps[name] = context.strategy.property_map(
            context.classes, name
        )
    return context.property_maps


def render_type(context: RenderContext, name: str) -> str:
    """Render one class's props type and record its contents in context.

    Args:
        context: Render state. property_maps must already hold name.
        name: Class to render.

    Returns:
        The standalone declaration text (empty in flattened mode).
    """
    prop_map_text = render_property_map(
        context.property_maps[name], context.enum_names
    )
    contents = context.strategy.contents(context.classes, name, prop_map_text)
    context.contents[name] = contents
    return context.strategy.declaration(name, contents)


# ===--- Wrapper function rendering ---=== #


def render_doc_comment(name: str, description: str) -> str:
    lines = [f"-- Renders a {name} using props and content", "-- "]
    lines.extend(f"-- {line}" for line in description.strip().split("\n"))
    return "\n".join(lines) + "\n"


def render_function_stub(
    name: str, props_type: str, description: str | None = None
) -> str:
    """Render the `Rover.<Name>` wrapper around the internal draw primitive.

    When description is given, a doc-comment block is emitted above the
    function.
    """
    parts: list[str] = []
    if description is not None:
        parts.append(render_doc_comment(name, description))
    parts.append(
        f"function Rover.{name}(props: {props_type}, "
        f"content: ((elm: {name}) -> ())?): ()\n"
    )
    parts.append(
        f"\t{DRAW_PRIMITIVE}({json.dumps(name, ensure_ascii=False)}, props, content or function() end)\n"
    )
    parts.append("end\n\n")
    return "".join(parts)


# ===--- Generated block assembly ---=== #


@dataclass(frozen=True)
class GeneratedBlock:
    """Autogen text ready for splicing, plus what went into it.

    Attributes:
        text: Complete block from BEGIN_MARKER to END_MARKER.
        type_count: Number of standalone type declarations emitted.
        stub_count: Number of wrapper functions emitted.
    """

    text: str
    type_count: int
    stub_count: int


def build_generated_block(
    context: RenderContext, render_comments: bool = False
) -> GeneratedBlock:
    """Render all types, then all wrapper functions, between the markers.

    Both sections follow the mapping order of context.classes.

    Raises:
        ValueError: If the rendered text contains SPLICE_MARKER, which would
            corrupt the single-pass substitution in splice_generated_block.
    """
    build_property_maps(context)

    parts: list[str] = [f"{BEGIN_MARKER}\n", f"{TYPES_HEADER}\n"]
    type_count = 0
    for name in context.classes:
        declaration = render_type(context, name)
        if declaration:
            type_count += 1
            parts.append(declaration)

    parts.append(f"{CODE_HEADER}\n")
    for name, clazz in context.classes.items():
        props_type = context.strategy.props_type(name, context.contents[name])
        description = clazz.description if render_comments else None
        parts.append(render_function_stub(name, props_type, description))

    parts.append(END_MARKER)
    text = "".join(parts)

    if SPLICE_MARKER in text:
        raise ValueError(
            f"Generated block contains the splice marker {SPLICE_MARKER!r}"
        )

    return GeneratedBlock(
        text=text, type_count=type_count, stub_count=len(context.classes)
    )


# ===--- Host file splicing ---=== #


def derive_internal_suffix(block_text: str) -> str:
    """Stable suffix for the internal symbol, derived from the generated text."""
    digest = hashlib.sha256(block_text.encode("utf-8")).hexdigest()
    return digest[:_DERIVED_SUFFIX_LENGTH]


def splice_generated_block(host_source: str, block_text: str, suffix: str) -> str:
    """Insert block_text at the host's marker and finish the build source.

    Replaces every SPLICE_MARKER with the block, disables strict type
    checking, and renames every INTERNAL_SYMBOL occurrence (host and block
    alike) to INTERNAL_SYMBOL + "_" + suffix.

    Raises:
        ValueError: If the host has no SPLICE_MARKER or suffix is empty.
    """
    if SPLICE_MARKER not in host_source:
        raise ValueError(f"Host source has no {SPLICE_MARKER!r} marker")
    if not suffix:
        raise ValueError("suffix must not be empty")

    source = host_source.replace(SPLICE_MARKER, block_text)
    source = source.replace(STRICT_DIRECTIVE, NOCHECK_DIRECTIVE)
    return source.replace(INTERNAL_SYMBOL, f"{INTERNAL_SYMBOL}_{suffix}")


# ===--- Output writer ---=== #


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing the spliced build file.

    Attributes:
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of bytes written (UTF-8 encoded).
    """

    path: Path
    line_count: int
    byte_count: int


def write_output(path: Path, content: str) -> FileWriteResult:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    resolved = path.resolve()
    return FileWriteResult(
        path=resolved,
        line_count=content.count("\n"),
        byte_count=len(resolved.read_bytes()),
    )


# ===--- Corpus loading stage ---=== #


@dataclass(frozen=True)
class LoadedCorpus:
    classes: dict[str, ClassDocument]
    enum_names: frozenset[str]


def load_corpus(docs_dir: Path) -> LoadedCorpus:
    """Load classes and enum names from the engine reference directory.

    Raises:
        DocumentError: Malformed or incomplete document.
        OSError: Missing classes/ or enums/ directory, unreadable file.
    """
    docs_dir = Path(docs_dir)
    return LoadedCorpus(
        classes=load_class_documents(docs_dir / CLASSES_SUBDIR),
        enum_names=load_enum_names(docs_dir / ENUMS_SUBDIR),
    )


# ===--- Discovery commands ---=== #


def format_classes_table(classes: dict[str, ClassDocument]) -> str:
    """Render the pruned class list as a fixed-width table.

    One row per class in mapping order: name, own property count, parents.
    """
    name_width = max([len("Class")] + [len(name) for name in classes])
    lines = [f"{'Class':<{name_width}}  Props  Inherits"]
    lines.append(f"{'-' * name_width}  -----  --------")
    for name, clazz in classes.items():
        parents = ", ".join(clazz.inherits) or "-"
        lines.append(f"{name:<{name_width}}  {len(clazz.properties):>5}  {parents}")
    lines.append("")
    lines.append(f"{len(classes)} classes")
    return "\n".join(lines) + "\n"


def format_class_detail(
    name: str,
    clazz: ClassDocument,
    props: dict[str, str],
    enum_names: frozenset[str],
) -> str:
    lines = [name]
    if clazz.summary:
        lines.append(f"  {clazz.summary.strip()}")
    lines.append("")
    lines.append(f"  Inherits: {', '.join(clazz.inherits) or '-'}")
    lines.append(f"  Properties ({len(props)}):")
    for prop_name, prop_type in props.items():
        luau_type = resolve_property_type(prop_type, enum_names)
        lines.append(f"    {format_property_key(prop_name)}: {luau_type}")
    return "\n".join(lines) + "\n"


def run_discovery(config: DiscoveryConfig) -> None:
    """Execute the discovery command specified in config.

    Both commands load the corpus and prune it with the configured seed, so
    they show exactly what a generate run would emit.

    Raises:
        SystemExit(1): When config.command == "info" and the class is not in
            the pruned mapping.
    """
    corpus = load_corpus(config.docs_dir)
    classes = corpus.classes
    prune_classes(classes, config.allowed_classes)

    if config.command == "list-classes":
        print(format_classes_table(classes), end="")

    elif config.command == "info":
        assert config.info_class is not None
        if config.info_class not in classes:
            print(
                f"Error: class '{config.info_class}' is not in the pruned class set",
                file=sys.stderr,
            )
            raise SystemExit(1)
        strategy = select_strategy(config.named_types)
        props = strategy.property_map(classes, config.info_class)
        output = format_class_detail(
            config.info_class, classes[config.info_class], props, corpus.enum_names
        )
        print(output, end="")


# ===--- Summary report ---=== #


@dataclass(frozen=True)
class GenerationSummary:
    """Complete, immutable data for the post-generation console report.

    Attributes:
        mode: "named" or "flattened".
        loaded_classes: Class documents loaded before pruning.
        enum_count: Enum names loaded.
        prune: Stats from prune_classes.
        type_count: Standalone type declarations emitted.
        stub_count: Wrapper functions emitted.
        internal_suffix: Suffix applied to the internal symbol.
        output: Write result for the build file.
    """

    mode: str
    loaded_classes: int
    enum_count: int
    prune: PruneStats
    type_count: int
    stub_count: int
    internal_suffix: str
    output: FileWriteResult


def format_generation_summary(summary: GenerationSummary) -> str:
    lines: list[str] = ["Rover bindings generated:", ""]
    lines.append(f"  Mode:       {summary.mode} types")
    lines.append(f"  Output:     {summary.output.path}")
    lines.append(f"  Internal:   {INTERNAL_SYMBOL}_{summary.internal_suffix}")
    lines.append("")
    lines.append("  Classes:")
    lines.append(f"    Loaded:      {summary.loaded_classes:>6}")
    lines.append(f"    Seed:        {summary.prune.seed_count:>6}")
    lines.append(
        f"    Retained:    {summary.prune.retained_count:>6}"
        f"  (+{len(summary.prune.descendants_added)} descendants,"
        f" +{len(summary.prune.ancestors_added)} ancestors)"
    )
    lines.append(f"    Removed:     {len(summary.prune.removed):>6}")
    lines.append(f"  Enums:         {summary.enum_count:>6}")
    lines.append("")
    lines.append("  Generated:")
    lines.append(f"    Types:       {summary.type_count:>6}")
    lines.append(f"    Functions:   {summary.stub_count:>6}")
    lines.append("")
    lines.append(
        f"  Total: {summary.output.line_count:,} lines,"
        f" {summary.output.byte_count:,} bytes"
    )
    lines.append("")
    return "\n".join(lines)


def print_generation_summary(summary: GenerationSummary) -> None:
    print(format_generation_summary(summary), end="")


# ===--- Generate pipeline ---=== #


def run_generate(config: GenerateConfig) -> GenerationSummary:
    """Execute the complete generation pipeline for a GenerateConfig.

    Stages: load corpus -> prune -> render types and wrappers -> splice into
    host -> write. Every stage completes before the next starts and nothing
    is written unless all of them succeed.

    Returns:
        GenerationSummary describing the run (already printed).

    Raises:
        DocumentError: Malformed corpus document.
        OSError: Unreadable corpus/host or failed write.
        ValueError: Splice marker collision or host without marker.
    """
    print(f"Loading: {config.docs_dir}")
    corpus = load_corpus(config.docs_dir)
    classes = corpus.classes
    loaded_count = len(classes)
    print(f"  Corpus: {loaded_count} classes, {len(corpus.enum_names)} enums")

    stats = prune_classes(classes, config.allowed_classes)
    print(
        f"  Pruned: {stats.retained_count} retained, {len(stats.removed)} removed"
    )

    context = RenderContext(
        classes=classes,
        enum_names=corpus.enum_names,
        strategy=select_strategy(config.named_types),
    )
    block = build_generated_block(context, config.render_comments)
    print(f"  Rendered: {block.type_count} types, {block.stub_count} functions")

    host_source = Path(config.host_source).read_text(encoding="utf-8")
    suffix = config.internal_suffix or derive_internal_suffix(block.text)
    build_source = splice_generated_block(host_source, block.text, suffix)

    result = write_output(config.output, build_source)
    print(f"  Written: {result.line_count} lines to {result.path}")

    summary = GenerationSummary(
        mode="named" if context.strategy.named else "flattened",
        loaded_classes=loaded_count,
        enum_count=len(corpus.enum_names),
        prune=stats,
        type_count=block.type_count,
        stub_count=block.stub_count,
        internal_suffix=suffix,
        output=result,
    )
    print_generation_summary(summary)
    return summary


# ===--- Main ---=== #


def main(argv: list[str] | None = None):
    try:
        config = build_config(argv)
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        raise SystemExit(1) from err

    try:
        if isinstance(config, DiscoveryConfig):
            run_discovery(config)
        else:
            run_generate(config)
    except (OSError, DocumentError) as err:
        print(f"Error: {err}")
        raise SystemExit(1) from err
    except (RuntimeError, ValueError) as err:
        print(f"Internal error: {err}")
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
