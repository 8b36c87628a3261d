"""
resgen/compiler.py
==================

Lowers the resource domain model to the C++ AST and drives a whole
generation run.

``ResourceCompiler`` is a ``ResourceVisitor``: each ``visit_*`` method
appends the declarations its entity needs to the shared ``SourceCode``
and returns the expression that refers to them (a struct literal, an
identifier or ``nullptr``).  Table-level visits return ``None``.

Emission order inside ``SourceCode``::

    // banner
    #include "kern_resources.hpp"
    // MARK:- Codec Lookup Section      trees, codecLookupTable, size
    // MARK:- Kexts Section             kext paths, kextTable, size
    // MARK:- Codec Section [<Vendor>]  per vendor: files, patches,
    //                                  revisions, codec mods
    // MARK:- Vendor Section            vendorMods, size
    // MARK:- Controllers Section       patches, revisions,
    //                                  controllerTable, size

The kext table must be compiled before anything that carries patches:
a patch refers to its kext through ``&kextTable[i]`` and the index map is
filled in by ``visit_kext_table``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from resgen import ast as A
from resgen import resources as R
from resgen.config import GeneratorConfig
from resgen.errors import ErrorCodes, OutputError, StructuralInconsistencyError
from resgen.loader import discover_bundles, load_tables
from resgen.naming import NameGenerator, content_hash
from resgen.printer import render
from resgen.resource_visitor import ResourceVisitor

__all__ = [
    "CODEC_LOOKUP_TABLE",
    "KEXT_TABLE",
    "VENDOR_MODS",
    "CONTROLLER_TABLE",
    "ResourceCompiler",
    "ResourceGenerator",
    "compile_resources",
]

_log = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Symbols the host project links against.
CODEC_LOOKUP_TABLE = "ADDPR(codecLookupTable)"
KEXT_TABLE = "ADDPR(kextTable)"
VENDOR_MODS = "ADDPR(vendorMods)"
CONTROLLER_TABLE = "ADDPR(controllerTable)"


def _size_symbol(table: str) -> str:
    # ADDPR(kextTable) -> ADDPR(kextTableSize)
    return table[:-1] + "Size)"


class ResourceCompiler(ResourceVisitor[Any]):
    """
    Compiles resources into a ``SourceCode`` tree.

    State kept across visits:

    * ``buffers``: content hash → name of the byte array already holding
      those bytes.  Identical patch buffers and identical codec files are
      emitted once and shared.
    * ``kext_indices``: kext name → index in the kext table, filled in by
      ``visit_kext_table`` and read by ``visit_binary_patch``.  A kext is
      also reachable through its bundle identifier.
    * ``bundle_dir``: directory of the codec bundle being compiled; codec
      file paths are resolved against it.
    """

    def __init__(
        self,
        source_code: A.SourceCode,
        types: Optional[A.TypeRegistry] = None,
        names: Optional[NameGenerator] = None,
    ) -> None:
        self.source_code = source_code
        self.types = types or A.TypeRegistry()
        self.names = names or NameGenerator()
        self.buffers: Dict[str, str] = {}
        self.kext_indices: Dict[str, int] = {}
        self.kext_table_name = KEXT_TABLE
        self.bundle_dir = Path(".")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _emit(self, statement: A.Statement) -> None:
        self.source_code.append(statement)

    def _section(self, title: str) -> None:
        self._emit(A.CommentLine(f"MARK:- {title}\n"))

    def _table(self, struct: str, name: str, literals: List[A.Expression]) -> None:
        self._emit(
            A.Assign.declare(self.types.struct_array(struct), name, A.Literal(literals))
        )
        self._emit(
            A.Assign.const(self.types.size, _size_symbol(name), A.IntegerLiteral(len(literals)))
        )

    def _buffer(self, data: bytes, prefix: str) -> str:
        """Return the name of a byte array holding *data*, emitting it once."""
        digest = content_hash(data)
        name = self.buffers.get(digest)
        if name is None:
            name = self.names.next(prefix)
            self._emit(A.Assign.static_const(self.types.bytes, name, A.literal_of(data)))
            self.buffers[digest] = name
        return name

    def _string_array(self, prefix: str, values: Tuple[str, ...]) -> str:
        name = self.names.next(prefix)
        self._emit(
            A.Assign.static_const(
                self.types.string_array,
                name,
                A.Literal(A.StringLiteral(v) for v in values),
            )
        )
        return name

    # ------------------------------------------------------------------
    # Codec lookup table
    # ------------------------------------------------------------------

    def visit_codec_lookup_table(self, node: R.CodecLookupTable) -> None:
        self._section("Codec Lookup Section")
        literals = [entry.accept(self) for entry in node]
        self._table("CodecLookupInfo", CODEC_LOOKUP_TABLE, literals)

    def visit_codec_lookup_entry(self, node: R.CodecLookupEntry) -> A.Literal:
        tree = self._string_array("tree", node.tree)
        return A.Literal((
            A.Identifier(tree),
            A.IntegerLiteral(node.depth),
            A.IntegerLiteral(node.controller_count),
            A.BooleanLiteral(node.detect),
        ))

    # ------------------------------------------------------------------
    # Kext table
    # ------------------------------------------------------------------

    def visit_kext_table(self, node: R.KextTable) -> None:
        self._section("Kexts Section")
        self.kext_indices.clear()
        literals = []
        for index, (name, info) in enumerate(node):
            # table names win over bundle identifiers
            self.kext_indices[name] = index
            self.kext_indices.setdefault(info.identifier, index)
            literals.append(info.accept(self))
        self._table("KernelPatcher::KextInfo", self.kext_table_name, literals)

    def visit_kext_info(self, node: R.KextInfo) -> A.Literal:
        paths = self._string_array("kextPath", node.paths)
        return A.Literal((
            A.StringLiteral(node.identifier),
            A.Identifier(paths),
            A.IntegerLiteral(node.num_paths),
            A.Literal((A.BooleanLiteral(False), A.BooleanLiteral(node.reloadable))),
            A.Literal((A.BooleanLiteral(node.detect),)),
            A.Identifier("KernelPatcher::KextInfo::Unloaded"),
        ))

    # ------------------------------------------------------------------
    # Codec bundles
    # ------------------------------------------------------------------

    def visit_vendor_bundles(self, node: R.VendorBundles) -> None:
        # per-vendor sections come first, the vendor table refers to them
        literals = [group.accept(self) for group in node]
        self._section("Vendor Section")
        self._table("VendorModInfo", VENDOR_MODS, literals)

    def visit_codec_bundles(self, node: R.CodecBundles) -> A.Literal:
        self._section(f"Codec Section [{node.vendor.label}]")
        literals = [bundle.accept(self) for bundle in node]
        name = self.names.next("codecMod")
        self._emit(
            A.Assign.static(self.types.struct_array("CodecModInfo"), name, A.Literal(literals))
        )
        return A.Literal((
            A.StringLiteral(node.vendor.label),
            A.hex_literal(node.vendor.id, 16),
            A.Identifier(name),
            A.IntegerLiteral(len(node)),
        ))

    def visit_codec_bundle(self, node: R.CodecBundle) -> A.Literal:
        self.bundle_dir = node.path
        return node.info.accept(self)

    def visit_codec_info(self, node: R.CodecInfo) -> A.Literal:
        layouts, platforms = node.files.accept(self)
        patches = node.patches.accept(self)
        revisions = node.revisions.accept(self)
        return A.Literal((
            A.StringLiteral(node.codec_name),
            A.hex_literal(node.id, 16),
            revisions,
            A.IntegerLiteral(node.num_revisions),
            platforms,
            A.IntegerLiteral(node.files.num_platforms),
            layouts,
            A.IntegerLiteral(node.files.num_layouts),
            patches,
            A.IntegerLiteral(node.num_patches),
        ))

    def visit_codec_files(self, node: R.CodecFiles) -> Tuple[A.Identifier, A.Identifier]:
        """Emit the layouts and platforms arrays; return their identifiers."""
        file_array = self.types.struct_array("CodecModInfo::File")
        layout_literals = [f.accept(self) for f in node.layouts]
        platform_literals = [f.accept(self) for f in node.platforms]
        layouts = self.names.next("layouts")
        platforms = self.names.next("platforms")
        self._emit(A.Assign.static_const(file_array, layouts, A.Literal(layout_literals)))
        self._emit(A.Assign.static_const(file_array, platforms, A.Literal(platform_literals)))
        return A.Identifier(layouts), A.Identifier(platforms)

    def visit_codec_file(self, node: R.CodecFile) -> A.Literal:
        path = self.bundle_dir / node.path
        try:
            data = path.read_bytes()
        except OSError as exc:
            _log.warning(
                "Failed to read the requested file %r in %s: %s",
                node.path, self.bundle_dir, exc.strerror or exc,
            )
            buffer: A.Expression = A.NULL_POINTER
            num_bytes = 0
        else:
            buffer = A.Identifier(self._buffer(data, "file"))
            num_bytes = len(data)
        return A.Literal((
            buffer,
            A.IntegerLiteral(num_bytes),
            A.IntegerLiteral(node.min_kernel),
            A.IntegerLiteral(node.max_kernel),
            A.IntegerLiteral(node.id),
        ))

    # ------------------------------------------------------------------
    # Controller table
    # ------------------------------------------------------------------

    def visit_controller_table(self, node: R.ControllerTable) -> None:
        self._section("Controllers Section")
        literals = [entry.accept(self) for entry in node]
        self._table("ControllerModInfo", CONTROLLER_TABLE, literals)

    def visit_controller_entry(self, node: R.ControllerEntry) -> A.Literal:
        patches = node.patches.accept(self)
        revisions = node.revisions.accept(self)
        return A.Literal((
            A.StringLiteral(node.description),
            A.hex_literal(node.vendor.id, 32),
            A.hex_literal(node.device, 32),
            revisions,
            A.IntegerLiteral(node.num_revisions),
            A.IntegerLiteral(node.platform),
            A.Identifier(node.model.cpp_value),
            patches,
            A.IntegerLiteral(node.num_patches),
        ))

    # ------------------------------------------------------------------
    # Binary patches
    # ------------------------------------------------------------------

    def visit_binary_patches(self, node: R.BinaryPatches) -> A.Identifier:
        literals = [patch.accept(self) for patch in node]
        name = self.names.next("patches")
        self._emit(
            A.Assign.static_const(self.types.struct_array("KextPatch"), name, A.Literal(literals))
        )
        return A.Identifier(name)

    def visit_binary_patch(self, node: R.BinaryPatch) -> A.Literal:
        find = self._buffer(node.find, "patchBuf")
        replace = self._buffer(node.replace, "patchBuf")
        try:
            index = self.kext_indices[node.executable]
        except KeyError:
            raise StructuralInconsistencyError(node.executable) from None
        lookup = A.Literal((
            A.ArrayLookup(
                A.AddressOf(A.Identifier(self.kext_table_name)),
                A.IntegerLiteral(index),
            ),
            A.Identifier(find),
            A.Identifier(replace),
            A.IntegerLiteral(node.size),
            A.IntegerLiteral(node.count),
        ))
        return A.Literal((
            lookup,
            A.IntegerLiteral(node.min_kernel),
            A.IntegerLiteral(node.max_kernel),
        ))

    # ------------------------------------------------------------------
    # Revisions
    # ------------------------------------------------------------------

    def visit_revisions(self, node: R.Revisions) -> A.Expression:
        """``nullptr`` when empty, otherwise the identifier of a new array."""
        if not len(node):
            return A.NULL_POINTER
        name = self.names.next("revisions")
        self._emit(
            A.Assign.static_const(
                self.types.uint_array(32),
                name,
                A.Literal(A.hex_literal(rev, 32) for rev in node),
            )
        )
        return A.Identifier(name)


# ═══════════════════════════════════════════════════════════════════════════
# Orchestrator
# ═══════════════════════════════════════════════════════════════════════════

class ResourceGenerator:
    """
    Generates ``kern_resources.cpp`` from a resource directory.

    The three tables are loaded at construction; ``LoadError`` propagates
    if any of them cannot be decoded.  Codec bundles are discovered when
    the source is built.

    Usage::

        gen = ResourceGenerator("Resources")
        gen.write("kern_resources.cpp")
    """

    def __init__(
        self,
        resource_dir: PathLike,
        config: Optional[GeneratorConfig] = None,
    ) -> None:
        self.resource_dir = Path(resource_dir)
        self.config = config or GeneratorConfig()
        for warning in self.config.validate():
            _log.warning("config: %s", warning)
        tables = load_tables(self.resource_dir, self.config)
        self.codecs = tables.codecs
        self.kexts = tables.kexts
        self.controllers = tables.controllers
        _log.info(
            "Loaded %d codecs, %d kexts, %d controllers from %s",
            len(self.codecs), len(self.kexts), len(self.controllers),
            self.resource_dir,
        )

    def discover_bundles(self) -> R.VendorBundles:
        return discover_bundles(self.resource_dir, self.config)

    def header_lines(self) -> List[str]:
        cfg = self.config
        width = cfg.banner_width
        lines = [
            "",
            f" {cfg.output_name}",
            f" {cfg.project}",
            "",
            f" Created by ResourceGenerator on {cfg.generation_time()}.",
            f" {cfg.copyright}",
            "",
            " This is an auto-generated file.",
            " Please avoid any direct modifications.",
            "",
        ]
        padded = [line.ljust(width) for line in lines]
        padded[-1] += "\n"
        return padded

    def build(self, bundles: Optional[R.VendorBundles] = None) -> A.SourceCode:
        """Compile everything into a fresh ``SourceCode`` tree."""
        if bundles is None:
            bundles = self.discover_bundles()
        source = A.SourceCode()
        source.extend(A.CommentLine(line) for line in self.header_lines())
        source.append(A.Include(self.config.header))

        compiler = ResourceCompiler(source)
        self.codecs.accept(compiler)
        self.kexts.accept(compiler)
        bundles.accept(compiler)
        self.controllers.accept(compiler)
        _log.debug(
            "Compiled %d statements, %d shared buffers",
            len(source), len(compiler.buffers),
        )
        return source

    def generate(self) -> str:
        return render(self.build(), self.config.indent)

    def write(self, path: PathLike) -> Path:
        """Render and write the generated source to *path*."""
        text = self.generate()
        out = Path(path)
        try:
            out.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise OutputError(
                f"cannot write generated source: {exc.strerror or exc}",
                code=ErrorCodes.WRITE_FAILED,
                path=out,
                cause=exc,
            ) from exc
        _log.info("Wrote %d bytes to %s", len(text.encode("utf-8")), out)
        return out


def compile_resources(
    resource_dir: PathLike,
    output: PathLike,
    config: Optional[GeneratorConfig] = None,
) -> Path:
    """Generate the C++ source for *resource_dir* and write it to *output*."""
    return ResourceGenerator(resource_dir, config).write(output)
