"""
resgen/loader.py
================

Decodes the resource directory into the domain model of
``resgen.resources``.

Layout of a resource directory::

    Resources/
        CodecLookup.plist
        Controllers.plist
        Kexts.plist
        ALC892/                 ← codec bundle
            Info.plist
            layout1.xml.zlib
            Platforms1.xml.zlib
        ...

Optional keys fall back to their defaults (``Detect`` → false,
``MinKernel`` → 0, ``Patches`` → [] ...).  A table that cannot be
decoded raises ``LoadError``; a bundle that cannot be decoded raises
``BundleError`` from ``load_codec_bundle`` and is skipped with a logged
error by ``discover_bundles``.
"""

from __future__ import annotations

import logging
import plistlib
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from resgen.config import GeneratorConfig
from resgen.errors import (
    BundleError,
    ErrorCodes,
    InvalidPatchError,
    LoadError,
)
from resgen.resources import (
    BinaryPatch,
    BinaryPatches,
    CodecBundle,
    CodecBundles,
    CodecFile,
    CodecFiles,
    CodecInfo,
    CodecLookupEntry,
    CodecLookupTable,
    ComputerModel,
    ControllerEntry,
    ControllerTable,
    KextInfo,
    KextTable,
    Revisions,
    Vendor,
    VendorBundles,
)

__all__ = [
    "read_plist",
    "decode_codec_lookup_table",
    "decode_kext_table",
    "decode_controller_table",
    "decode_binary_patches",
    "decode_codec_info",
    "load_codec_lookup_table",
    "load_kext_table",
    "load_controller_table",
    "load_codec_bundle",
    "discover_bundles",
    "ResourceTables",
    "load_tables",
]

_log = logging.getLogger(__name__)

PathLike = Union[str, Path]
V = TypeVar("V")

_MISSING = object()


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _type_name(expected: Union[Type[Any], Tuple[Type[Any], ...]]) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__


def _check_type(value: Any, expected: Any, key: str, where: str) -> Any:
    # plist booleans are ints to Python; keep them apart
    if expected is int and isinstance(value, bool):
        ok = False
    else:
        ok = isinstance(value, expected)
    if not ok:
        raise LoadError(
            f"{where}: {key!r} must be {_type_name(expected)}, "
            f"got {type(value).__name__}",
            code=ErrorCodes.INVALID_VALUE,
        )
    return value


def _field(
    record: Mapping[str, Any],
    key: str,
    expected: Any,
    where: str,
    default: Any = _MISSING,
) -> Any:
    """Fetch *key* from a plist dictionary, with an optional default."""
    if key not in record:
        if default is _MISSING:
            raise LoadError(
                f"{where}: missing required key {key!r}",
                code=ErrorCodes.MISSING_KEY,
            )
        return default
    return _check_type(record[key], expected, key, where)


def _as_record(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise LoadError(
            f"{where}: expected a dictionary, got {type(value).__name__}",
            code=ErrorCodes.INVALID_VALUE,
        )
    return value


def _as_array(value: Any, where: str) -> List[Any]:
    if not isinstance(value, list):
        raise LoadError(
            f"{where}: expected an array, got {type(value).__name__}",
            code=ErrorCodes.INVALID_VALUE,
        )
    return value


def _strings(values: List[Any], key: str, where: str) -> Tuple[str, ...]:
    return tuple(_check_type(v, str, key, where) for v in values)


def _ints(values: List[Any], key: str, where: str) -> Tuple[int, ...]:
    return tuple(_check_type(v, int, key, where) for v in values)


def _enum(parse: Callable[[str], V], raw: str, key: str, where: str) -> V:
    try:
        return parse(raw)
    except ValueError as exc:
        raise LoadError(f"{where}: {key!r}: {exc}", code=ErrorCodes.INVALID_VALUE) from exc


# ---------------------------------------------------------------------------
# Raw plist access
# ---------------------------------------------------------------------------

def read_plist(path: PathLike) -> Any:
    """Read and parse an XML or binary plist file."""
    p = Path(path)
    try:
        with p.open("rb") as fp:
            return plistlib.load(fp)
    except OSError as exc:
        raise LoadError(
            f"cannot read plist: {exc.strerror or exc}",
            code=ErrorCodes.TABLE_UNREADABLE,
            path=p,
            cause=exc,
        ) from exc
    except Exception as exc:
        # plistlib surfaces malformed input as assorted exception types
        raise LoadError(
            f"cannot decode plist: {exc}",
            code=ErrorCodes.TABLE_MALFORMED,
            path=p,
            cause=exc,
        ) from exc


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def decode_codec_lookup_table(data: Any) -> CodecLookupTable:
    """Decode the contents of ``CodecLookup.plist`` (an array of dicts)."""
    entries = []
    for index, raw in enumerate(_as_array(data, "CodecLookup")):
        where = f"CodecLookup[{index}]"
        record = _as_record(raw, where)
        tree = _field(record, "Tree", list, where)
        entries.append(
            CodecLookupEntry(
                tree=_strings(tree, "Tree", where),
                controller_count=_field(record, "controllerNum", int, where),
                detect=_field(record, "Detect", bool, where, default=False),
                comment=_field(record, "Comment", str, where, default="N/A"),
            )
        )
    return CodecLookupTable(tuple(entries))


def decode_kext_table(data: Any) -> KextTable:
    """Decode the contents of ``Kexts.plist`` (a dict keyed by kext name).

    The dictionary order of the plist file is kept.
    """
    entries = []
    for name, raw in _as_record(data, "Kexts").items():
        where = f"Kexts[{name!r}]"
        record = _as_record(raw, where)
        paths = _field(record, "Paths", list, where)
        entries.append(
            (
                name,
                KextInfo(
                    identifier=_field(record, "Id", str, where),
                    paths=_strings(paths, "Paths", where),
                    reloadable=_field(record, "Reloadable", bool, where, default=False),
                    detect=_field(record, "Detect", bool, where, default=False),
                ),
            )
        )
    return KextTable(tuple(entries))


def decode_binary_patches(data: Any, where: str) -> BinaryPatches:
    patches = []
    for index, raw in enumerate(_as_array(data, where)):
        here = f"{where}[{index}]"
        record = _as_record(raw, here)
        patches.append(
            BinaryPatch(
                find=_field(record, "Find", bytes, here),
                replace=_field(record, "Replace", bytes, here),
                count=_field(record, "Count", int, here),
                executable=_field(record, "Name", str, here),
                min_kernel=_field(record, "MinKernel", int, here, default=0),
                max_kernel=_field(record, "MaxKernel", int, here, default=0),
            )
        )
    return BinaryPatches(tuple(patches))


def _decode_revisions(record: Mapping[str, Any], where: str) -> Revisions:
    raw = _field(record, "Revisions", list, where, default=[])
    return Revisions(_ints(raw, "Revisions", where))


def decode_controller_table(data: Any) -> ControllerTable:
    """Decode the contents of ``Controllers.plist`` (an array of dicts)."""
    entries = []
    for index, raw in enumerate(_as_array(data, "Controllers")):
        where = f"Controllers[{index}]"
        record = _as_record(raw, where)
        vendor = _field(record, "Vendor", str, where)
        model = _field(record, "Model", str, where, default="Any")
        entries.append(
            ControllerEntry(
                device=_field(record, "Device", int, where),
                description=_field(record, "Name", str, where),
                vendor=_enum(Vendor.from_string, vendor, "Vendor", where),
                patches=decode_binary_patches(
                    _field(record, "Patches", list, where, default=[]),
                    f"{where}.Patches",
                ),
                revisions=_decode_revisions(record, where),
                model=_enum(ComputerModel.from_string, model, "Model", where),
                platform=_field(record, "Platform", int, where, default=0),
            )
        )
    return ControllerTable(tuple(entries))


def _decode_files(data: List[Any], where: str) -> Tuple[CodecFile, ...]:
    files = []
    for index, raw in enumerate(data):
        here = f"{where}[{index}]"
        record = _as_record(raw, here)
        files.append(
            CodecFile(
                id=_field(record, "Id", int, here),
                path=_field(record, "Path", str, here),
                min_kernel=_field(record, "MinKernel", int, here, default=0),
                max_kernel=_field(record, "MaxKernel", int, here, default=0),
            )
        )
    return tuple(files)


def decode_codec_info(data: Any) -> CodecInfo:
    """Decode the ``Info.plist`` of a codec bundle."""
    where = "Info"
    record = _as_record(data, where)
    files = _as_record(_field(record, "Files", dict, where), "Files")
    # Layouts/Platforms are expected but tolerated when absent
    layouts = _field(files, "Layouts", list, "Files", default=[])
    platforms = _field(files, "Platforms", list, "Files", default=[])
    return CodecInfo(
        vendor=_enum(Vendor.from_string, _field(record, "Vendor", str, where), "Vendor", where),
        codec_name=_field(record, "CodecName", str, where),
        id=_field(record, "CodecID", int, where),
        files=CodecFiles(
            layouts=_decode_files(layouts, "Files.Layouts"),
            platforms=_decode_files(platforms, "Files.Platforms"),
        ),
        patches=decode_binary_patches(
            _field(record, "Patches", list, where, default=[]), "Patches"
        ),
        revisions=_decode_revisions(record, where),
    )


# ---------------------------------------------------------------------------
# File-level loaders
# ---------------------------------------------------------------------------

def _load(path: PathLike, decode: Callable[[Any], V]) -> V:
    p = Path(path)
    data = read_plist(p)
    try:
        return decode(data)
    except InvalidPatchError as exc:
        exc.path = p
        raise
    except LoadError as exc:
        if exc.path is None:
            exc.path = p
        raise


def load_codec_lookup_table(path: PathLike) -> CodecLookupTable:
    return _load(path, decode_codec_lookup_table)


def load_kext_table(path: PathLike) -> KextTable:
    return _load(path, decode_kext_table)


def load_controller_table(path: PathLike) -> ControllerTable:
    return _load(path, decode_controller_table)


def load_codec_bundle(directory: PathLike, info_name: str = "Info.plist") -> CodecBundle:
    """Load the codec bundle at *directory*.

    Raises ``BundleError`` when the bundle's info cannot be decoded.
    """
    d = Path(directory)
    try:
        info = _load(d / info_name, decode_codec_info)
    except LoadError as exc:
        raise BundleError(
            f"the codec bundle at {str(d)!r} is not valid: {exc.message}",
            path=exc.path,
            cause=exc,
        ) from exc
    return CodecBundle(info=info, path=d)


def _is_bundle_candidate(path: Path, config: GeneratorConfig) -> bool:
    if path.name.startswith("."):
        return False
    if not path.is_dir():
        return False
    return path.suffix.lower() not in config.package_suffixes


def discover_bundles(
    resource_dir: PathLike,
    config: Optional[GeneratorConfig] = None,
) -> VendorBundles:
    """Find and decode every codec bundle in *resource_dir*.

    Bundles are visited in name order.  An invalid bundle is logged and
    skipped.  The result is grouped by vendor.
    """
    config = config or GeneratorConfig()
    root = Path(resource_dir)
    bundles: List[CodecBundle] = []
    for child in sorted(root.iterdir(), key=lambda p: p.name):
        if not _is_bundle_candidate(child, config):
            continue
        try:
            bundles.append(load_codec_bundle(child, config.bundle_info_file))
        except BundleError as exc:
            _log.error("%s", exc)
            continue
        _log.debug("Loaded codec bundle %s", child.name)
    return CodecBundles.group(bundles)


# ---------------------------------------------------------------------------
# All tables at once
# ---------------------------------------------------------------------------

class ResourceTables:
    """The three configuration tables of a resource directory."""

    __slots__ = ("codecs", "kexts", "controllers")

    def __init__(
        self,
        codecs: CodecLookupTable,
        kexts: KextTable,
        controllers: ControllerTable,
    ) -> None:
        self.codecs = codecs
        self.kexts = kexts
        self.controllers = controllers

    def summary(self) -> Dict[str, int]:
        return {
            "codecs": len(self.codecs),
            "kexts": len(self.kexts),
            "controllers": len(self.controllers),
        }


def load_tables(
    resource_dir: PathLike,
    config: Optional[GeneratorConfig] = None,
) -> ResourceTables:
    """Load ``CodecLookup.plist``, ``Controllers.plist`` and ``Kexts.plist``."""
    config = config or GeneratorConfig()
    root = Path(resource_dir)
    codecs = load_codec_lookup_table(root / config.codec_lookup_file)
    controllers = load_controller_table(root / config.controllers_file)
    kexts = load_kext_table(root / config.kexts_file)
    return ResourceTables(codecs, kexts, controllers)
