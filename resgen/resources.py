"""resgen/resources.py – Resource domain model.

These are the already-decoded contents of the resource directory:

    CodecLookup.plist  →  CodecLookupTable  (of CodecLookupEntry)
    Kexts.plist        →  KextTable         (of KextInfo)
    Controllers.plist  →  ControllerTable   (of ControllerEntry)
    <Bundle>/Info.plist→  CodecBundle       (of CodecInfo)

Codec bundles are grouped per vendor into ``CodecBundles`` and all groups
into one ``VendorBundles``.

Every entity is a frozen dataclass.  The resource compiler reads them and
never mutates them.  Each exposes ``accept(visitor)`` which routes to the
one ``ResourceVisitor.visit_<entity>`` method that matches it.  Decoding
from plist lives in ``resgen.loader``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Tuple,
    TypeVar,
)

from resgen.errors import InvalidPatchError

if TYPE_CHECKING:
    from resgen.resource_visitor import ResourceVisitor

__all__ = [
    "Vendor",
    "ComputerModel",
    "CodecLookupEntry",
    "CodecLookupTable",
    "KextInfo",
    "KextTable",
    "BinaryPatch",
    "BinaryPatches",
    "Revisions",
    "CodecFile",
    "CodecFiles",
    "CodecInfo",
    "CodecBundle",
    "CodecBundles",
    "VendorBundles",
    "ControllerEntry",
    "ControllerTable",
]

T = TypeVar("T")


# ═══════════════════════════════════════════════════════════════════════════
# ENUMERATIONS
# ═══════════════════════════════════════════════════════════════════════════

class Vendor(enum.Enum):
    """
    Supported HDA vendors.

    Each carries:
      • label: the name used in plists and in the generated source
      • id:    the PCI vendor id
    """

    AMD = ("AMD", 4098)
    ANALOG_DEVICES = ("AnalogDevices", 4564)
    CIRRUS_LOGIC = ("CirrusLogic", 4115)
    CONEXANT = ("Conexant", 5361)
    CREATIVE = ("Creative", 4354)
    IDT = ("IDT", 4381)
    INTEL = ("Intel", 32902)
    NVIDIA = ("NVIDIA", 4318)
    REALTEK = ("Realtek", 4332)
    VIA = ("VIA", 4358)

    def __init__(self, label: str, vendor_id: int) -> None:
        self.label = label
        self.id = vendor_id

    @property
    def hex_id(self) -> str:
        return f"0x{self.id:X}"

    @classmethod
    def from_string(cls, s: str) -> Vendor:
        """Look a vendor up by its plist label (exact match)."""
        for member in cls:
            if member.label == s:
                return member
        raise ValueError(f"unknown vendor {s!r}")

    def __str__(self) -> str:
        return self.label


class ComputerModel(enum.Enum):
    """Computer models a controller patch applies to."""

    DESKTOP = ("Desktop", "WIOKit::ComputerModel::ComputerDesktop")
    LAPTOP = ("Laptop", "WIOKit::ComputerModel::ComputerLaptop")
    ANY = ("Any", "WIOKit::ComputerModel::ComputerAny")

    def __init__(self, label: str, cpp_value: str) -> None:
        self.label = label
        self.cpp_value = cpp_value

    @classmethod
    def from_string(cls, s: str) -> ComputerModel:
        for member in cls:
            if member.label == s:
                return member
        raise ValueError(f"unknown computer model {s!r}")

    def __str__(self) -> str:
        return self.label


# ═══════════════════════════════════════════════════════════════════════════
# CODEC LOOKUP TABLE
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CodecLookupEntry:
    """Where to find one HDA codec in the IORegistry."""

    tree: Tuple[str, ...]
    controller_count: int
    detect: bool = False
    comment: str = "N/A"

    def __post_init__(self) -> None:
        object.__setattr__(self, "tree", tuple(self.tree))

    @property
    def depth(self) -> int:
        return len(self.tree)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_codec_lookup_entry(self)


@dataclass(frozen=True)
class CodecLookupTable:
    entries: Tuple[CodecLookupEntry, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CodecLookupEntry]:
        return iter(self.entries)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_codec_lookup_table(self)


# ═══════════════════════════════════════════════════════════════════════════
# KEXT TABLE
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class KextInfo:
    """A kext the host patches: bundle identifier and executable paths."""

    identifier: str
    paths: Tuple[str, ...]
    reloadable: bool = False
    detect: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "paths", tuple(self.paths))

    @property
    def num_paths(self) -> int:
        return len(self.paths)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_kext_info(self)


@dataclass(frozen=True)
class KextTable:
    """
    Kexts keyed by the executable name that patches refer to.

    Entries are stored as an ordered tuple of ``(name, info)`` pairs: the
    order here is the order of the emitted ``KextInfo`` array and
    therefore fixes every kext index a patch resolves to.
    """

    entries: Tuple[Tuple[str, KextInfo], ...] = ()

    def __post_init__(self) -> None:
        pairs = tuple((name, info) for name, info in self.entries)
        seen = set()
        for name, _ in pairs:
            if name in seen:
                raise ValueError(f"duplicate kext {name!r}")
            seen.add(name)
        object.__setattr__(self, "entries", pairs)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, KextInfo]) -> KextTable:
        """Build a table in the mapping's iteration order."""
        return cls(tuple(mapping.items()))

    def keys(self) -> List[str]:
        return [name for name, _ in self.entries]

    def __getitem__(self, name: str) -> KextInfo:
        for key, info in self.entries:
            if key == name:
                return info
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Tuple[str, KextInfo]]:
        return iter(self.entries)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_kext_table(self)


# ═══════════════════════════════════════════════════════════════════════════
# BINARY PATCHES & REVISIONS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BinaryPatch:
    """
    A find/replace patch applied to a kext executable.

    ``find`` and ``replace`` must be the same length; construction raises
    ``InvalidPatchError`` otherwise.  A kernel bound of ``0`` means
    unbounded.
    """

    find: bytes
    replace: bytes
    count: int
    executable: str
    min_kernel: int = 0
    max_kernel: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "find", bytes(self.find))
        object.__setattr__(self, "replace", bytes(self.replace))
        if len(self.find) != len(self.replace):
            raise InvalidPatchError(
                len(self.find), len(self.replace), self.executable
            )

    @property
    def size(self) -> int:
        return len(self.find)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_binary_patch(self)


@dataclass(frozen=True)
class BinaryPatches:
    patches: Tuple[BinaryPatch, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "patches", tuple(self.patches))

    def __len__(self) -> int:
        return len(self.patches)

    def __iter__(self) -> Iterator[BinaryPatch]:
        return iter(self.patches)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_binary_patches(self)


@dataclass(frozen=True)
class Revisions:
    """Supported codec/controller revision codes.  May be empty."""

    revisions: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "revisions", tuple(self.revisions))

    def __len__(self) -> int:
        return len(self.revisions)

    def __iter__(self) -> Iterator[int]:
        return iter(self.revisions)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_revisions(self)


# ═══════════════════════════════════════════════════════════════════════════
# CODEC BUNDLES
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CodecFile:
    """A layout or platforms file shipped inside a codec bundle.

    ``path`` is relative to the bundle directory.
    """

    id: int
    path: str
    min_kernel: int = 0
    max_kernel: int = 0

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_codec_file(self)


@dataclass(frozen=True)
class CodecFiles:
    layouts: Tuple[CodecFile, ...] = ()
    platforms: Tuple[CodecFile, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "layouts", tuple(self.layouts))
        object.__setattr__(self, "platforms", tuple(self.platforms))

    @property
    def num_layouts(self) -> int:
        return len(self.layouts)

    @property
    def num_platforms(self) -> int:
        return len(self.platforms)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_codec_files(self)


@dataclass(frozen=True)
class CodecInfo:
    """The ``Info.plist`` of a codec bundle."""

    vendor: Vendor
    codec_name: str
    id: int
    files: CodecFiles = field(default_factory=CodecFiles)
    patches: BinaryPatches = field(default_factory=BinaryPatches)
    revisions: Revisions = field(default_factory=Revisions)

    @property
    def num_revisions(self) -> int:
        return len(self.revisions)

    @property
    def num_patches(self) -> int:
        return len(self.patches)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_codec_info(self)


@dataclass(frozen=True)
class CodecBundle:
    """A codec bundle directory and its decoded ``Info.plist``."""

    info: CodecInfo
    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    @property
    def vendor(self) -> Vendor:
        return self.info.vendor

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_codec_bundle(self)


@dataclass(frozen=True)
class CodecBundles:
    """All codec bundles of one vendor."""

    vendor: Vendor
    bundles: Tuple[CodecBundle, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "bundles", tuple(self.bundles))

    @staticmethod
    def group(bundles: Iterable[CodecBundle]) -> VendorBundles:
        """Group *bundles* by vendor.

        Vendors appear in the order their first bundle appears, and each
        vendor keeps its bundles in input order.
        """
        grouped: Dict[Vendor, List[CodecBundle]] = {}
        for bundle in bundles:
            grouped.setdefault(bundle.vendor, []).append(bundle)
        return VendorBundles(
            tuple(CodecBundles(vendor, tuple(items)) for vendor, items in grouped.items())
        )

    def __len__(self) -> int:
        return len(self.bundles)

    def __iter__(self) -> Iterator[CodecBundle]:
        return iter(self.bundles)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_codec_bundles(self)


@dataclass(frozen=True)
class VendorBundles:
    """The per-vendor bundle groups of a whole resource directory."""

    groups: Tuple[CodecBundles, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "groups", tuple(self.groups))

    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self) -> Iterator[CodecBundles]:
        return iter(self.groups)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_vendor_bundles(self)


# ═══════════════════════════════════════════════════════════════════════════
# CONTROLLER TABLE
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ControllerEntry:
    """An HDA controller and the patches applied to it."""

    device: int
    description: str
    vendor: Vendor
    patches: BinaryPatches = field(default_factory=BinaryPatches)
    revisions: Revisions = field(default_factory=Revisions)
    model: ComputerModel = ComputerModel.ANY
    platform: int = 0

    @property
    def num_revisions(self) -> int:
        return len(self.revisions)

    @property
    def num_patches(self) -> int:
        return len(self.patches)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_controller_entry(self)


@dataclass(frozen=True)
class ControllerTable:
    entries: Tuple[ControllerEntry, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ControllerEntry]:
        return iter(self.entries)

    def accept(self, visitor: ResourceVisitor[T]) -> T:
        return visitor.visit_controller_table(self)
