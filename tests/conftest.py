# tests/conftest.py
"""
Shared fixtures and builders for the resgen test-suite.

``resource_dir`` lays out a small but complete resource directory in
``tmp_path``: the three tables, two Realtek bundles sharing a layout
file, one Conexant bundle, and some directories that bundle discovery
must ignore.
"""

import plistlib
from datetime import datetime
from pathlib import Path

import pytest

from resgen.config import GeneratorConfig
from resgen.resources import (
    BinaryPatch,
    BinaryPatches,
    CodecFile,
    CodecFiles,
    CodecInfo,
    KextInfo,
    KextTable,
    Revisions,
    Vendor,
)

FIXED_TIME = datetime(2018, 4, 13, 12, 0, 0)

LAYOUT_BYTES = bytes(range(20))
PLATFORMS_BYTES = b"\xde\xad\xbe\xef"


# ─────────────────────────────────────────────────────────────────
#  Plist contents
# ─────────────────────────────────────────────────────────────────

CODEC_LOOKUP = [
    {
        "Comment": "Intel HDEF",
        "Tree": ["AppleACPIPlatformExpert", "PCI0@0", "HDEF@1B"],
        "controllerNum": 1,
        "Detect": True,
    },
    {
        "Tree": ["AppleACPIPlatformExpert", "PCI0@0", "HDAU@3"],
        "controllerNum": 2,
    },
]

# Kexts.plist is a dictionary: the order below must survive decoding.
KEXTS = {
    "AppleHDAController": {
        "Id": "com.apple.driver.AppleHDAController",
        "Paths": [
            "/System/Library/Extensions/AppleHDA.kext/Contents/PlugIns/"
            "AppleHDAController.kext/Contents/MacOS/AppleHDAController",
        ],
    },
    "AppleHDA": {
        "Id": "com.apple.driver.AppleHDA",
        "Paths": ["/System/Library/Extensions/AppleHDA.kext/Contents/MacOS/AppleHDA"],
        "Reloadable": True,
        "Detect": True,
    },
}

CONTROLLERS = [
    {
        "Device": 0x8C20,
        "Name": "Intel 8 Series HD Audio",
        "Vendor": "Intel",
        "Model": "Laptop",
        "Platform": 7,
        "Revisions": [0x100918],
        "Patches": [
            {
                "Find": b"\x3d\x0c\x0c\x00\x00",
                "Replace": b"\x3d\x20\x8c\x00\x00",
                "Count": 1,
                "Name": "AppleHDAController",
                "MinKernel": 13,
            },
        ],
    },
    {
        "Device": 0xA170,
        "Name": "Intel 100 Series HD Audio",
        "Vendor": "Intel",
    },
]


def realtek_info(codec_name="ALC892", codec_id=0x0892):
    return {
        "Vendor": "Realtek",
        "CodecName": codec_name,
        "CodecID": codec_id,
        "Files": {
            "Layouts": [
                {"Id": 1, "Path": "layout1.xml.zlib", "MinKernel": 13},
            ],
            "Platforms": [
                {"Id": 1, "Path": "Platforms1.xml.zlib"},
            ],
        },
        "Patches": [
            {
                "Find": b"\x8b\x19\xd4\x11",
                "Replace": b"\x92\x08\xec\x10",
                "Count": 1,
                "Name": "AppleHDA",
            },
        ],
        "Revisions": [0x100302],
    }


CONEXANT_INFO = {
    "Vendor": "Conexant",
    "CodecName": "CX20751/2",
    "CodecID": 0x510F,
    "Files": {
        "Layouts": [{"Id": 3, "Path": "layout3.xml.zlib", "MaxKernel": 19}],
    },
}


# ─────────────────────────────────────────────────────────────────
#  Helpers
# ─────────────────────────────────────────────────────────────────

def write_plist(path: Path, data) -> Path:
    """Write *data* as an XML plist, keeping dictionary order."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as fp:
        plistlib.dump(data, fp, sort_keys=False)
    return path


def write_bundle(root: Path, name: str, info, files=None) -> Path:
    bundle = root / name
    write_plist(bundle / "Info.plist", info)
    for file_name, content in (files or {}).items():
        (bundle / file_name).write_bytes(content)
    return bundle


def fixed_config(**overrides) -> GeneratorConfig:
    return GeneratorConfig(timestamp=FIXED_TIME, **overrides)


# ─────────────────────────────────────────────────────────────────
#  Domain model builders
# ─────────────────────────────────────────────────────────────────

def make_patch(find=b"\x01\x02", replace=b"\x03\x04", executable="AppleHDA",
               count=1, min_kernel=0, max_kernel=0) -> BinaryPatch:
    return BinaryPatch(find, replace, count, executable, min_kernel, max_kernel)


def make_kext_table(*names) -> KextTable:
    return KextTable(tuple(
        (name, KextInfo(f"com.apple.driver.{name}", (f"/S/L/E/{name}.kext",)))
        for name in names
    ))


def make_codec_info(patches=(), revisions=(), layouts=(), platforms=(),
                    vendor=Vendor.REALTEK, name="ALC892", codec_id=0x0892) -> CodecInfo:
    return CodecInfo(
        vendor=vendor,
        codec_name=name,
        id=codec_id,
        files=CodecFiles(tuple(layouts), tuple(platforms)),
        patches=BinaryPatches(tuple(patches)),
        revisions=Revisions(tuple(revisions)),
    )


def make_file(path="layout1.xml.zlib", file_id=1) -> CodecFile:
    return CodecFile(file_id, path)


# ─────────────────────────────────────────────────────────────────
#  Fixtures
# ─────────────────────────────────────────────────────────────────

@pytest.fixture
def resource_dir(tmp_path) -> Path:
    root = tmp_path / "Resources"
    write_plist(root / "CodecLookup.plist", CODEC_LOOKUP)
    write_plist(root / "Kexts.plist", KEXTS)
    write_plist(root / "Controllers.plist", CONTROLLERS)

    shared = {"layout1.xml.zlib": LAYOUT_BYTES, "Platforms1.xml.zlib": PLATFORMS_BYTES}
    write_bundle(root, "ALC892", realtek_info(), shared)
    write_bundle(root, "ALC887", realtek_info("ALC887", 0x0887), shared)
    write_bundle(root, "CX20751", CONEXANT_INFO, {"layout3.xml.zlib": b"\x01"})

    # not codec bundles
    (root / ".git").mkdir()
    (root / "AppleHDA.kext").mkdir()
    (root / "README.txt").write_text("not a bundle")
    return root


@pytest.fixture
def config() -> GeneratorConfig:
    return fixed_config()
