"""
resgen/resource_visitor.py
==========================

Visitor contract for the resource domain model.

One abstract method per entity in ``resgen.resources``; the entities only
know how to ``accept`` a visitor, and compiling them is entirely the
visitor's business.
"""

from __future__ import annotations

import abc
from typing import Generic, TypeVar

from resgen import resources as R

__all__ = ["ResourceVisitor"]

T = TypeVar("T")


class ResourceVisitor(abc.ABC, Generic[T]):
    """Abstract base class for resource visitors."""

    def visit(self, entity) -> T:
        """Dispatch to the appropriate visit method."""
        return entity.accept(self)

    # --- Codec lookup table ---

    @abc.abstractmethod
    def visit_codec_lookup_table(self, node: R.CodecLookupTable) -> T: ...

    @abc.abstractmethod
    def visit_codec_lookup_entry(self, node: R.CodecLookupEntry) -> T: ...

    # --- Kext table ---

    @abc.abstractmethod
    def visit_kext_table(self, node: R.KextTable) -> T: ...

    @abc.abstractmethod
    def visit_kext_info(self, node: R.KextInfo) -> T: ...

    # --- Codec bundles ---

    @abc.abstractmethod
    def visit_vendor_bundles(self, node: R.VendorBundles) -> T: ...

    @abc.abstractmethod
    def visit_codec_bundles(self, node: R.CodecBundles) -> T: ...

    @abc.abstractmethod
    def visit_codec_bundle(self, node: R.CodecBundle) -> T: ...

    @abc.abstractmethod
    def visit_codec_info(self, node: R.CodecInfo) -> T: ...

    @abc.abstractmethod
    def visit_codec_files(self, node: R.CodecFiles) -> T: ...

    @abc.abstractmethod
    def visit_codec_file(self, node: R.CodecFile) -> T: ...

    # --- Controller table ---

    @abc.abstractmethod
    def visit_controller_table(self, node: R.ControllerTable) -> T: ...

    @abc.abstractmethod
    def visit_controller_entry(self, node: R.ControllerEntry) -> T: ...

    # --- Binary patches ---

    @abc.abstractmethod
    def visit_binary_patches(self, node: R.BinaryPatches) -> T: ...

    @abc.abstractmethod
    def visit_binary_patch(self, node: R.BinaryPatch) -> T: ...

    # --- Revisions ---

    @abc.abstractmethod
    def visit_revisions(self, node: R.Revisions) -> T: ...
