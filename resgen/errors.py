# resgen/errors.py
"""
Resource generator error types.

Error Hierarchy:
────────────────
┌─────────────────────────────────────────────────────────────────────────┐
│  ResgenError (base)                                                     │
│  ├── LoadError                    - A table or bundle failed to decode  │
│  │   ├── InvalidPatchError        - Find/Replace length mismatch        │
│  │   └── BundleError              - A codec bundle is unusable          │
│  ├── CompileError                 - Resource → AST lowering failures    │
│  │   └── StructuralInconsistencyError                                   │
│  │                                - Tables disagree with each other     │
│  └── OutputError                  - The generated file cannot be saved  │
└─────────────────────────────────────────────────────────────────────────┘

Error Codes:
────────────
Each error carries a code of the form RESGEN-NNNN:
  - 1000-1999: Load errors (configuration tables, bundles, patches)
  - 2000-2999: Compile errors
  - 3000-3999: Output errors
  - 9000-9999: Internal errors

Load errors abort construction of the generator.  Bundle errors are
reported and the bundle is skipped.  A structural inconsistency (a patch
targeting a kext the kext table never declared) stops compilation at once
because no correct kext index can be emitted for it.
"""

from __future__ import annotations

from enum import Enum, unique
from pathlib import Path
from typing import Optional, Union

__all__ = [
    "ErrorPhase",
    "ErrorCode",
    "ErrorCodes",
    "ResgenError",
    "LoadError",
    "InvalidPatchError",
    "BundleError",
    "CompileError",
    "StructuralInconsistencyError",
    "OutputError",
]


@unique
class ErrorPhase(Enum):
    """Pipeline phase where the error occurred."""

    LOAD = "load"          # plist decoding, bundle discovery
    COMPILE = "compile"    # resource → AST
    OUTPUT = "output"      # rendering and writing
    INTERNAL = "internal"


class ErrorCode:
    """
    Structured error code ``RESGEN-NNNN``.

    Codes compare equal to their string form so tests and callers can
    write ``err.code == "RESGEN-1001"``.
    """

    __slots__ = ("number", "phase", "summary")

    PREFIX = "RESGEN"

    def __init__(self, number: int, phase: ErrorPhase, summary: str) -> None:
        self.number = number
        self.phase = phase
        self.summary = summary

    @property
    def code(self) -> str:
        return f"{self.PREFIX}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.phase.name})"

    def __hash__(self) -> int:
        return hash(self.number)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class ErrorCodes:
    """Predefined error codes."""

    # Load errors
    TABLE_UNREADABLE = ErrorCode(1001, ErrorPhase.LOAD, "configuration table cannot be read")
    TABLE_MALFORMED = ErrorCode(1002, ErrorPhase.LOAD, "configuration table cannot be decoded")
    MISSING_KEY = ErrorCode(1003, ErrorPhase.LOAD, "required key is missing")
    INVALID_VALUE = ErrorCode(1004, ErrorPhase.LOAD, "value has the wrong type or is unknown")
    INVALID_PATCH = ErrorCode(1005, ErrorPhase.LOAD, "find and replace differ in length")
    INVALID_BUNDLE = ErrorCode(1006, ErrorPhase.LOAD, "codec bundle is not valid")

    # Compile errors
    UNKNOWN_KEXT = ErrorCode(2001, ErrorPhase.COMPILE, "patch targets an undeclared kext")

    # Output errors
    WRITE_FAILED = ErrorCode(3001, ErrorPhase.OUTPUT, "generated source cannot be written")

    # Internal
    INTERNAL_ERROR = ErrorCode(9001, ErrorPhase.INTERNAL, "internal error")


PathLike = Union[str, Path]


class ResgenError(Exception):
    """
    Base exception for all resource generator errors.

    Carries an ``ErrorCode`` and, where known, the file the error refers
    to.  ``str()`` gives a ``path: CODE: message`` line suitable for the
    command line.
    """

    default_code: ErrorCode = ErrorCodes.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        path: Optional[PathLike] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.path = Path(path) if path is not None else None
        self.cause = cause

    @property
    def phase(self) -> ErrorPhase:
        return self.code.phase

    def __str__(self) -> str:
        location = f"{self.path}: " if self.path is not None else ""
        return f"{location}{self.code}: {self.message}"


# ───────────────────────────────────────────────────────────────────────────
# LOAD ERRORS
# ───────────────────────────────────────────────────────────────────────────

class LoadError(ResgenError):
    """A configuration table or bundle could not be decoded."""

    default_code = ErrorCodes.TABLE_MALFORMED


class InvalidPatchError(LoadError):
    """The ``Find`` and ``Replace`` buffers of a patch differ in length."""

    default_code = ErrorCodes.INVALID_PATCH

    def __init__(
        self,
        find_size: int,
        replace_size: int,
        executable: str = "",
        path: Optional[PathLike] = None,
    ) -> None:
        target = f" for {executable!r}" if executable else ""
        super().__init__(
            f"patch{target} has {find_size} bytes in Find but "
            f"{replace_size} bytes in Replace; both must be the same",
            path=path,
        )
        self.find_size = find_size
        self.replace_size = replace_size
        self.executable = executable


class BundleError(LoadError):
    """A codec bundle directory has no usable ``Info.plist``."""

    default_code = ErrorCodes.INVALID_BUNDLE


# ───────────────────────────────────────────────────────────────────────────
# COMPILE ERRORS
# ───────────────────────────────────────────────────────────────────────────

class CompileError(ResgenError):
    """Error while lowering resources to the AST."""

    default_code = ErrorCodes.INTERNAL_ERROR


class StructuralInconsistencyError(CompileError):
    """
    The configuration tables contradict each other.

    Raised when a binary patch names an executable that is not in the kext
    index map, either because the kext table does not declare it or
    because the patches were compiled before the kext table.
    """

    default_code = ErrorCodes.UNKNOWN_KEXT

    def __init__(self, executable: str) -> None:
        super().__init__(
            f"{executable!r} should already be registered in the kext table"
        )
        self.executable = executable


# ───────────────────────────────────────────────────────────────────────────
# OUTPUT ERRORS
# ───────────────────────────────────────────────────────────────────────────

class OutputError(ResgenError):
    """The generated source could not be written."""

    default_code = ErrorCodes.WRITE_FAILED
