"""resgen — AppleALC resource generator.

Compiles a resource directory of property lists and codec bundles into
the C++ source file ``kern_resources.cpp`` that the AppleALC kext builds
in.

Submodules
----------
resources
    Resource domain model: codec lookup, kext and controller tables,
    codec bundles, binary patches, revisions.

loader
    ``plistlib`` decoding of the resource directory and codec bundle
    discovery.

ast, visitor
    C++ AST node model (declarations, literals, statements, types) and
    the abstract ``ASTVisitor``.

printer
    ``PrettyPrinter``: renders the AST to text.

compiler
    ``ResourceCompiler`` (resources → AST) and the ``ResourceGenerator``
    façade that drives a whole run.

errors
    Error hierarchy with structured ``RESGEN-NNNN`` codes.

main
    Command-line entry-point.

Usage
-----
Command-line::

    resgen Resources kern_resources.cpp
    python -m resgen --help

Programmatic::

    from resgen.compiler import ResourceGenerator

    ResourceGenerator("Resources").write("kern_resources.cpp")
"""

from __future__ import annotations

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    "ast",
    "compiler",
    "config",
    "errors",
    "loader",
    "naming",
    "printer",
    "resources",
]
