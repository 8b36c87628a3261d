"""resgen/config.py — generator settings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

__all__ = ["GeneratorConfig", "TIMESTAMP_FORMAT"]

#: Format of the generation timestamp in the banner comment.
TIMESTAMP_FORMAT = "%Y.%m.%d %H:%M:%S"


@dataclass(frozen=True)
class GeneratorConfig:
    """Tuning knobs for the resource generator."""

    codec_lookup_file: str = "CodecLookup.plist"
    controllers_file: str = "Controllers.plist"
    kexts_file: str = "Kexts.plist"
    bundle_info_file: str = "Info.plist"
    header: str = "kern_resources.hpp"
    output_name: str = "kern_resources.cpp"
    project: str = "AppleALC"
    copyright: str = "Copyright © 2016-2018 vit9696. All rights reserved."
    indent: str = "\t"
    banner_width: int = 60
    #: Directory suffixes that mark a package rather than a codec bundle.
    package_suffixes: Tuple[str, ...] = (
        ".app", ".bundle", ".framework", ".kext", ".plugin",
    )
    #: Fixed generation time; ``None`` means "now".
    timestamp: Optional[datetime] = None

    def generation_time(self) -> str:
        moment = self.timestamp or datetime.now()
        return moment.strftime(TIMESTAMP_FORMAT)

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if self.banner_width <= 0:
            warnings.append("banner_width must be positive")
        if not self.header:
            warnings.append("header must not be empty")
        if self.indent.strip():
            warnings.append("indent must consist of whitespace only")
        return warnings
