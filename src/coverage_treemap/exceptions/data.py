"""Coverage data exceptions: malformed facts documents and trees."""

from pathlib import Path
from typing import Dict, Optional

from .base import CoverageTreemapError


class CoverageDataError(CoverageTreemapError):
    """Raised when coverage facts or a serialized tree cannot be read."""

    def __init__(self, reason: str, source: Optional[Path] = None):
        details: Dict[str, str] = {"reason": reason}
        if source is not None:
            details["source"] = str(source)

        super().__init__(f"Invalid coverage data: {reason}", details=details)
        self.reason = reason
        self.source = source
