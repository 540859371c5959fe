from __future__ import annotations

from typing import Any, Dict, Literal


JSON = Dict[str, Any]

Language = Literal["ko", "en"]
ExpectedShape = Literal["object", "array"]
