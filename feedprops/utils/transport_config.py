from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(slots=True)
class TransportConfig:
    """Settings for the HTTP feed transport."""

    base_url: Optional[str] = None
    timeout: float = 30.0
    retries: int = 2
    backoff: float = 1.5
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def request_headers(self) -> Dict[str, str]:
        headers = dict(self.headers)
        token = os.getenv("FEEDPROPS_AUTH_TOKEN")
        if token and "Authorization" not in headers:
            headers["Authorization"] = f"GoogleLogin auth={token}"
        return headers
