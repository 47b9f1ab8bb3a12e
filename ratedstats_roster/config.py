from __future__ import annotations

import os
from dataclasses import dataclass

REGIONS = ("us", "eu", "kr", "tw")
LOCALES = {"us": "en_US", "eu": "en_GB", "kr": "ko_KR", "tw": "zh_TW"}
DEFAULT_REGION = "eu"
DEFAULT_TOKEN_URL = "https://oauth.battle.net/token"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, read from the environment.

    Credentials are looked up per region first
    (``BLIZZARD_CLIENT_ID_EU``), then the plain ``BLIZZARD_CLIENT_ID``.
    Missing credentials are not rejected here; the first token exchange
    raises ``AuthError`` instead.
    """

    region: str = DEFAULT_REGION
    client_id: str | None = None
    client_secret: str | None = None
    token_url: str = DEFAULT_TOKEN_URL
    request_timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if self.region not in REGIONS:
            raise ValueError(
                f"Invalid region: {self.region!r}. Must be one of: {', '.join(REGIONS)}"
            )

    @classmethod
    def from_env(cls, region: str | None = None) -> "Settings":
        region = (region or os.getenv("BLIZZARD_REGION") or DEFAULT_REGION).lower()
        suffix = region.upper()
        cid = os.getenv(f"BLIZZARD_CLIENT_ID_{suffix}") or os.getenv("BLIZZARD_CLIENT_ID")
        cs = os.getenv(f"BLIZZARD_CLIENT_SECRET_{suffix}") or os.getenv(
            "BLIZZARD_CLIENT_SECRET"
        )
        timeout = os.getenv("REQUEST_TIMEOUT")
        return cls(
            region=region,
            client_id=cid,
            client_secret=cs,
            token_url=os.getenv("BLIZZARD_TOKEN_URL", DEFAULT_TOKEN_URL),
            request_timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
        )

    @property
    def locale(self) -> str:
        return LOCALES.get(self.region, "en_US")

    @property
    def api_base(self) -> str:
        return f"https://{self.region}.api.blizzard.com"

    @property
    def profile_namespace(self) -> str:
        return f"profile-{self.region}"

    @property
    def rate_cap(self) -> int:
        # per-second request cap Blizzard grants a client in each region
        return 20 if self.region in ("us", "eu") else 100
