# config.py

"""Engine configuration.

Values come from environment variables (or a ``.env`` file). The rate regime
is read from the YAML file named by ``TAX_REGIME_PATH`` when set. Both are
cached; call ``cache_clear()`` on the getters after changing the environment.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from .tax.regime import TaxRegime, load_regime


class Settings(BaseSettings):
    """Store level settings used by the HTTP surface."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    seller_name: str = ""
    seller_gstin: str | None = None
    seller_state_code: str = "27"
    tax_regime_path: str | None = None
    gstin_verify_checksum: bool = False
    eway_bill_threshold: Decimal | None = None
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def get_regime() -> TaxRegime:
    """Return the configured :class:`TaxRegime`.

    ``EWAY_BILL_THRESHOLD`` overrides the threshold from the YAML file.
    """

    settings = get_settings()
    regime = load_regime(settings.tax_regime_path)
    if settings.eway_bill_threshold is not None:
        regime = regime.model_copy(
            update={"eway_bill_threshold": settings.eway_bill_threshold}
        )
    return regime
