"""Rate regime configuration: GST rates, HSN defaults and thresholds.

The regime is passed into the calculators instead of living in module level
constants so the same engine can be exercised against other rate tables.
A regime can be loaded from YAML::

    default_rate: 3
    default_hsn: "7113"
    hsn_rates:
      "7117": 18
    material_hsn:
      gold: "711319"
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

from ..errors import ValidationError

logger = logging.getLogger("taxengine.regime")


class TaxRegime(BaseModel):
    """GST rate table and classification defaults for one store."""

    model_config = ConfigDict(frozen=True)

    default_rate: Decimal = Decimal("3")
    default_hsn: str = "7113"
    # Longest matching HSN prefix wins.
    hsn_rates: dict[str, Decimal] = Field(
        default_factory=lambda: {
            "7113": Decimal("3"),
            "7117": Decimal("18"),
            "7102": Decimal("0.25"),
            "9988": Decimal("5"),
        }
    )
    # Keyword found in the material/category -> HSN code.
    material_hsn: dict[str, str] = Field(
        default_factory=lambda: {
            "gold": "711319",
            "silver": "711311",
            "platinum": "711311",
            "imitation": "711790",
            "artificial": "711790",
        }
    )
    default_unit: str = "PCS"
    eway_bill_threshold: Decimal = Decimal("50000")

    def rate_for_hsn(self, hsn: str | None) -> Decimal:
        """Return the GST rate (percent) for ``hsn``."""

        code = (hsn or "").strip()
        best: str | None = None
        for prefix in self.hsn_rates:
            if code.startswith(prefix) and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return self.default_rate
        return self.hsn_rates[best]

    def hsn_for_material(
        self, category: str | None = None, material: str | None = None
    ) -> str:
        """Guess an HSN code from free-text product attributes."""

        text = f"{material or ''} {category or ''}".lower()
        for keyword, hsn in self.material_hsn.items():
            if keyword in text:
                return hsn
        return self.default_hsn


DEFAULT_REGIME = TaxRegime()


def load_regime(path: str | Path | None) -> TaxRegime:
    """Read a :class:`TaxRegime` from YAML at ``path``.

    A missing or empty path returns :data:`DEFAULT_REGIME`.
    """

    if not path:
        return DEFAULT_REGIME
    path = Path(path)
    if not path.exists():
        logger.warning("tax regime file %s not found; using defaults", path)
        return DEFAULT_REGIME
    try:
        raw = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        logger.error("Invalid tax regime YAML: %s", exc)
        raise ValidationError("REGIME_YAML", f"Invalid tax regime file {path}") from exc
    if not isinstance(raw, dict):
        raise ValidationError("REGIME_YAML", f"Tax regime file {path} must be a mapping")
    # YAML reads bare numbers as floats; go through str to keep exact decimals.
    for key in ("default_rate", "eway_bill_threshold"):
        if key in raw:
            raw[key] = Decimal(str(raw[key]))
    if "hsn_rates" in raw:
        raw["hsn_rates"] = {
            str(k): Decimal(str(v)) for k, v in (raw["hsn_rates"] or {}).items()
        }
    if "material_hsn" in raw:
        raw["material_hsn"] = {
            str(k).lower(): str(v) for k, v in (raw["material_hsn"] or {}).items()
        }
    if "default_hsn" in raw:
        raw["default_hsn"] = str(raw["default_hsn"])
    regime = TaxRegime(**raw)
    logger.info("loaded tax regime from %s", path)
    return regime
