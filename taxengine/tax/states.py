"""Indian state and union territory codes used by GST."""

from __future__ import annotations

from ..errors import ValidationError

# Two digit codes as printed at the start of a GSTIN.
STATE_CODES: dict[str, str] = {
    "Jammu and Kashmir": "01",
    "Himachal Pradesh": "02",
    "Punjab": "03",
    "Chandigarh": "04",
    "Uttarakhand": "05",
    "Haryana": "06",
    "Delhi": "07",
    "Rajasthan": "08",
    "Uttar Pradesh": "09",
    "Bihar": "10",
    "Sikkim": "11",
    "Arunachal Pradesh": "12",
    "Nagaland": "13",
    "Manipur": "14",
    "Mizoram": "15",
    "Tripura": "16",
    "Meghalaya": "17",
    "Assam": "18",
    "West Bengal": "19",
    "Jharkhand": "20",
    "Odisha": "21",
    "Chhattisgarh": "22",
    "Madhya Pradesh": "23",
    "Gujarat": "24",
    "Daman and Diu": "25",
    "Dadra and Nagar Haveli and Daman and Diu": "26",
    "Maharashtra": "27",
    "Karnataka": "29",
    "Goa": "30",
    "Lakshadweep": "31",
    "Kerala": "32",
    "Tamil Nadu": "33",
    "Puducherry": "34",
    "Andaman and Nicobar Islands": "35",
    "Telangana": "36",
    "Andhra Pradesh": "37",
    "Ladakh": "38",
}


class StateRegistry:
    """Bidirectional lookup between state names and GST state codes.

    The default registry wraps :data:`STATE_CODES`; tests and alternative
    regimes may pass their own table.
    """

    def __init__(self, codes: dict[str, str] | None = None) -> None:
        table = STATE_CODES if codes is None else codes
        self._codes = dict(table)
        self._names = {code: name for name, code in table.items()}
        self._folded = {name.casefold(): code for name, code in table.items()}

    def __contains__(self, code: object) -> bool:
        return code in self._names

    def code_for(self, name: str) -> str | None:
        """Return the code for state ``name`` (case-insensitive)."""

        return self._folded.get(name.strip().casefold())

    def name_for(self, code: str) -> str | None:
        return self._names.get(code)

    def codes(self) -> list[str]:
        return sorted(self._names)

    def normalize(self, value: str | int, *, field: str = "state") -> str:
        """Return the canonical 2 digit code for ``value``.

        ``value`` may be a code (``"7"``, ``"07"``, ``7``) or a state name.
        Unknown values raise :class:`~taxengine.errors.ValidationError`.
        """

        text = str(value).strip()
        if text.isdigit():
            code = text.zfill(2)
            if code in self._names:
                return code
        else:
            code = self.code_for(text)
            if code is not None:
                return code
        raise ValidationError(
            "UNKNOWN_STATE",
            f"Unknown {field} code: {text!r}",
            hint="Use a two digit GST state code such as 27 or a state name",
        )


DEFAULT_REGISTRY = StateRegistry()
