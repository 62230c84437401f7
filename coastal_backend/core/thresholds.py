"""
Rule-based status classifier for marine sensor readings.

Each reading is mapped to NORMAL / WARNING / CRITICAL using a per-parameter
threshold band:
  - directional kinds (tide, wave, wind speed) only escalate upwards
  - bidirectional kinds (temperature, pH) escalate away from a safe band
    in either direction; the more severe side wins

Comparisons are strict, so a value sitting exactly on a threshold keeps the
less severe tier.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Iterator, Optional, Union

from coastal_backend.core.errors import InvalidParameterKind, MalformedThresholdTable
from coastal_backend.schemas.enums import ParameterKind, StatusTier

BIDIRECTIONAL_KINDS = frozenset({ParameterKind.TEMPERATURE, ParameterKind.PH})

# Names the upstream feeds use for the same physical quantity.
_KIND_ALIASES = {
    "water_level": ParameterKind.TIDE,
    "tide_level": ParameterKind.TIDE,
    "wave_height": ParameterKind.WAVE,
    "wind": ParameterKind.WIND_SPEED,
    "water_temperature": ParameterKind.TEMPERATURE,
}

KindLike = Union[ParameterKind, str]


@dataclass(frozen=True)
class ThresholdBand:
    warning: float
    critical: float
    warning_low: Optional[float] = None
    critical_low: Optional[float] = None

    @property
    def has_lower_pair(self) -> bool:
        return self.warning_low is not None or self.critical_low is not None


def resolve_parameter_kind(name: KindLike) -> ParameterKind:
    """Map a parameter name (or alias used by a feed) to a ParameterKind."""
    if isinstance(name, ParameterKind):
        return name
    key = str(name).strip().lower()
    if key in _KIND_ALIASES:
        return _KIND_ALIASES[key]
    try:
        return ParameterKind(key)
    except ValueError:
        raise InvalidParameterKind(name) from None


def _validate_band(kind: ParameterKind, band: ThresholdBand) -> None:
    numbers = [v for v in (band.warning, band.critical, band.warning_low, band.critical_low) if v is not None]
    if not all(isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v) for v in numbers):
        raise MalformedThresholdTable(f"{kind.value}: thresholds must be finite numbers")

    if not band.warning < band.critical:
        raise MalformedThresholdTable(
            f"{kind.value}: critical ({band.critical}) must be above warning ({band.warning})"
        )

    if kind in BIDIRECTIONAL_KINDS:
        if band.warning_low is None or band.critical_low is None:
            raise MalformedThresholdTable(f"{kind.value}: bidirectional kind needs warning_low and critical_low")
        if not band.critical_low < band.warning_low < band.warning:
            raise MalformedThresholdTable(
                f"{kind.value}: expected critical_low < warning_low < warning, got "
                f"{band.critical_low} / {band.warning_low} / {band.warning}"
            )
    elif band.has_lower_pair:
        raise MalformedThresholdTable(f"{kind.value}: directional kind cannot carry a lower threshold pair")


class ThresholdTable(Mapping):
    """
    Immutable ParameterKind -> ThresholdBand mapping.
    Validated once here so classify() never has to re-check ordering.
    """

    def __init__(self, bands: Mapping[KindLike, ThresholdBand]) -> None:
        validated: dict[ParameterKind, ThresholdBand] = {}
        for raw_kind, band in bands.items():
            try:
                kind = resolve_parameter_kind(raw_kind)
            except InvalidParameterKind as exc:
                raise MalformedThresholdTable(str(exc)) from exc
            if not isinstance(band, ThresholdBand):
                raise MalformedThresholdTable(f"{kind.value}: expected ThresholdBand, got {type(band).__name__}")
            _validate_band(kind, band)
            validated[kind] = band
        self._bands = MappingProxyType(validated)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]]) -> "ThresholdTable":
        """Build a table from JSON-style data: {"tide": {"warning": 2.5, "critical": 3.0}, ...}"""
        bands = {}
        for kind, raw in data.items():
            if not isinstance(raw, Mapping):
                raise MalformedThresholdTable(f"{kind}: expected an object of thresholds")
            try:
                bands[kind] = ThresholdBand(**raw)
            except TypeError as exc:
                raise MalformedThresholdTable(f"{kind}: {exc}") from exc
        return cls(bands)

    def band_for(self, parameter_kind: KindLike) -> ThresholdBand:
        kind = resolve_parameter_kind(parameter_kind)
        try:
            return self._bands[kind]
        except KeyError:
            raise InvalidParameterKind(parameter_kind) from None

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {
            kind.value: {k: v for k, v in asdict(band).items() if v is not None}
            for kind, band in self._bands.items()
        }

    def __getitem__(self, key: KindLike) -> ThresholdBand:
        return self.band_for(key)

    def __contains__(self, key: object) -> bool:
        try:
            return resolve_parameter_kind(key) in self._bands  # type: ignore[arg-type]
        except InvalidParameterKind:
            return False

    def __iter__(self) -> Iterator[ParameterKind]:
        return iter(self._bands)

    def __len__(self) -> int:
        return len(self._bands)

    def __repr__(self) -> str:
        return f"ThresholdTable({self.to_dict()!r})"


DEFAULT_THRESHOLDS = ThresholdTable(
    {
        ParameterKind.TIDE: ThresholdBand(warning=2.5, critical=3.0),             # m
        ParameterKind.WAVE: ThresholdBand(warning=2.5, critical=4.0),             # m
        ParameterKind.WIND_SPEED: ThresholdBand(warning=15.0, critical=25.0),     # m/s
        ParameterKind.TEMPERATURE: ThresholdBand(
            warning=30.0, critical=35.0, warning_low=5.0, critical_low=0.0        # °C
        ),
        ParameterKind.PH: ThresholdBand(
            warning=8.5, critical=9.0, warning_low=6.5, critical_low=6.0
        ),
    }
)


def _tier_above(value: float, warning: float, critical: float) -> StatusTier:
    if value > critical:
        return StatusTier.CRITICAL
    if value > warning:
        return StatusTier.WARNING
    return StatusTier.NORMAL


def _tier_below(value: float, warning_low: float, critical_low: float) -> StatusTier:
    if value < critical_low:
        return StatusTier.CRITICAL
    if value < warning_low:
        return StatusTier.WARNING
    return StatusTier.NORMAL


def classify(value: float, parameter_kind: KindLike, thresholds: ThresholdTable) -> StatusTier:
    """
    Classify one reading. Raises InvalidParameterKind when the kind is not
    recognised or has no band in `thresholds`.
    """
    kind = resolve_parameter_kind(parameter_kind)
    band = thresholds.band_for(kind)
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Cannot classify non-finite reading {value!r}")

    upper = _tier_above(value, band.warning, band.critical)
    if kind not in BIDIRECTIONAL_KINDS:
        return upper

    lower = _tier_below(value, band.warning_low, band.critical_low)
    return max(upper, lower, key=lambda tier: tier.rank)
