from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Iterable, Literal

import numpy as np


ScaleMode = Literal["linear", "symlog"]
ScaleModeSetting = Literal["auto", "linear", "symlog"]

DEFAULT_DOMAIN = (0.0, 100.0)
DEFAULT_PADDING_RATIO = 0.05
DEFAULT_MIN_PADDING = 5.0
DEFAULT_LOG_THRESHOLD = 1e6
SYMLOG_CONSTANT = 1.0

_E10 = math.sqrt(50.0)
_E5 = math.sqrt(10.0)
_E2 = math.sqrt(2.0)

_SI_PREFIXES = {
    -24: "y",
    -21: "z",
    -18: "a",
    -15: "f",
    -12: "p",
    -9: "n",
    -6: "µ",
    -3: "m",
    0: "",
    3: "k",
    6: "M",
    9: "B",
    12: "T",
    15: "P",
    18: "E",
    21: "Z",
    24: "Y",
}


@dataclass(frozen=True)
class Domain:
    min: float
    max: float

    @property
    def span(self) -> float:
        return self.max - self.min

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) * 0.5

    def as_tuple(self) -> tuple[float, float]:
        return (self.min, self.max)


def safe_domain(vmin: float, vmax: float) -> Domain:
    if not (math.isfinite(vmin) and math.isfinite(vmax)) or vmin == vmax:
        return Domain(*DEFAULT_DOMAIN)
    return Domain(float(vmin), float(vmax))


def compute_domain(
    values: Iterable[float],
    *,
    padding_ratio: float = DEFAULT_PADDING_RATIO,
    min_padding: float = DEFAULT_MIN_PADDING,
) -> Domain:
    finite = [float(v) for v in values if math.isfinite(float(v))]
    if not finite:
        return Domain(*DEFAULT_DOMAIN)
    vmin = min(finite)
    vmax = max(finite)
    pad = max((vmax - vmin) * padding_ratio, min_padding)
    return safe_domain(vmin - pad, vmax + pad)


def resolve_scale_mode(
    domain: Domain,
    mode: ScaleModeSetting = "auto",
    threshold: float = DEFAULT_LOG_THRESHOLD,
) -> ScaleMode:
    if mode == "linear" or mode == "symlog":
        return mode
    if mode != "auto":
        raise ValueError(f"unknown scale mode: {mode}")
    return "symlog" if abs(domain.span) >= threshold else "linear"


def symlog(v: Any, constant: float = SYMLOG_CONSTANT) -> Any:
    return np.sign(v) * np.log1p(np.abs(v) / constant)


def symexp(v: Any, constant: float = SYMLOG_CONSTANT) -> Any:
    return np.sign(v) * np.expm1(np.abs(v)) * constant


@dataclass(frozen=True)
class Scale:
    """Domain -> pixel range map for one axis."""

    domain: Domain
    range: tuple[float, float]
    mode: ScaleMode = "linear"
    constant: float = SYMLOG_CONSTANT

    def _forward(self, v: Any) -> Any:
        if self.mode == "symlog":
            return symlog(v, self.constant)
        return v

    def _backward(self, u: Any) -> Any:
        if self.mode == "symlog":
            return symexp(u, self.constant)
        return u

    def apply(self, v: Any) -> Any:
        r0, r1 = self.range
        u0 = self._forward(self.domain.min)
        u1 = self._forward(self.domain.max)
        t = (self._forward(v) - u0) / (u1 - u0)
        out = r0 + t * (r1 - r0)
        if isinstance(out, np.ndarray):
            return out
        return float(out)

    def invert(self, px: Any) -> Any:
        r0, r1 = self.range
        if r0 == r1:
            return self.domain.min
        u0 = self._forward(self.domain.min)
        u1 = self._forward(self.domain.max)
        t = (px - r0) / (r1 - r0)
        out = self._backward(u0 + t * (u1 - u0))
        if isinstance(out, np.ndarray):
            return out
        return float(out)

    def ticks(self, count: int = 6) -> np.ndarray:
        lo, hi = self.domain.as_tuple()
        if self.mode == "symlog":
            return symlog_ticks(lo, hi, count)
        ticks = generate_nice_ticks(lo, hi, count)
        eps = max(1e-12, abs(hi - lo) * 1e-9)
        return ticks[(ticks >= lo - eps) & (ticks <= hi + eps)]


def build_scale(
    domain: Domain | tuple[float, float],
    range_px: tuple[float, float],
    mode: ScaleMode = "linear",
) -> Scale:
    if not isinstance(domain, Domain):
        domain = Domain(float(domain[0]), float(domain[1]))
    domain = safe_domain(domain.min, domain.max)
    if mode not in {"linear", "symlog"}:
        raise ValueError(f"unknown scale mode: {mode}")
    return Scale(domain=domain, range=(float(range_px[0]), float(range_px[1])), mode=mode)


def symlog_ticks(vmin: float, vmax: float, count: int) -> np.ndarray:
    if count <= 0:
        raise ValueError("count must be > 0")
    values: list[float] = []
    if vmin <= 0.0 <= vmax:
        values.append(0.0)
    top = max(abs(vmin), abs(vmax))
    if top >= 1.0:
        for exp in range(0, int(math.floor(math.log10(top))) + 1):
            mag = 10.0**exp
            if vmin <= mag <= vmax:
                values.append(mag)
            if vmin <= -mag <= vmax:
                values.append(-mag)
    ticks = np.unique(np.asarray(values, dtype=np.float64))
    if ticks.size > count * 2:
        stride = int(math.ceil(ticks.size / float(count)))
        ticks = ticks[::stride]
    return ticks


def tick_increment(vmin: float, vmax: float, count: int) -> float:
    """Step of 1, 2 or 5 times a power of ten giving roughly `count` ticks."""

    raw = (vmax - vmin) / max(count, 1)
    power = math.floor(math.log10(raw))
    error = raw / 10.0**power
    if error >= _E10:
        factor = 10.0
    elif error >= _E5:
        factor = 5.0
    elif error >= _E2:
        factor = 2.0
    else:
        factor = 1.0
    return factor * 10.0**power


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    if target <= 0:
        raise ValueError("target must be > 0")
    lo, hi = min(vmin, vmax), max(vmin, vmax)
    if lo == hi:
        return np.asarray([lo], dtype=np.float64)
    step = tick_increment(lo, hi, target)
    # Index ticks by integer multiples so 0 stays exactly 0.
    if step >= 1.0:
        first, last = math.ceil(lo / step), math.floor(hi / step)
        return np.arange(first, last + 1, dtype=np.float64) * step
    inv = round(1.0 / step)
    first, last = math.ceil(lo * inv), math.floor(hi * inv)
    return np.arange(first, last + 1, dtype=np.float64) / inv


def format_si(value: float) -> str:
    """Two significant digits with an SI prefix; giga is shown as `B`."""

    if not math.isfinite(value):
        return str(value)
    if value == 0:
        return "0.0"
    exp3 = int(math.floor(math.log10(abs(value)) / 3.0)) * 3
    exp3 = max(-24, min(24, exp3))
    mantissa = value / (10.0**exp3)
    decimals = max(0, 1 - int(math.floor(math.log10(abs(mantissa)))))
    text = f"{mantissa:.{decimals}f}"
    # Rounding can carry into the next prefix (999.6 -> "1000").
    if abs(float(text)) >= 1000.0 and exp3 < 24:
        exp3 += 3
        mantissa = value / (10.0**exp3)
        text = f"{mantissa:.1f}"
    return f"{text}{_SI_PREFIXES[exp3]}"


def format_tick(value: float, *, step: float | None = None) -> str:
    """Plain decimal label with as many decimals as the tick step needs."""

    if not math.isfinite(value):
        return str(value)
    decimals = 6
    if step is not None and math.isfinite(step) and step > 0:
        decimals = max(0, min(12, -math.floor(math.log10(step))))
        if abs(value) < step * 1e-9:
            value = 0.0
    magnitude = abs(value)
    if magnitude and (magnitude >= 1e6 or magnitude < 1e-6):
        return f"{value:.3e}"
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    step = float(abs(ticks[1] - ticks[0])) if ticks.size > 1 else None
    return [format_tick(float(v), step=step) for v in ticks]
