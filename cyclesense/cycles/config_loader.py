"""Load, validate, and hot-reload the CycleSense analysis configuration.

Every threshold the engine uses (cycle-length bounds, confidence bands,
quality-score points, phase boundaries) lives in ``analysis_config.yaml``
alongside this module.  It is loaded once and cached.  Call
``reload_analysis_config()`` to re-read it after an edit.

Usage::

    from cyclesense.cycles.config_loader import get_analysis_config

    config = get_analysis_config()
    config.cycle_length.default_days                     # 28
    config.forecast.next_period_confidence.lookup(2.5)   # 90
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cyclesense.cycles.results import RegularityLevel

logger = logging.getLogger("cyclesense.cycles.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "analysis_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BandTable:
    """Ordered ``(upper_bound, value)`` bands with a fallback.

    ``lookup(x)`` returns the value of the first band whose upper bound is
    ``>= x``, or ``fallback`` when ``x`` exceeds every bound.
    """

    bands: tuple[tuple[float, Any], ...]
    fallback: Any

    def lookup(self, value: float) -> Any:
        for upper, result in self.bands:
            if value <= upper:
                return result
        return self.fallback

    @property
    def top(self) -> Any:
        """Value of the tightest band."""
        return self.bands[0][1] if self.bands else self.fallback


@dataclass(frozen=True)
class CycleLengthConfig:
    """Cycle length bounds (days)."""

    min_days: int = 21
    max_days: int = 45
    default_days: int = 28
    optimal_min_days: int = 24
    optimal_max_days: int = 35
    short_below_days: int = 21
    long_above_days: int = 35


@dataclass(frozen=True)
class PeriodLengthConfig:
    """Period length bounds (days)."""

    min_days: int = 2
    max_days: int = 8
    default_days: int = 5
    extended_above_days: int = 7


@dataclass(frozen=True)
class PhaseConfidenceConfig:
    base: int = 70
    no_data: int = 30
    moderate_variation_days: float = 5
    high_variation_days: float = 10
    variation_penalty: int = 20
    menstrual_bonus: int = 20
    ovulatory_bonus: int = 10
    ovulatory_min_cycles: int = 4
    floor: int = 10
    ceiling: int = 95


@dataclass(frozen=True)
class PhaseConfig:
    """Day-in-cycle boundaries for phase classification."""

    follicular_max_day: int = 7
    ovulatory_start_day: int = 12
    ovulatory_end_day: int = 16
    luteal_start_day: int = 17
    scale_to_cycle_length: bool = False
    reference_cycle_length: int = 28
    confidence: PhaseConfidenceConfig = field(default_factory=PhaseConfidenceConfig)


@dataclass(frozen=True)
class ForecastConfig:
    """Next-period and ovulation forecast settings."""

    min_cycles: int = 2
    optimal_cycles: int = 6
    luteal_phase_days: int = 14
    fertile_days_before_ovulation: int = 5
    no_data_confidence: int = 20
    no_data_window_days: int = 7
    single_cycle_confidence: int = 35
    few_cycles_base: int = 50
    few_cycles_step: int = 5
    few_cycles_cap: int = 70
    min_window_days: int = 3
    next_period_confidence: BandTable = field(
        default_factory=lambda: BandTable(bands=((3, 90), (5, 75)), fallback=60)
    )
    ovulation_confidence: BandTable = field(
        default_factory=lambda: BandTable(bands=((3, 80), (5, 65)), fallback=45)
    )
    ovulation_likelihood: tuple[int, ...] = (95, 70, 40, 20)


@dataclass(frozen=True)
class RegularityConfig:
    min_cycles: int = 3
    levels: BandTable = field(
        default_factory=lambda: BandTable(
            bands=(
                (2, "very_regular"),
                (4, "regular"),
                (7, "somewhat_irregular"),
                (10, "irregular"),
            ),
            fallback="very_irregular",
        )
    )


@dataclass(frozen=True)
class QualityConfig:
    """Data-quality scoring points and thresholds."""

    full_cycle_count: int = 3
    cycle_points_full: int = 40
    cycle_points_partial: int = 20
    symptoms_per_cycle: int = 3
    symptom_points_full: int = 30
    symptom_points_partial: int = 15
    notes_per_cycle: int = 5
    note_points_full: int = 30
    note_points_partial: int = 15
    variation_points: BandTable = field(
        default_factory=lambda: BandTable(bands=((5, 50), (10, 30)), fallback=15)
    )
    recency_days: int = 60
    recency_points_full: int = 50
    recency_points_partial: int = 20
    high_reliability_score: int = 70
    moderate_reliability_score: int = 50
    recommendation_score_below: int = 60
    recommendation_symptoms_per_cycle: int = 2
    recommendation_variation_above: float = 7


@dataclass(frozen=True)
class HealthScoreConfig:
    base: int = 70
    min_cycles: int = 3
    optimal_length_bonus: int = 15
    acceptable_length_bonus: int = 5
    regularity_bonus: BandTable = field(
        default_factory=lambda: BandTable(bands=((3, 15), (5, 10), (7, 5)), fallback=0)
    )
    severe_intensity: int = 4
    severe_ratio_low: float = 0.2
    severe_ratio_low_bonus: int = 10
    severe_ratio_high: float = 0.5
    severe_ratio_high_penalty: int = 15
    floor: int = 10
    ceiling: int = 100


@dataclass(frozen=True)
class SymptomConfig:
    common_min_records: int = 10
    common_ratio: float = 0.3
    common_min_count: int = 3
    common_top_n: int = 5
    pattern_min_frequency: float = 0.2


@dataclass(frozen=True)
class OutlierConfig:
    """Interquartile-range filter applied to cycle and period lengths."""

    iqr_fence: float = 1.5
    min_sample: int = 4


@dataclass(frozen=True)
class MaturityConfig:
    developing_cycles: int = 2
    mature_cycles: int = 4
    extensive_cycles: int = 12


@dataclass(frozen=True)
class AnalysisConfig:
    """Complete, validated analysis configuration.

    This is the single in-memory representation of analysis_config.yaml.
    Every engine component reads its thresholds from this object.
    """

    version: str = "1.0"
    cycle_length: CycleLengthConfig = field(default_factory=CycleLengthConfig)
    period_length: PeriodLengthConfig = field(default_factory=PeriodLengthConfig)
    phase: PhaseConfig = field(default_factory=PhaseConfig)
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    regularity: RegularityConfig = field(default_factory=RegularityConfig)
    quality: QualityConfig = field(default_factory=QualityConfig)
    health_score: HealthScoreConfig = field(default_factory=HealthScoreConfig)
    symptoms: SymptomConfig = field(default_factory=SymptomConfig)
    maturity: MaturityConfig = field(default_factory=MaturityConfig)
    outliers: OutlierConfig = field(default_factory=OutlierConfig)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when analysis_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    import yaml  # pyyaml

    if not path.exists():
        raise FileNotFoundError(f"Analysis config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


class _SectionReader:
    """Read typed values out of one YAML section, collecting errors."""

    def __init__(self, raw: Any, section: str, errors: list[str]) -> None:
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            errors.append(f"'{section}' must be a mapping")
            raw = {}
        self._raw = raw
        self._section = section
        self._errors = errors

    def sub(self, key: str) -> "_SectionReader":
        return _SectionReader(self._raw.get(key), f"{self._section}.{key}", self._errors)

    def number(self, key: str, default: float, cast: type = int, minimum: float = 0) -> Any:
        if key not in self._raw:
            return default
        val = self._raw[key]
        if isinstance(val, bool):
            self._errors.append(f"{self._section}.{key} must be a number, got {val!r}")
            return default
        try:
            num = cast(val)
        except (TypeError, ValueError):
            self._errors.append(f"{self._section}.{key} must be a number, got {val!r}")
            return default
        if num < minimum:
            self._errors.append(f"{self._section}.{key} = {num} is below minimum {minimum}")
        return num

    def ratio(self, key: str, default: float) -> float:
        num = self.number(key, default, cast=float)
        if not (0.0 <= num <= 1.0):
            self._errors.append(f"{self._section}.{key} = {num} is out of range [0.0, 1.0]")
        return num

    def flag(self, key: str, default: bool) -> bool:
        val = self._raw.get(key, default)
        if not isinstance(val, bool):
            self._errors.append(f"{self._section}.{key} must be true or false, got {val!r}")
            return default
        return val

    def bands(self, key: str, default: BandTable, numeric_values: bool = True) -> BandTable:
        if key not in self._raw:
            return default
        node = self._raw[key]
        path = f"{self._section}.{key}"
        if isinstance(node, dict):
            rows = node.get("bands", [])
            fallback = node.get("fallback", default.fallback)
        else:
            rows = self._raw.get(key) or []
            fallback = self._raw.get("fallback", default.fallback)

        parsed: list[tuple[float, Any]] = []
        for row in rows or []:
            if not isinstance(row, (list, tuple)) or len(row) != 2:
                self._errors.append(f"{path} rows must be [upper_bound, value] pairs, got {row!r}")
                continue
            try:
                upper = float(row[0])
            except (TypeError, ValueError):
                self._errors.append(f"{path} bound must be a number, got {row[0]!r}")
                continue
            value = row[1]
            if numeric_values:
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    self._errors.append(f"{path} value must be a number, got {value!r}")
                    continue
            parsed.append((upper, value))

        bounds = [upper for upper, _ in parsed]
        if bounds != sorted(bounds):
            self._errors.append(f"{path} bounds must be ascending, got {bounds}")
        return BandTable(bands=tuple(parsed), fallback=fallback)


def _validate_and_build(raw: dict) -> AnalysisConfig:
    """Validate the raw YAML dict and construct an AnalysisConfig.

    Missing keys take the dataclass defaults.  Every problem found is
    collected and reported together.

    Raises:
        ConfigValidationError: If any value is invalid.
    """
    errors: list[str] = []
    root = _SectionReader(raw, "root", errors)

    version = str(raw.get("version", "1.0")) if isinstance(raw, dict) else "1.0"

    # ── Cycle length ──
    cl = root.sub("cycle_length")
    d = CycleLengthConfig()
    cycle_length = CycleLengthConfig(
        min_days=cl.number("min_days", d.min_days, minimum=1),
        max_days=cl.number("max_days", d.max_days, minimum=1),
        default_days=cl.number("default_days", d.default_days, minimum=1),
        optimal_min_days=cl.number("optimal_min_days", d.optimal_min_days),
        optimal_max_days=cl.number("optimal_max_days", d.optimal_max_days),
        short_below_days=cl.number("short_below_days", d.short_below_days),
        long_above_days=cl.number("long_above_days", d.long_above_days),
    )
    if cycle_length.min_days > cycle_length.max_days:
        errors.append(
            f"cycle_length.min_days ({cycle_length.min_days}) exceeds "
            f"max_days ({cycle_length.max_days})"
        )

    # ── Period length ──
    pl = root.sub("period_length")
    d = PeriodLengthConfig()
    period_length = PeriodLengthConfig(
        min_days=pl.number("min_days", d.min_days, minimum=1),
        max_days=pl.number("max_days", d.max_days, minimum=1),
        default_days=pl.number("default_days", d.default_days, minimum=1),
        extended_above_days=pl.number("extended_above_days", d.extended_above_days),
    )
    if period_length.min_days > period_length.max_days:
        errors.append(
            f"period_length.min_days ({period_length.min_days}) exceeds "
            f"max_days ({period_length.max_days})"
        )

    # ── Phase ──
    ph = root.sub("phase")
    pc = ph.sub("confidence")
    d = PhaseConfig()
    dc = PhaseConfidenceConfig()
    phase = PhaseConfig(
        follicular_max_day=ph.number("follicular_max_day", d.follicular_max_day),
        ovulatory_start_day=ph.number("ovulatory_start_day", d.ovulatory_start_day),
        ovulatory_end_day=ph.number("ovulatory_end_day", d.ovulatory_end_day),
        luteal_start_day=ph.number("luteal_start_day", d.luteal_start_day),
        scale_to_cycle_length=ph.flag("scale_to_cycle_length", d.scale_to_cycle_length),
        reference_cycle_length=ph.number("reference_cycle_length", d.reference_cycle_length, minimum=1),
        confidence=PhaseConfidenceConfig(
            base=pc.number("base", dc.base),
            no_data=pc.number("no_data", dc.no_data),
            moderate_variation_days=pc.number("moderate_variation_days", dc.moderate_variation_days, cast=float),
            high_variation_days=pc.number("high_variation_days", dc.high_variation_days, cast=float),
            variation_penalty=pc.number("variation_penalty", dc.variation_penalty),
            menstrual_bonus=pc.number("menstrual_bonus", dc.menstrual_bonus),
            ovulatory_bonus=pc.number("ovulatory_bonus", dc.ovulatory_bonus),
            ovulatory_min_cycles=pc.number("ovulatory_min_cycles", dc.ovulatory_min_cycles),
            floor=pc.number("floor", dc.floor),
            ceiling=pc.number("ceiling", dc.ceiling),
        ),
    )
    if not (
        phase.follicular_max_day
        < phase.ovulatory_start_day
        <= phase.ovulatory_end_day
        < phase.luteal_start_day
    ):
        errors.append(
            "phase boundaries must satisfy follicular_max_day < ovulatory_start_day "
            "<= ovulatory_end_day < luteal_start_day"
        )

    # ── Forecast ──
    fc = root.sub("forecast")
    d = ForecastConfig()
    likelihood_raw = fc._raw.get("ovulation_likelihood", list(d.ovulation_likelihood))
    likelihood: list[int] = []
    for val in likelihood_raw or []:
        try:
            likelihood.append(int(val))
        except (TypeError, ValueError):
            errors.append(f"forecast.ovulation_likelihood entries must be numbers, got {val!r}")
    forecast = ForecastConfig(
        min_cycles=fc.number("min_cycles", d.min_cycles, minimum=1),
        optimal_cycles=fc.number("optimal_cycles", d.optimal_cycles, minimum=1),
        luteal_phase_days=fc.number("luteal_phase_days", d.luteal_phase_days),
        fertile_days_before_ovulation=fc.number(
            "fertile_days_before_ovulation", d.fertile_days_before_ovulation
        ),
        no_data_confidence=fc.number("no_data_confidence", d.no_data_confidence),
        no_data_window_days=fc.number("no_data_window_days", d.no_data_window_days),
        single_cycle_confidence=fc.number("single_cycle_confidence", d.single_cycle_confidence),
        few_cycles_base=fc.number("few_cycles_base", d.few_cycles_base),
        few_cycles_step=fc.number("few_cycles_step", d.few_cycles_step),
        few_cycles_cap=fc.number("few_cycles_cap", d.few_cycles_cap),
        min_window_days=fc.number("min_window_days", d.min_window_days),
        next_period_confidence=fc.bands("next_period_confidence", d.next_period_confidence),
        ovulation_confidence=fc.bands("ovulation_confidence", d.ovulation_confidence),
        ovulation_likelihood=tuple(likelihood),
    )

    # ── Regularity ──
    rg = root.sub("regularity")
    d = RegularityConfig()
    regularity = RegularityConfig(
        min_cycles=rg.number("min_cycles", d.min_cycles),
        levels=rg.bands("bands", d.levels, numeric_values=False),
    )
    known_levels = {
        level.value for level in RegularityLevel
        if level is not RegularityLevel.insufficient_data
    }
    for label in [value for _, value in regularity.levels.bands] + [regularity.levels.fallback]:
        if not isinstance(label, str) or label not in known_levels:
            errors.append(
                f"regularity level {label!r} is not one of {sorted(known_levels)}"
            )

    # ── Data quality ──
    q = root.sub("quality")
    d = QualityConfig()
    quality = QualityConfig(
        full_cycle_count=q.number("full_cycle_count", d.full_cycle_count),
        cycle_points_full=q.number("cycle_points_full", d.cycle_points_full),
        cycle_points_partial=q.number("cycle_points_partial", d.cycle_points_partial),
        symptoms_per_cycle=q.number("symptoms_per_cycle", d.symptoms_per_cycle),
        symptom_points_full=q.number("symptom_points_full", d.symptom_points_full),
        symptom_points_partial=q.number("symptom_points_partial", d.symptom_points_partial),
        notes_per_cycle=q.number("notes_per_cycle", d.notes_per_cycle),
        note_points_full=q.number("note_points_full", d.note_points_full),
        note_points_partial=q.number("note_points_partial", d.note_points_partial),
        variation_points=q.bands("variation_points", d.variation_points),
        recency_days=q.number("recency_days", d.recency_days),
        recency_points_full=q.number("recency_points_full", d.recency_points_full),
        recency_points_partial=q.number("recency_points_partial", d.recency_points_partial),
        high_reliability_score=q.number("high_reliability_score", d.high_reliability_score),
        moderate_reliability_score=q.number("moderate_reliability_score", d.moderate_reliability_score),
        recommendation_score_below=q.number("recommendation_score_below", d.recommendation_score_below),
        recommendation_symptoms_per_cycle=q.number(
            "recommendation_symptoms_per_cycle", d.recommendation_symptoms_per_cycle
        ),
        recommendation_variation_above=q.number(
            "recommendation_variation_above", d.recommendation_variation_above, cast=float
        ),
    )

    # ── Health score ──
    hs = root.sub("health_score")
    d = HealthScoreConfig()
    health_score = HealthScoreConfig(
        base=hs.number("base", d.base),
        min_cycles=hs.number("min_cycles", d.min_cycles),
        optimal_length_bonus=hs.number("optimal_length_bonus", d.optimal_length_bonus),
        acceptable_length_bonus=hs.number("acceptable_length_bonus", d.acceptable_length_bonus),
        regularity_bonus=hs.bands("regularity_bonus", d.regularity_bonus),
        severe_intensity=hs.number("severe_intensity", d.severe_intensity, minimum=1),
        severe_ratio_low=hs.ratio("severe_ratio_low", d.severe_ratio_low),
        severe_ratio_low_bonus=hs.number("severe_ratio_low_bonus", d.severe_ratio_low_bonus),
        severe_ratio_high=hs.ratio("severe_ratio_high", d.severe_ratio_high),
        severe_ratio_high_penalty=hs.number("severe_ratio_high_penalty", d.severe_ratio_high_penalty),
        floor=hs.number("floor", d.floor),
        ceiling=hs.number("ceiling", d.ceiling),
    )
    if health_score.floor > health_score.ceiling:
        errors.append("health_score.floor exceeds health_score.ceiling")

    # ── Symptoms ──
    sy = root.sub("symptoms")
    d = SymptomConfig()
    symptoms = SymptomConfig(
        common_min_records=sy.number("common_min_records", d.common_min_records),
        common_ratio=sy.ratio("common_ratio", d.common_ratio),
        common_min_count=sy.number("common_min_count", d.common_min_count),
        common_top_n=sy.number("common_top_n", d.common_top_n, minimum=1),
        pattern_min_frequency=sy.ratio("pattern_min_frequency", d.pattern_min_frequency),
    )

    # ── Maturity ──
    mt = root.sub("maturity")
    d = MaturityConfig()
    maturity = MaturityConfig(
        developing_cycles=mt.number("developing_cycles", d.developing_cycles),
        mature_cycles=mt.number("mature_cycles", d.mature_cycles),
        extensive_cycles=mt.number("extensive_cycles", d.extensive_cycles),
    )

    # ── Outlier filter ──
    ol = root.sub("outliers")
    d = OutlierConfig()
    outliers = OutlierConfig(
        iqr_fence=ol.number("iqr_fence", d.iqr_fence, cast=float),
        min_sample=ol.number("min_sample", d.min_sample, minimum=1),
    )

    if errors:
        raise ConfigValidationError(
            f"analysis_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return AnalysisConfig(
        version=version,
        cycle_length=cycle_length,
        period_length=period_length,
        phase=phase,
        forecast=forecast,
        regularity=regularity,
        quality=quality,
        health_score=health_score,
        symptoms=symptoms,
        maturity=maturity,
        outliers=outliers,
    )


def load_analysis_config(path: Path | None = None) -> AnalysisConfig:
    """Load and validate the analysis config from disk.

    Args:
        path: Override path to YAML.  Falls back to ``Settings.analysis_config_path``
              and then to the bundled analysis_config.yaml.

    Returns:
        Validated AnalysisConfig instance.
    """
    if path is None:
        from cyclesense.config import get_settings

        path = get_settings().analysis_config_path
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded analysis config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: AnalysisConfig | None = None
_config_lock = threading.Lock()


def get_analysis_config() -> AnalysisConfig:
    """Return the global AnalysisConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_analysis_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_analysis_config()
    return _config


def reload_analysis_config(path: Path | None = None) -> AnalysisConfig:
    """Reload the analysis config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_analysis_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info(
        "Reloaded analysis config: %s → %s",
        old_version,
        new_config.version,
    )
    return new_config
