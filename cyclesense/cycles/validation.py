"""Record validation and chronological ordering.

First stage of the analysis pipeline.  Each ``validate_*`` function takes
the raw collection handed over by the storage layer (model instances or
plain mappings with snake_case or camelCase keys), drops records that are
structurally invalid, and returns the survivors sorted ascending by date.

Dropping is a data-hygiene policy, not an error: a cycle with no period
days or a symptom log with no symptoms is silently skipped.  A mapping
whose required fields are present but unparseable (``"startDate": "soon"``)
is non-conforming upstream data and raises :class:`RecordParseError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from cyclesense.cycles.config_loader import CycleLengthConfig
from cyclesense.cycles.exceptions import RecordParseError
from cyclesense.models.records import CycleRecord, DailyNote, SymptomRecord

logger = logging.getLogger("cyclesense.cycles.validation")

_M = TypeVar("_M", bound=BaseModel)


def _field(raw: Mapping[str, Any], name: str, alias: str) -> Any:
    """Return a field from a raw mapping under either spelling."""
    if name in raw:
        return raw[name]
    return raw.get(alias)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def _coerce(
    raw: Any,
    model: type[_M],
    kind: str,
    required: tuple[tuple[str, str], ...],
) -> _M | None:
    """Turn one raw entry into a model instance, or None if malformed."""
    if isinstance(raw, model):
        return raw
    if not isinstance(raw, Mapping):
        logger.debug("Dropping %s record of type %s", kind, type(raw).__name__)
        return None

    for name, alias in required:
        if _is_blank(_field(raw, name, alias)):
            logger.debug("Dropping %s record: missing %s", kind, name)
            return None

    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise RecordParseError(kind, str(exc)) from exc


def validate_cycles(
    cycles: Iterable[CycleRecord | Mapping[str, Any]] | None,
    bounds: CycleLengthConfig,
) -> tuple[CycleRecord, ...]:
    """Filter and sort cycle records by start date.

    A cycle is dropped when it has no start date, no period days, or a
    precomputed ``length`` outside ``[bounds.min_days, bounds.max_days]``.

    Args:
        cycles: Raw cycle records in any order.
        bounds: Cycle length bounds from the analysis config.

    Returns:
        Valid cycles, oldest first.
    """
    valid: list[CycleRecord] = []
    dropped = 0
    for raw in cycles or ():
        cycle = _coerce(
            raw,
            CycleRecord,
            "cycle",
            (("start_date", "startDate"), ("period_days", "periodDays")),
        )
        if cycle is None or not cycle.period_days:
            dropped += 1
            continue
        if cycle.length is not None and not (bounds.min_days <= cycle.length <= bounds.max_days):
            logger.debug(
                "Dropping cycle starting %s: length %d outside [%d, %d]",
                cycle.start_date, cycle.length, bounds.min_days, bounds.max_days,
            )
            dropped += 1
            continue
        valid.append(cycle)

    if dropped:
        logger.debug("Dropped %d invalid cycle record(s)", dropped)
    return tuple(sorted(valid, key=lambda c: c.start_date))


def validate_symptoms(
    symptoms: Iterable[SymptomRecord | Mapping[str, Any]] | None,
) -> tuple[SymptomRecord, ...]:
    """Filter and sort symptom logs; logs without any symptom entry are dropped."""
    valid: list[SymptomRecord] = []
    for raw in symptoms or ():
        record = _coerce(raw, SymptomRecord, "symptom", (("date", "date"), ("symptoms", "symptoms")))
        if record is None or not record.symptoms:
            continue
        valid.append(record)
    return tuple(sorted(valid, key=lambda s: s.date))


def validate_notes(
    notes: Iterable[DailyNote | Mapping[str, Any]] | None,
) -> tuple[DailyNote, ...]:
    """Filter and sort daily notes; blank notes are dropped."""
    valid: list[DailyNote] = []
    for raw in notes or ():
        note = _coerce(raw, DailyNote, "note", (("date", "date"), ("note", "note")))
        if note is None or not note.note.strip():
            continue
        valid.append(note)
    return tuple(sorted(valid, key=lambda n: n.date))
