"""Solve many temperament criteria independently."""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence, Tuple

from owt_core.criteria import TemperamentCriteria
from owt_core.errors import TemperamentError
from owt_core.solver import DEFAULT_CONDITION_LIMIT, TemperamentResult, solve_temperament

__all__ = ["BatchOutcome", "solve_batch", "criteria_entries"]

logger = logging.getLogger(__name__)

BatchEntry = Tuple[str, Any]


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    """Result of one batch entry: either ``result`` or ``error`` is set."""

    name: str
    result: TemperamentResult | None = None
    error: Mapping[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "ok": self.ok}
        if self.result is not None:
            payload["result"] = self.result.as_dict()
        if self.error is not None:
            payload["error"] = dict(self.error)
        return payload


def _error_payload(exc: TemperamentError) -> Mapping[str, Any]:
    return {
        "category": exc.category,
        "message": exc.message,
        "context": dict(exc.context),
    }


def _solve_entry(name: str, definition: Any, condition_limit: float) -> BatchOutcome:
    try:
        if isinstance(definition, TemperamentCriteria):
            criteria = definition
        else:
            criteria = TemperamentCriteria.from_mapping(definition, title=None)
        if criteria.title is None:
            criteria = TemperamentCriteria(
                num_pitches=criteria.num_pitches,
                repeat_factor=criteria.repeat_factor,
                ideal_intervals=criteria.ideal_intervals,
                interval_weights=criteria.interval_weights,
                key_weights=criteria.key_weights,
                title=name,
            )
        result = solve_temperament(criteria, condition_limit=condition_limit)
    except TemperamentError as exc:
        return BatchOutcome(name=name, error=_error_payload(exc))
    return BatchOutcome(name=name, result=result)


def criteria_entries(payload: Any) -> list[BatchEntry]:
    """Extract ``(name, definition)`` pairs from a decoded criteria file.

    Accepts a single criteria table, a ``criteria`` list whose items may
    carry a ``name`` or ``title``, or a ``criteria`` table keyed by name.
    """

    if isinstance(payload, Mapping) and "criteria" in payload:
        table = payload["criteria"]
    else:
        table = payload
    if isinstance(table, Mapping):
        if "ideal_intervals" in table or "ideal" in table:
            name = str(table.get("name") or table.get("title") or "criteria")
            return [(name, table)]
        return [(str(name), entry) for name, entry in table.items()]
    if isinstance(table, Sequence) and not isinstance(table, (str, bytes)):
        entries: list[BatchEntry] = []
        for index, entry in enumerate(table):
            name = f"criteria[{index}]"
            if isinstance(entry, Mapping):
                name = str(entry.get("name") or entry.get("title") or name)
            entries.append((name, entry))
        return entries
    raise TypeError("Criteria payload must be a mapping or a sequence of mappings")


def solve_batch(
    entries: Iterable[BatchEntry],
    *,
    max_workers: int | None = None,
    condition_limit: float = DEFAULT_CONDITION_LIMIT,
) -> list[BatchOutcome]:
    """Solve every entry, capturing per-entry criteria and singular errors.

    Outcomes are returned in input order.  ``max_workers`` greater than one
    distributes the solves over a process pool.
    """

    materialised = list(entries)
    if max_workers is not None and max_workers > 1 and len(materialised) > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(_solve_entry, name, definition, condition_limit)
                for name, definition in materialised
            ]
            outcomes = [future.result() for future in futures]
    else:
        outcomes = [
            _solve_entry(name, definition, condition_limit)
            for name, definition in materialised
        ]

    failed = [outcome for outcome in outcomes if not outcome.ok]
    for outcome in failed:
        logger.warning(
            "Skipping criteria entry that could not be solved.",
            extra={
                "event": "batch.entry_failed",
                "entry": outcome.name,
                "category": (outcome.error or {}).get("category"),
            },
        )
    logger.info(
        "Batch solve finished.",
        extra={
            "event": "batch.finished",
            "entries": len(outcomes),
            "failed": len(failed),
        },
    )
    return outcomes
