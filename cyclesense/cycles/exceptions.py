"""Errors raised by the cycle analysis engine."""


class CycleAnalysisError(Exception):
    """Raised by ``analyze`` when the pipeline cannot produce a result.

    Callers catch this and show :func:`~cyclesense.cycles.analyzer.placeholder_analysis`
    instead.  Sparse data never raises; only non-conforming input does.
    """


class RecordParseError(CycleAnalysisError):
    """A raw record carries its required fields but they cannot be parsed."""

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"Unparseable {kind} record: {detail}")
