from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.discovery",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Skipping entity enrichment",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    line = formatter.format(_record(uri="http://hub.local", domain=["light", "switch"], count=3, unknown="x"))

    assert line == "Skipping entity enrichment | uri=http://hub.local domain=light,switch"


def test_formatter_quotes_values_with_spaces_and_skips_none() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    line = formatter.format(_record(reason="connection refused", status=None))

    assert line == "Skipping entity enrichment | reason='connection refused'"


def test_formatter_without_context_is_plain() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    assert formatter.format(_record()) == "WARNING Skipping entity enrichment"
