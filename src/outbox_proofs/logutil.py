import logging
import re
from typing import Iterable


_HEX_DIGEST = re.compile(r"\b([0-9a-f]{8})[0-9a-f]{56}\b")


class DigestAbbreviatingFilter(logging.Filter):
    """Shorten 64-char hex digests in log records to their first 8 chars."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        short = _HEX_DIGEST.sub(r"\1..", msg)
        if short != msg:
            record.msg = short
            record.args = None
        return True


def setup_logging(
    level=logging.INFO,
    loggers: Iterable[str] = ("outbox_proofs", "outbox_cli"),
    abbreviate: bool = True,
) -> None:
    logging.basicConfig(level=level)
    for name in loggers:
        logging.getLogger(name).setLevel(level)
    if not abbreviate:
        return
    # Logger filters do not see records from child loggers; handlers do
    f = DigestAbbreviatingFilter()
    for handler in logging.getLogger().handlers:
        if not any(isinstance(x, DigestAbbreviatingFilter) for x in handler.filters):
            handler.addFilter(f)
