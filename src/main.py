import logging
import os
import sys
from decimal import Decimal
from typing import Iterable, List, Optional, TextIO

from models import AccountSummary
from payments_engine import PaymentsEngine

LOG_LEVEL_ENV = "PAYMENTS_ENGINE_LOG_LEVEL"
DEFAULT_LOG_LEVEL = logging.WARNING


def resolve_log_level(value: Optional[str]) -> int:
    """Accept a level name or number; anything else means the default."""
    if not value:
        return DEFAULT_LOG_LEVEL
    value = value.strip().upper()
    if value.isdigit():
        return int(value)
    level = getattr(logging, value, None)
    return level if isinstance(level, int) else DEFAULT_LOG_LEVEL


def format_decimal(value: Decimal) -> str:
    """Fixed-point form, keeping the scale the arithmetic produced."""
    return f"{value:f}"


def write_report(summaries: Iterable[AccountSummary], out: TextIO) -> None:
    out.write("client,available,held,total,locked\n")
    for summary in sorted(summaries, key=lambda s: s.client_id):
        out.write(
            f"{summary.client_id},"
            f"{format_decimal(summary.available)},"
            f"{format_decimal(summary.held)},"
            f"{format_decimal(summary.total)},"
            f"{str(summary.locked).lower()}\n"
        )


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    logging.basicConfig(
        level=resolve_log_level(os.environ.get(LOG_LEVEL_ENV)),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(argv) != 1:
        print("Usage: payments-engine <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[0]
    engine = PaymentsEngine()
    try:
        engine.process_file(filepath)
    except OSError as e:
        print(f"Unable to open the input file: {e}", file=sys.stderr)
        return 1

    write_report(engine.account_summaries(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
