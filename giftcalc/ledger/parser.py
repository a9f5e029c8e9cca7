"""
Ledger Line Parser

The gift log is a free-form text file a user may edit by hand, so the
parser is deliberately tolerant: a line that does not match

    <ISO-8601 instant, ms precision> <amount> <CCY>[ for <name>][ (<annotation>)]

yields None and is skipped by readers. Parsing never raises.
"""

import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from pydantic import ValidationError

from giftcalc.models.ledger import LedgerEntry
from giftcalc.services.currency import Number, format_amount

LINE_PATTERN = re.compile(
    r"^(?P<timestamp>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}(?:Z|[+-]\d{2}:\d{2}))"
    r"\s+(?P<rest>"
    r"(?P<amount>\d+(?:\.\d+)?)"
    r"\s+(?P<currency>[A-Z]{3})"
    r"(?:\s+for(?:\s+(?P<recipient>.+?))?)?"
    r"(?:\s+\((?P<annotation>[^()]*)\))?"
    r")\s*$"
)


def _parse_instant(text: str) -> Optional[datetime]:
    try:
        # fromisoformat only understands "Z" from Python 3.11 on
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.astimezone(timezone.utc)


def parse_entry(line: str) -> Optional[LedgerEntry]:
    """
    Parse one ledger line.
    
    Returns None for anything that does not match the grammar: blank
    lines, non-ISO timestamps, missing or unparsable amounts, missing
    currency codes.
    """
    if not isinstance(line, str):
        return None
    
    match = LINE_PATTERN.match(line.strip())
    if match is None:
        return None
    
    timestamp = _parse_instant(match.group("timestamp"))
    if timestamp is None:
        return None
    
    try:
        amount = Decimal(match.group("amount"))
    except InvalidOperation:
        return None
    
    recipient = match.group("recipient")
    if recipient is not None:
        recipient = recipient.strip() or None
    
    try:
        return LedgerEntry(
            timestamp=timestamp,
            amount=amount,
            currency=match.group("currency"),
            recipient=recipient,
            raw_text=match.group("rest").strip(),
        )
    except ValidationError:
        return None


def parse_lines(lines: Iterable[str]) -> list[LedgerEntry]:
    """Parse lines in file order, silently dropping the ones that don't match."""
    entries = []
    for line in lines:
        entry = parse_entry(line)
        if entry is not None:
            entries.append(entry)
    return entries


def format_timestamp(timestamp: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    utc = timestamp.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def render_output(
    amount: Number,
    currency: str,
    recipient: Optional[str] = None,
    annotation: Optional[str] = None,
) -> str:
    """The part of a ledger line after the timestamp."""
    output = f"{format_amount(amount)} {currency.upper()}"
    if recipient and recipient.strip():
        output += f" for {recipient.strip()}"
    if annotation:
        output += f" ({annotation})"
    return output


def render_entry(
    timestamp: datetime,
    amount: Number,
    currency: str,
    recipient: Optional[str] = None,
    annotation: Optional[str] = None,
) -> str:
    """Render a canonical ledger line (without trailing newline)."""
    return f"{format_timestamp(timestamp)} {render_output(amount, currency, recipient, annotation)}"
