"""Loading of the non-working-day list.

The list is a comma-separated resource with one date literal per field,
written as day/month/year. Day and month may have one or two digits, so
"5/01/2024" and "05/01/2024" are the same date. Blank and unparseable
fields are dropped without complaint.

Sources can be a local file, an HTTPS URL, or the list bundled with the
package (public holidays for 2022-2030 and the following Christmas period).
"""

import csv
import io
import logging
import re
from datetime import date
from importlib import resources
from pathlib import Path
from urllib.error import URLError
from urllib.request import urlopen

from consentcalc.calendar.models import DegradedCalendarError

logger = logging.getLogger(__name__)

BUNDLED_SOURCE = resources.files("consentcalc.data") / "non-working-days.csv"

DATE_LITERAL_PATTERN = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")

URL_TIMEOUT_SECONDS = 30


def parse_date_literal(text: str) -> date | None:
    """Parse a d/m/yyyy date literal.

    Args:
        text: Field value from the source (surrounding whitespace ignored)

    Returns:
        Parsed date, or None if the value is blank or not a valid date
    """
    match = DATE_LITERAL_PATTERN.fullmatch(text.strip())
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_non_working_days(text: str) -> frozenset[date]:
    """Parse the comma-separated non-working-day list.

    Rows are flattened, so the source may hold one date per line or
    several per line.

    Args:
        text: Full text of the source

    Returns:
        Set of non-working dates
    """
    days: set[date] = set()
    skipped = 0
    for row in csv.reader(io.StringIO(text)):
        for field in row:
            if not field.strip():
                continue
            parsed = parse_date_literal(field)
            if parsed is None:
                skipped += 1
                logger.debug("Skipping unparseable non-working day: %r", field)
                continue
            days.add(parsed)

    if skipped:
        logger.debug("Skipped %d unparseable entries", skipped)
    return frozenset(days)


def _read_url(url: str) -> str:
    """Fetch a remote source over HTTPS."""
    if not url.startswith("https://"):
        raise DegradedCalendarError(f"Only HTTPS URLs are allowed: {url}")
    logger.debug("Fetching non-working days from %s", url)
    try:
        # S310: URL scheme validated above, only HTTPS allowed
        with urlopen(url, timeout=URL_TIMEOUT_SECONDS) as response:  # noqa: S310
            content = response.read()
    except (URLError, OSError) as e:
        raise DegradedCalendarError(f"Failed to fetch {url}: {e}") from e
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DegradedCalendarError(f"{url} is not valid UTF-8 text") from e


def read_source(source: Path | str | None = None) -> str:
    """Read the raw text of a non-working-day source.

    Args:
        source: File path, https:// URL, or None for the bundled list

    Returns:
        Source text

    Raises:
        DegradedCalendarError: If the source cannot be read
    """
    if source is None:
        logger.debug("Reading bundled non-working days")
        return BUNDLED_SOURCE.read_text(encoding="utf-8")

    if isinstance(source, str) and "://" in source:
        return _read_url(source)

    path = Path(source).expanduser()
    logger.debug("Reading non-working days from %s", path)
    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise DegradedCalendarError(f"Non-working days file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise DegradedCalendarError(f"Failed to read {path}: {e}") from e


def load_non_working_days(source: Path | str | None = None) -> frozenset[date]:
    """Read and parse a non-working-day source.

    Args:
        source: File path, https:// URL, or None for the bundled list

    Returns:
        Set of non-working dates

    Raises:
        DegradedCalendarError: If the source cannot be read
    """
    days = parse_non_working_days(read_source(source))
    logger.info("Loaded %d non-working days", len(days))
    return days
