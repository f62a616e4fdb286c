import csv
import io
import logging
from typing import Dict, List, Mapping, Sequence

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Accepted header spellings per logical field, in priority order.
STUDENT_FIELD_ALIASES: Dict[str, List[str]] = {
    "student_id": ["Student ID", "student_id", "ID", "id"],
    "first_name": ["First Name", "first_name", "FirstName", "Name"],
    "last_name": ["Last Name", "last_name", "LastName", "Surname"],
    "strand": ["Strand", "strand"],
    "year_level": ["Year Level", "year_level", "Grade", "grade"],
    "section": ["Section", "section"],
    "email": ["Email", "email"],
    "phone": ["Phone", "phone", "Contact", "contact"],
}

# Canonical export layout: CSV header -> Student attribute
STUDENT_EXPORT_COLUMNS: Dict[str, str] = {
    "Student ID": "student_id",
    "First Name": "first_name",
    "Last Name": "last_name",
    "Strand": "strand",
    "Year Level": "year_level",
    "Section": "section",
    "Email": "email",
    "Phone": "phone",
}


class StudentImportRow(BaseModel):
    """One parsed CSV line, resolved from header aliases to logical fields."""
    student_id: str = ""
    first_name: str = ""
    last_name: str = ""
    strand: str = ""
    year_level: str = ""
    section: str = ""
    email: str = ""
    phone: str = ""


def parse_csv(csv_text: str) -> List[Dict[str, str]]:
    """
    Parses comma separated text into one dict per data line.

    Blank lines are dropped and the first remaining line is the header.
    Values are matched to headers by position and trimmed; a line with
    fewer values than headers gets "" for the missing ones, extra values
    are ignored. A quoted field may contain commas but not line breaks.
    """
    lines = [line for line in csv_text.lstrip("\ufeff").split("\n") if line.strip()]
    if not lines:
        return []

    reader = csv.reader(lines)
    headers = [header.strip() for header in next(reader)]
    rows = []
    for values in reader:
        values = [value.strip() for value in values]
        rows.append({
            header: values[index] if index < len(values) else ""
            for index, header in enumerate(headers)
        })

    logger.debug(f"Parsed {len(rows)} CSV rows with headers {headers}")
    return rows


def resolve_student_row(row: Mapping[str, str]) -> StudentImportRow:
    """Picks, for every logical field, the first alias that holds a non-empty value."""
    resolved = {}
    for field, aliases in STUDENT_FIELD_ALIASES.items():
        resolved[field] = next((row[alias] for alias in aliases if row.get(alias)), "")
    return StudentImportRow(**resolved)


def to_csv(rows: Sequence[Mapping[str, object]], headers: Sequence[str]) -> str:
    """
    Renders rows under the given header line.
    Fields containing a comma or a quote are quoted, missing values become "".
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if row.get(header) is None else row.get(header) for header in headers])
    # No trailing newline after the last row.
    return buffer.getvalue().rstrip("\n")
