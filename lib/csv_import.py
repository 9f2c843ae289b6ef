# =============================================================================
# lib/csv_import.py - CSV Readers for Member Imports
# =============================================================================
# Reads the two CSV exports admins upload:
# - WordPress user exports (header-based: user_email, display_name, user_pass)
# - Student contact exports (positional: First Name, Last Name, Email,
#   Status, Tags, ...) used to repair profile tags
#
# Both go through pandas so quoted fields containing commas, embedded
# newlines and BOMs are handled by a real CSV parser.
# =============================================================================

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Any

import pandas as pd

from lib.utils import is_plausible_email, normalize_email

logger = logging.getLogger(__name__)

ENCODINGS_TO_TRY = ["utf-8-sig", "utf-8", "latin-1", "cp1252"]

# Column aliases, first match wins
EMAIL_COLUMNS = ["user_email", "email"]
NAME_COLUMNS = ["display_name", "name", "user_nicename"]
PASSWORD_HASH_COLUMNS = ["user_pass", "password_hash"]

# Positions in the contact export
CONTACT_EMAIL_INDEX = 2
CONTACT_TAGS_INDEX = 4
CONTACT_MIN_FIELDS = 5
# Wider rows are truncated; only the first five positions are used
CONTACT_MAX_FIELDS = 64


class CSVImportError(ValueError):
    """Raised when an uploaded CSV can't be decoded or parsed."""


@dataclass
class ContactTags:
    """One row of the contact export: an email and its raw tag string."""
    email: str
    tags: str

    def to_dict(self) -> dict[str, str]:
        return {"email": self.email, "tags": self.tags}


def _read_with_fallback(content: str | bytes, **options: Any) -> pd.DataFrame:
    """Run pd.read_csv over the content, trying common encodings for bytes."""
    if isinstance(content, str):
        candidates = [(content.encode("utf-8"), "utf-8")]
    else:
        candidates = [(content, encoding) for encoding in ENCODINGS_TO_TRY]

    last_error: Exception | None = None
    for raw, encoding in candidates:
        try:
            df = pd.read_csv(
                io.BytesIO(raw),
                encoding=encoding,
                dtype=str,
                keep_default_na=False,
                skipinitialspace=True,
                skip_blank_lines=True,
                **options,
            )
        except (UnicodeDecodeError, UnicodeError) as e:
            last_error = e
            continue
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except pd.errors.ParserError as e:
            raise CSVImportError(f"Malformed CSV: {e}") from e

        logger.debug(f"Read CSV with {encoding}: {len(df)} rows × {len(df.columns)} columns")
        return df

    raise CSVImportError(f"Could not decode CSV: {last_error}")


def read_csv_text(content: str | bytes) -> pd.DataFrame:
    """
    Read header-based CSV content into a DataFrame of strings.

    Bytes are decoded by trying common encodings in turn. Every cell is
    kept as text (no NaN/number coercion) and stripped of surrounding
    whitespace.

    Raises:
        CSVImportError: If no encoding works or the CSV is malformed
    """
    df = _read_with_fallback(content)
    if df.empty:
        return df

    df.columns = [str(column).strip() for column in df.columns]
    return df.fillna("").apply(lambda column: column.str.strip())


def _first_present(row: dict[str, Any], columns: list[str]) -> str:
    for column in columns:
        value = row.get(column)
        if value:
            return str(value)
    return ""


def parse_wordpress_users_csv(content: str | bytes) -> list[dict[str, str]]:
    """
    Parse a WordPress users export into import-ready dicts.

    Column names are matched case-insensitively. Rows keep their order;
    rows without an email are kept so the importer can report them.

    Returns:
        List of {"email", "display_name", "user_pass"} dicts
    """
    df = read_csv_text(content)
    if df.empty:
        return []

    df.columns = [column.lower() for column in df.columns]
    if not any(column in df.columns for column in EMAIL_COLUMNS):
        raise CSVImportError(
            f"CSV has no email column (expected one of: {', '.join(EMAIL_COLUMNS)})"
        )

    users = []
    for row in df.to_dict(orient="records"):
        users.append({
            "email": normalize_email(_first_present(row, EMAIL_COLUMNS)),
            "display_name": _first_present(row, NAME_COLUMNS),
            "user_pass": _first_present(row, PASSWORD_HASH_COLUMNS),
        })

    logger.info(f"Parsed {len(users)} WordPress users from CSV")
    return users


def parse_contacts_csv(content: str | bytes) -> list[ContactTags]:
    """
    Parse a student contact export (first row is the header).

    Columns are read by position, so rows may carry extra trailing fields.
    Rows with fewer than five fields or without a plausible email are
    skipped.
    """
    df = _read_with_fallback(
        content,
        header=None,
        skiprows=1,
        names=list(range(CONTACT_MAX_FIELDS)),
        engine="python",
        on_bad_lines=lambda fields: fields[:CONTACT_MAX_FIELDS],
    )
    if df.empty:
        return []

    # Short rows are padded with NaN, explicit empty fields stay ""
    field_counts = df.notna().sum(axis=1)
    df = df[field_counts >= CONTACT_MIN_FIELDS].fillna("")

    contacts = []
    for values in df.itertuples(index=False, name=None):
        email = normalize_email(values[CONTACT_EMAIL_INDEX])
        if not email or not is_plausible_email(email):
            continue
        contacts.append(ContactTags(email=email, tags=values[CONTACT_TAGS_INDEX].strip()))

    logger.info(f"Parsed {len(contacts)} contacts from CSV")
    return contacts
