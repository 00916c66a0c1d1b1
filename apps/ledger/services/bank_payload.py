"""
Bank payload normalisation.

The interbank transfer network only accepts unaccented Latin letters,
digits and whitespace in the account-holder name and the transfer memo.
Both helpers are total: any string (including '') maps to a string.
"""

import re
import unicodedata

MEMO_MAX_LENGTH = 25

_COMBINING_MARKS = re.compile('[\u0300-\u036f]')
_DISALLOWED_CHARS = re.compile(r'[^0-9A-Za-z\s]')


def _strip_to_bank_charset(raw):
    decomposed = unicodedata.normalize('NFD', raw or '')
    without_marks = _COMBINING_MARKS.sub('', decomposed)
    return _DISALLOWED_CHARS.sub('', without_marks)


def normalize_account_name(raw: str) -> str:
    """
    Normalise an account-holder name for a transfer.

    >>> normalize_account_name('Nguyễn Văn A')
    'NGUYEN VAN A'
    """
    return _strip_to_bank_charset(raw).upper().strip()


def normalize_memo(raw: str) -> str:
    """Normalise a transfer memo, capped at 25 characters."""
    return _strip_to_bank_charset(raw).strip()[:MEMO_MAX_LENGTH]
