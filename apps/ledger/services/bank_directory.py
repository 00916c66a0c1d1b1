"""
Bank directory lookup.

Fetches the VietQR list of banks (name, short name, BIN, logo) and keeps it
in the Django cache for a day. Failures degrade to an empty directory so
ledger pages keep working without bank names and logos.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import requests
from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

BANK_DIRECTORY_CACHE_KEY = 'ledger:bank-directory'


@dataclass(frozen=True)
class BankInfo:
    short_name: str
    full_name: str
    logo_url: str


def _fetch_banks() -> List[dict]:
    try:
        response = requests.get(
            settings.VIETQR_BANKS_URL,
            timeout=settings.VIETQR_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.warning("Bank directory request failed: %s", e)
        return []

    if not response.ok:
        logger.warning("Bank directory returned HTTP %s", response.status_code)
        return []

    try:
        payload = response.json()
    except ValueError:
        logger.warning("Bank directory returned a non-JSON body")
        return []

    return payload.get('data') or []


def get_bank_directory() -> List[dict]:
    """
    Return the list of bank entries, cached for a day.

    Empty results are not cached so a transient outage is retried on the
    next call.
    """
    banks = cache.get(BANK_DIRECTORY_CACHE_KEY)
    if banks is not None:
        return banks

    banks = _fetch_banks()
    if banks:
        cache.set(
            BANK_DIRECTORY_CACHE_KEY,
            banks,
            timeout=settings.BANK_DIRECTORY_CACHE_SECONDS
        )
    return banks


def find_bank_by_code(banks: List[dict], code: Optional[str]) -> Optional[dict]:
    """Match a stored bank code against either the BIN or the short code."""
    if not code:
        return None
    normalized = code.strip()
    for bank in banks:
        if bank.get('bin') == normalized or bank.get('code') == normalized:
            return bank
    return None


def lookup_bank(code: Optional[str]) -> Optional[BankInfo]:
    """Resolve a bank code to display metadata, or None when unknown."""
    bank = find_bank_by_code(get_bank_directory(), code)
    if bank is None:
        return None
    return BankInfo(
        short_name=bank.get('shortName') or bank.get('name') or '',
        full_name=bank.get('name') or '',
        logo_url=bank.get('logo') or '',
    )
