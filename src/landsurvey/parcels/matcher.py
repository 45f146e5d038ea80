"""Local dataset matcher: free-text query against the tax/address dataset.

Matching is case-insensitive *substring* matching, not prefix or token
matching, to tolerate partial and malformed reference data. There is no
relevance score; results keep data-source order and are capped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from landsurvey.parcels.models import AttributeRecord, Parcel, SearchCandidate
from landsurvey.parcels.normalize import clean_query, compose_address, normalize_key

logger = logging.getLogger(__name__)

DEFAULT_RESULT_LIMIT = 5


def record_address(record: AttributeRecord) -> str:
    """Display address for a tax record: number, direction, street, suffix."""
    return compose_address(
        record.house_number,
        record.direction,
        record.street_name,
        record.street_suffix,
    )


def index_parcels(parcels: Iterable[Parcel]) -> dict[str, Parcel]:
    """Index parcels by normalized identifier. The first parcel for a key wins."""
    index: dict[str, Parcel] = {}
    for parcel in parcels:
        index.setdefault(normalize_key(parcel.identifier), parcel)
    return index


def build_candidate(
    record: AttributeRecord | None,
    parcel: Parcel | None,
    unknown_label: str = "",
) -> SearchCandidate:
    """Merge an attribute record and a parcel into one candidate.

    Either side may be missing; a missing parcel leaves ``lat``, ``lng`` and
    ``geometry`` null, a missing record yields ``unknown_label`` as address.
    """
    address = record_address(record) if record is not None else ""
    return SearchCandidate(
        id=parcel.id if parcel is not None else None,
        owner_name=record.identifier if record is not None else "",
        address=address or unknown_label,
        lat=parcel.centroid.lat if parcel is not None else None,
        lng=parcel.centroid.lng if parcel is not None else None,
        geometry=parcel.geometry_json if parcel is not None else None,
    )


def record_matches(record: AttributeRecord, cleaned: str, raw: str) -> bool:
    """Apply the three substring predicates to one record."""
    address = record_address(record)
    raw_lower = raw.lower()
    if cleaned and cleaned in clean_query(address):
        return True
    if raw_lower and raw_lower in address.lower():
        return True
    return bool(raw_lower) and raw_lower in str(record.identifier).lower()


def match_local(
    cleaned: str,
    raw: str,
    records: Iterable[AttributeRecord],
    parcels_by_key: Mapping[str, Parcel],
    limit: int = DEFAULT_RESULT_LIMIT,
    include_address_only: bool = True,
) -> list[SearchCandidate]:
    """Return up to ``limit`` candidates whose address or identifier matches.

    Args:
        cleaned: Output of :func:`clean_query` for the user query.
        raw: The query as typed.
        records: Tax/address records in data-source order.
        parcels_by_key: Parcels indexed by :func:`normalize_key`.
        limit: Result cap.
        include_address_only: Surface records that have no geometry, with
            null ``geometry``/``lat``/``lng``.

    Returns:
        Candidates in data-source order. Never raises on malformed records;
        they are skipped.
    """
    if limit <= 0:
        return []

    results: list[SearchCandidate] = []
    for record in records:
        try:
            if not record_matches(record, cleaned, raw):
                continue
            parcel = parcels_by_key.get(normalize_key(record.identifier))
        except (AttributeError, TypeError, ValueError) as exc:
            logger.debug("Skipping malformed attribute record %r: %s", record, exc)
            continue

        if parcel is None and not include_address_only:
            continue
        results.append(build_candidate(record, parcel))
        if len(results) >= limit:
            break
    return results
