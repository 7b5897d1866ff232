"""
Reference population.

Documents store other documents by id. These helpers swap those ids for
summary dicts in place, using one batched lookup per call. Ids that no
longer resolve are left as plain strings.
"""

from typing import Any, Dict, Iterable, List, Sequence

from agriloop.repositories.user_repo import UserRepository
from agriloop.repositories.waste_repo import WasteListingRepository


def _collect(documents: Iterable[Dict[str, Any]], fields: Sequence[str], nested: Sequence[str]) -> set:
    ids = set()
    for document in documents:
        for field in fields:
            if isinstance(document.get(field), str):
                ids.add(document[field])
        for path in nested:
            array, key = path.split(".")
            for item in document.get(array) or []:
                if isinstance(item.get(key), str):
                    ids.add(item[key])
    return ids


def _replace(document: Dict[str, Any], fields: Sequence[str], nested: Sequence[str], found: Dict[str, Any]) -> None:
    for field in fields:
        value = document.get(field)
        if isinstance(value, str) and value in found:
            document[field] = found[value]
    for path in nested:
        array, key = path.split(".")
        for item in document.get(array) or []:
            value = item.get(key)
            if isinstance(value, str) and value in found:
                item[key] = found[value]


async def populate_users(
    user_repo: UserRepository,
    documents: List[Dict[str, Any]],
    fields: Sequence[str] = (),
    nested: Sequence[str] = (),
) -> List[Dict[str, Any]]:
    """
    Replace user ids with user summaries.

    Args:
        user_repo: Source of summaries
        documents: Documents to populate in place
        fields: Top-level reference fields, e.g. ("farmer",)
        nested: "array.key" paths inside embedded arrays, e.g. ("chat.sender",)

    Returns:
        The same documents
    """
    ids = _collect(documents, fields, nested)
    if ids:
        found = await user_repo.get_summaries(ids)
        for document in documents:
            _replace(document, fields, nested, found)
    return documents


async def populate_listings(
    listing_repo: WasteListingRepository,
    documents: List[Dict[str, Any]],
    field: str = "waste_listing",
) -> List[Dict[str, Any]]:
    """Replace listing ids under ``field`` with listing summaries."""
    ids = _collect(documents, (field,), ())
    if ids:
        found = await listing_repo.get_summaries(ids)
        for document in documents:
            _replace(document, (field,), (), found)
    return documents
