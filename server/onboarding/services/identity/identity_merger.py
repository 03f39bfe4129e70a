"""Pure merge and de-duplication rules for candidate identities"""
from typing import Dict, Iterable, List, Optional

def author_key(record: Dict) -> str:
    """Stable identity key: trimmed author_id, else the database id"""
    author_id = record.get("author_id")
    if isinstance(author_id, str) and author_id.strip():
        return author_id.strip()
    return str(record.get("_id", ""))

def dedup_key(record: Dict) -> str:
    for field in ("email", "author_id", "_id"):
        value = record.get(field)
        if value:
            return str(value).strip().lower()
    return ""

def merge_pair(legacy: Optional[Dict], current: Optional[Dict]) -> Optional[Dict]:
    """
    One logical record from the two schemas.

    Current-schema values win on overlapping fields; fields only one side
    carries are kept. A None in the current record does not erase a legacy value.
    """
    if legacy is None and current is None:
        return None
    merged: Dict = dict(legacy or {})
    for field, value in (current or {}).items():
        if value is not None or field not in merged:
            merged[field] = value
    sources = []
    if legacy is not None:
        sources.append("legacy")
    if current is not None:
        sources.append("current")
    merged["identitySources"] = sources
    return merged

def merge_by_author_id(legacy_docs: Iterable[Dict], current_docs: Iterable[Dict]) -> Dict[str, Dict]:
    """Overlay current-collection records onto legacy ones, keyed by trimmed author_id"""
    legacy_map = {author_key(doc): doc for doc in legacy_docs}
    current_map = {author_key(doc): doc for doc in current_docs}
    return {
        key: merge_pair(legacy_map.get(key), current_map.get(key))
        for key in list(legacy_map) + [k for k in current_map if k not in legacy_map]
    }

def dedup_records(records: Iterable[Dict]) -> List[Dict]:
    """
    De-duplicate a listing by lowercase email (fallback author_id, then _id).

    First seen wins, unless a later record carries an author_id the kept one lacks.
    Output keeps first-seen order.
    """
    kept: Dict[str, Dict] = {}
    for record in records:
        key = dedup_key(record)
        existing = kept.get(key)
        if existing is None:
            kept[key] = record
        elif record.get("author_id") and not existing.get("author_id"):
            kept[key] = record
    return list(kept.values())

def candidate_summary(record: Dict) -> Dict:
    return {
        "author_id": author_key(record),
        "name": record.get("name"),
        "email": record.get("email"),
    }
