import copy
import json
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from lorebook_editor.constants import ENTRIES_FIELD
from lorebook_editor.context import context
from lorebook_editor.models.lorebook import (Entry, DEFAULT_ENTRY_DATA, EDITABLE_FIELDS,
                                             STRATEGY_FIELDS, POSITION_FIELDS, default_attributes)
from lorebook_editor.models.strategy import to_strategy
from lorebook_editor.utils.uid_allocator import next_uid
from lorebook_editor.utils.utils import coerce_bool, create_logger

codec_log = create_logger(__name__, entity_name='DOCUMENT_CODEC', level=context.log_level)

INVALID_STRUCTURE_MESSAGE = 'JSON structure is invalid: Missing or invalid "entries" key.'


class DocumentError(Exception):
    """Base exception for documents that cannot be turned into entries."""
    pass

class ParseError(DocumentError):
    """The payload is not valid JSON."""
    pass

class FormatError(DocumentError):
    """The payload is valid JSON but not a lorebook."""
    pass


# --- Decoding ---

def _reject_constant(name: str):
    raise ParseError(f"Non-finite number {name} is not valid JSON")

def parse(raw: Union[str, bytes]) -> Any:
    """
    Parses the raw payload handed over by the upload collaborator.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise ParseError(f"Malformed UTF-8 characters: {e}") from e
    if not isinstance(raw, str):
        raise ParseError(f"Expected text, got {type(raw).__name__}")
    try:
        return json.loads(raw.lstrip('\ufeff'), parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ParseError(str(e)) from e

def _entry_items(document: Any) -> List[Tuple[Any, Any]]:
    """(key, value) pairs of the 'entries' collection, in encounter order."""
    if not isinstance(document, dict) or ENTRIES_FIELD not in document:
        raise FormatError(INVALID_STRUCTURE_MESSAGE)
    entries = document[ENTRIES_FIELD]
    if isinstance(entries, dict):
        return list(entries.items())
    if isinstance(entries, list):
        return list(enumerate(entries))
    raise FormatError(INVALID_STRUCTURE_MESSAGE)

def _as_uid(value: Any) -> Optional[int]:
    """Returns value as a valid uid, or None if it cannot be one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    if isinstance(value, int) and value >= 0:
        return value
    return None

def _resolve_uids(items: List[Tuple[Any, Dict[str, Any]]]) -> List[int]:
    """
    Assigns every entry a unique uid. The first entry to claim a valid uid
    (its own 'uid', else its key) keeps it; the others get fresh ones.
    """
    uids: List[Optional[int]] = []
    taken = set()
    for key, data in items:
        candidate = _as_uid(data['uid']) if data.get('uid') is not None else _as_uid(key)
        if candidate is not None and candidate not in taken:
            taken.add(candidate)
            uids.append(candidate)
        else:
            uids.append(None)

    for position, uid in enumerate(uids):
        if uid is None:
            uid = next_uid(taken)
            taken.add(uid)
            uids[position] = uid
            key, data = items[position]
            codec_log.debug(f"Entry '{key}' had a missing or duplicate uid ({data.get('uid')!r}), assigned {uid}")
    return uids

def decode_entry(data: Dict[str, Any], uid: int) -> Entry:
    """Builds an entry from one document value, defaulting absent fields."""
    entry = Entry(uid=uid, attributes=default_attributes())
    for name in EDITABLE_FIELDS:
        if name not in data:
            continue
        try:
            entry.set_field(name, data[name])
        except (TypeError, ValueError):
            codec_log.warning(f"Entry uid={uid}: invalid {name} {data[name]!r}, using the default")
            entry.set_field(name, DEFAULT_ENTRY_DATA[name])

    entry.strategy = to_strategy(coerce_bool(data.get('constant', False)), coerce_bool(data.get('vectorized', False)))

    for name, value in data.items():
        if name not in EDITABLE_FIELDS and name not in STRATEGY_FIELDS and name not in POSITION_FIELDS:
            entry.attributes[name] = value
    return entry

def decode(raw: Union[str, bytes]) -> List[Entry]:
    """
    Turns a lorebook document into entries in document order.
    Raises ParseError for unparsable payloads and FormatError for anything
    that is not a lorebook.
    """
    items = _entry_items(parse(raw))
    for key, data in items:
        if not isinstance(data, dict):
            codec_log.error(f"Entry '{key}' is a {type(data).__name__}, not an object")
            raise FormatError(INVALID_STRUCTURE_MESSAGE)

    uids = _resolve_uids(items)
    entries = [decode_entry(data, uid) for (key, data), uid in zip(items, uids)]
    for index, entry in enumerate(entries):
        entry.display_index = index
    codec_log.info(f"Decoded {len(entries)} entries")
    return entries


# --- Encoding ---

def encode_entry(entry: Entry) -> Dict[str, Any]:
    """Every default-schema field in schema order, then any extra fields the entry carries."""
    data = {name: entry.get_field(name) for name in DEFAULT_ENTRY_DATA}
    for name, value in entry.attributes.items():
        if name not in data:
            data[name] = value
    return copy.deepcopy(data)

def encode(entries: Iterable[Entry]) -> Dict[str, Any]:
    """
    Builds the document for entries in their given order. Keys are the
    positions as strings and each 'displayIndex' equals its key.
    """
    encoded = {}
    for index, entry in enumerate(entries):
        data = encode_entry(entry)
        data['displayIndex'] = index
        encoded[str(index)] = data
    return {ENTRIES_FIELD: encoded}

def dumps(entries: Iterable[Entry]) -> str:
    return json.dumps(encode(entries), indent=2, ensure_ascii=False, allow_nan=False)
