import copy
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Dict, Any

from lorebook_editor.utils.utils import split_keywords, coerce_bool
from .strategy import Strategy, to_flags, to_strategy


class SelectiveLogic(IntEnum):
    AND = 0
    NOT = 1


# Field order here is the order fields are written on export.
DEFAULT_ENTRY_DATA: Dict[str, Any] = {
    'uid': 0,
    'key': [],
    'keysecondary': [],
    'comment': '',
    'content': '',
    'constant': False,
    'vectorized': True,
    'selective': True,
    'selectiveLogic': 0,
    'addMemo': True,
    'order': 100,
    'position': 0,
    'disable': False,
    'excludeRecursion': False,
    'preventRecursion': False,
    'delayUntilRecursion': False,
    'probability': 100,
    'useProbability': True,
    'depth': 4,
    'group': '',
    'groupOverride': False,
    'groupWeight': 100,
    'scanDepth': None,
    'caseSensitive': None,
    'matchWholeWords': None,
    'useGroupScoring': None,
    'automationId': '',
    'role': None,
    'sticky': 0,
    'cooldown': 0,
    'delay': 0,
    'displayIndex': 0,
}

# document field -> Entry attribute, for the fields the editor interprets
EDITABLE_FIELDS: Dict[str, str] = {
    'key': 'keys',
    'keysecondary': 'secondary_keys',
    'comment': 'comment',
    'content': 'content',
    'disable': 'disabled',
    'selective': 'selective',
    'selectiveLogic': 'selective_logic',
}
ATTRIBUTE_FIELDS: Dict[str, str] = {attr: name for name, attr in EDITABLE_FIELDS.items()}
STRATEGY_FIELDS = ('constant', 'vectorized')
POSITION_FIELDS = ('uid', 'displayIndex')
OPAQUE_FIELDS = tuple(
    name for name in DEFAULT_ENTRY_DATA
    if name not in EDITABLE_FIELDS and name not in STRATEGY_FIELDS and name not in POSITION_FIELDS
)


def default_attributes() -> Dict[str, Any]:
    return {name: copy.deepcopy(DEFAULT_ENTRY_DATA[name]) for name in OPAQUE_FIELDS}


@dataclass
class Entry:
    """
    One lore record.

    'uid' is the stable identity. 'display_index' only mirrors the entry's
    position in the registry and is rewritten by the registry whenever the
    order changes. Fields the editor does not interpret live in 'attributes'
    under their document names, including fields outside the default schema.
    """
    uid: int
    keys: List[str] = field(default_factory=list)
    secondary_keys: List[str] = field(default_factory=list)
    comment: str = ''
    content: str = ''
    disabled: bool = False
    selective: bool = True
    selective_logic: SelectiveLogic = SelectiveLogic.AND
    strategy: Strategy = Strategy.NORMAL
    attributes: Dict[str, Any] = field(default_factory=default_attributes)
    display_index: int = 0

    @classmethod
    def new(cls, uid: int) -> 'Entry':
        """Builds an entry from the default schema, as the 'add entry' actions do."""
        entry = cls(uid=uid)
        for name in EDITABLE_FIELDS:
            entry.set_field(name, copy.deepcopy(DEFAULT_ENTRY_DATA[name]))
        entry.strategy = to_strategy(DEFAULT_ENTRY_DATA['constant'], DEFAULT_ENTRY_DATA['vectorized'])
        return entry

    @property
    def constant(self) -> bool:
        return to_flags(self.strategy)[0]

    @property
    def vectorized(self) -> bool:
        return to_flags(self.strategy)[1]

    @property
    def enabled(self) -> bool:
        return not self.disabled

    def get_field(self, name: str) -> Any:
        """Reads a field by its document name."""
        if name == 'uid':
            return self.uid
        if name == 'displayIndex':
            return self.display_index
        if name == 'constant':
            return self.constant
        if name == 'vectorized':
            return self.vectorized
        if name in EDITABLE_FIELDS:
            value = getattr(self, EDITABLE_FIELDS[name])
            if name == 'selectiveLogic':
                return int(value)
            return list(value) if isinstance(value, list) else value
        if name in self.attributes:
            return self.attributes[name]
        if name in DEFAULT_ENTRY_DATA:
            return copy.deepcopy(DEFAULT_ENTRY_DATA[name])
        raise KeyError(name)

    def set_field(self, name: str, value: Any):
        """
        Writes a field by its document name, normalizing editable fields.
        Identity, position and the strategy flags cannot be written here.
        """
        if name in POSITION_FIELDS:
            raise ValueError(f"'{name}' is managed by the registry")
        if name in STRATEGY_FIELDS:
            raise ValueError(f"'{name}' is derived from the strategy; set the strategy instead")

        if name in ('key', 'keysecondary'):
            value = split_keywords(value)
        elif name in ('comment', 'content'):
            value = '' if value is None else str(value)
        elif name in ('disable', 'selective'):
            value = coerce_bool(value)
        elif name == 'selectiveLogic':
            value = SelectiveLogic(int(value))

        if name in EDITABLE_FIELDS:
            setattr(self, EDITABLE_FIELDS[name], value)
        else:
            self.attributes[name] = value

    def update(self, **changes: Any):
        """Applies edits given by attribute name ('keys', 'strategy', 'attributes', ...)."""
        for attr, value in changes.items():
            if attr == 'strategy':
                self.strategy = Strategy(value)
            elif attr == 'attributes':
                for name, attribute_value in value.items():
                    self.set_field(name, attribute_value)
            elif attr in ATTRIBUTE_FIELDS:
                self.set_field(ATTRIBUTE_FIELDS[attr], value)
            else:
                raise AttributeError(f"Entry has no editable field '{attr}'")

    def copy_with(self, uid: int) -> 'Entry':
        """Returns a deep copy of this entry under a new uid."""
        duplicate = copy.deepcopy(self)
        duplicate.uid = uid
        duplicate.display_index = 0
        return duplicate
