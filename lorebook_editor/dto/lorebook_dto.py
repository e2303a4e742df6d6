from typing import List, Dict, Optional, Any
from pydantic import BaseModel, Field, field_validator, model_validator

from lorebook_editor.models.lorebook import SelectiveLogic, EDITABLE_FIELDS, STRATEGY_FIELDS, POSITION_FIELDS
from lorebook_editor.models.reorder import EntryBounds
from lorebook_editor.models.strategy import Strategy
from lorebook_editor.utils.utils import split_keywords

# --- Entry DTOs ---

class EntryDTO(BaseModel):
    uid: int
    display_index: int
    keys: List[str] = Field(default_factory=list)
    secondary_keys: List[str] = Field(default_factory=list)
    comment: str = ''
    content: str = ''
    disabled: bool = False
    selective: bool = True
    selective_logic: SelectiveLogic = SelectiveLogic.AND
    strategy: Strategy
    constant: bool
    vectorized: bool
    attributes: Dict[str, Any] = Field(default_factory=dict)
    can_move_up: bool = False
    can_move_down: bool = False

    model_config = {"from_attributes": True}

class EntryUpdateDTO(BaseModel):
    keys: Optional[List[str]] = None
    secondary_keys: Optional[List[str]] = None
    comment: Optional[str] = None
    content: Optional[str] = None
    disabled: Optional[bool] = None
    selective: Optional[bool] = None
    selective_logic: Optional[SelectiveLogic] = None
    strategy: Optional[Strategy] = None
    attributes: Optional[Dict[str, Any]] = None

    model_config = {"extra": "forbid"}

    @field_validator('keys', 'secondary_keys', mode='before')
    @classmethod
    def split_comma_separated(cls, v: Any) -> Any:
        if v is None:
            return v
        return split_keywords(v)

    @field_validator('attributes')
    @classmethod
    def check_opaque_fields(cls, v: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if v is None:
            return v
        reserved = [name for name in v if name in EDITABLE_FIELDS or name in STRATEGY_FIELDS or name in POSITION_FIELDS]
        if reserved:
            raise ValueError(f"Fields {reserved} cannot be edited as attributes")
        return v

    @model_validator(mode='before')
    @classmethod
    def check_at_least_one_value(cls, data: Any) -> Any:
        if isinstance(data, dict):
            if not data:
                raise ValueError("At least one field must be provided for update")
            if all(v is None for v in data.values()):
                raise ValueError("At least one field must be provided for update")
        return data

    def changes(self) -> Dict[str, Any]:
        """The fields that were actually provided."""
        return {name: getattr(self, name) for name in self.model_fields_set if getattr(self, name) is not None}

# --- Lorebook DTOs ---

class LorebookDTO(BaseModel):
    file_name: str
    entries: List[EntryDTO] = Field(default_factory=list)

class ExportDTO(BaseModel):
    file_name: str
    text: str

# --- Drag DTOs ---

class EntryBoundsDTO(BaseModel):
    uid: int
    top: float
    height: float = Field(..., ge=0)

    def to_bounds(self) -> EntryBounds:
        return EntryBounds(uid=self.uid, top=self.top, height=self.height)

class DragPointerDTO(BaseModel):
    y: float
    bounds: List[EntryBoundsDTO] = Field(default_factory=list)

    def entry_bounds(self) -> List[EntryBounds]:
        return [bounds.to_bounds() for bounds in self.bounds]

