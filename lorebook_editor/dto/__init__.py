# This file marks the dto directory as a Python package.

from .lorebook_dto import (
    EntryDTO, EntryUpdateDTO, LorebookDTO, ExportDTO, EntryBoundsDTO, DragPointerDTO
)

__all__ = [
    'EntryDTO', 'EntryUpdateDTO', 'LorebookDTO', 'ExportDTO', 'EntryBoundsDTO', 'DragPointerDTO'
]
