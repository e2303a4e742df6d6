from lorebook_editor.models import Entry, EntryRegistry, EntryBounds, DragSession, resolve_drop_target
from lorebook_editor.models.reorder import target_index

def make_registry(*uids):
    return EntryRegistry([Entry.new(uid) for uid in uids])

def order(registry):
    return [entry.uid for entry in registry]

def layout(registry, height=100):
    return [EntryBounds(uid=entry.uid, top=index * height, height=height)
            for index, entry in enumerate(registry)]

def test_midpoint():
    assert EntryBounds(uid=0, top=100, height=50).midpoint == 125

def test_resolve_drop_target_picks_closest_midpoint_below_pointer():
    bounds = [EntryBounds(0, 0, 100), EntryBounds(1, 100, 100), EntryBounds(2, 200, 100)]
    assert resolve_drop_target(10, bounds) == 0
    assert resolve_drop_target(120, bounds) == 1
    assert resolve_drop_target(160, bounds) == 2

def test_resolve_drop_target_past_last_midpoint_appends():
    bounds = [EntryBounds(0, 0, 100), EntryBounds(1, 100, 100)]
    assert resolve_drop_target(151, bounds) is None
    assert resolve_drop_target(10, []) is None

def test_resolve_drop_target_exact_midpoint_does_not_qualify():
    bounds = [EntryBounds(0, 0, 100), EntryBounds(1, 100, 100)]
    assert resolve_drop_target(50, bounds) == 1

def test_resolve_drop_target_tie_goes_to_first():
    bounds = [EntryBounds(4, 0, 100), EntryBounds(7, 0, 100)]
    assert resolve_drop_target(10, bounds) == 4

def test_resolve_drop_target_is_deterministic():
    bounds = [EntryBounds(0, 0, 80), EntryBounds(1, 80, 40), EntryBounds(2, 120, 200)]
    assert [resolve_drop_target(y, bounds) for y in range(0, 300, 7)] == \
           [resolve_drop_target(y, bounds) for y in range(0, 300, 7)]

def test_target_index():
    registry = make_registry(0, 1, 2, 3)
    assert target_index(registry, 0, 3) == 2
    assert target_index(registry, 3, 0) == 0
    assert target_index(registry, 1, None) == 3

def test_drag_to_end():
    registry = make_registry(0, 1, 2)
    bounds = layout(registry)
    drag = DragSession(dragged_uid=0)
    assert drag.hover(290, bounds) is None
    assert drag.drop(registry, 290, bounds)
    assert order(registry) == [1, 2, 0]
    assert [entry.display_index for entry in registry] == [0, 1, 2]
    assert drag.finished

def test_drag_to_front():
    registry = make_registry(0, 1, 2)
    bounds = layout(registry)
    drag = DragSession(dragged_uid=2)
    assert drag.hover(10, bounds) == 0
    assert drag.drop(registry, 10, bounds)
    assert order(registry) == [2, 0, 1]

def test_hover_ignores_dragged_entry():
    registry = make_registry(0, 1, 2)
    bounds = layout(registry)
    drag = DragSession(dragged_uid=1)
    assert drag.hover(120, bounds) == 2

def test_drop_in_place_is_not_a_move():
    registry = make_registry(0, 1, 2)
    bounds = layout(registry)
    drag = DragSession(dragged_uid=1)
    drag.hover(120, bounds)
    assert not drag.drop(registry, 120, bounds)
    assert order(registry) == [0, 1, 2]

def test_drop_after_leave_changes_nothing():
    registry = make_registry(0, 1, 2)
    bounds = layout(registry)
    drag = DragSession(dragged_uid=0)
    drag.hover(290, bounds)
    drag.leave()
    assert drag.before_uid is None
    assert not drag.drop(registry, 290, bounds)
    assert order(registry) == [0, 1, 2]
    assert drag.finished

def test_cancelled_drag_cannot_drop():
    registry = make_registry(0, 1, 2)
    bounds = layout(registry)
    drag = DragSession(dragged_uid=0)
    drag.hover(290, bounds)
    drag.cancel()
    assert drag.hover(290, bounds) is None
    assert not drag.drop(registry, 290, bounds)
    assert order(registry) == [0, 1, 2]

def test_drop_of_removed_entry():
    registry = make_registry(0, 1, 2)
    bounds = layout(registry)
    drag = DragSession(dragged_uid=0)
    drag.hover(290, bounds)
    registry.remove(0)
    assert not drag.drop(registry, 290, bounds)
    assert order(registry) == [1, 2]

def test_drop_without_bounds_uses_hovered_slot():
    registry = make_registry(0, 1, 2)
    bounds = layout(registry)
    drag = DragSession(dragged_uid=2)
    assert drag.hover(10, bounds) == 0
    assert drag.drop(registry, 10, [])
    assert order(registry) == [2, 0, 1]

def test_drop_without_bounds_keeps_middle_entry_in_hovered_slot():
    registry = make_registry(0, 1, 2)
    bounds = layout(registry)
    drag = DragSession(dragged_uid=1)
    assert drag.hover(120, bounds) == 2
    assert not drag.drop(registry, 120, [])
    assert order(registry) == [0, 1, 2]
