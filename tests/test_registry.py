import random
import pytest
from lorebook_editor.constants import Placement
from lorebook_editor.events import RegistryEventType
from lorebook_editor.models import Entry, EntryRegistry, Strategy

def make_registry(*uids):
    entries = []
    for uid in uids:
        entry = Entry.new(uid)
        entry.comment = f"entry {uid}"
        entries.append(entry)
    return EntryRegistry(entries)

def order(registry):
    return [entry.uid for entry in registry]

def assert_contiguous(registry):
    assert [entry.display_index for entry in registry] == list(range(len(registry)))

def test_constructor_rejects_duplicate_uids():
    with pytest.raises(ValueError):
        EntryRegistry([Entry.new(1), Entry.new(1)])

def test_constructor_refreshes_display_indices():
    registry = make_registry(5, 2, 9)
    assert order(registry) == [5, 2, 9]
    assert_contiguous(registry)

def test_insert_clamps_position():
    registry = make_registry(0, 1)
    registry.insert(Entry.new(7), 99)
    registry.insert(Entry.new(8), -3)
    assert order(registry) == [8, 0, 1, 7]
    assert_contiguous(registry)

def test_insert_rejects_live_uid():
    registry = make_registry(0)
    with pytest.raises(ValueError):
        registry.insert(Entry.new(0), 0)

@pytest.mark.parametrize('placement, expected', [
    (Placement.ABOVE, [0, 3, 1, 2]),
    (Placement.BELOW, [0, 1, 3, 2]),
    (Placement.BOTTOM, [0, 1, 2, 3]),
])
def test_add_entry_placement(placement, expected):
    registry = make_registry(0, 1, 2)
    entry = registry.add_entry(reference_uid=1, placement=placement)
    assert entry.uid == 3
    assert entry.strategy == Strategy.VECTORIZED
    assert order(registry) == expected
    assert_contiguous(registry)

def test_add_entry_unknown_reference_goes_to_bottom():
    registry = make_registry(0, 1)
    registry.add_entry(reference_uid=42, placement=Placement.ABOVE)
    assert order(registry) == [0, 1, 2]

def test_add_entry_reuses_freed_uid():
    registry = make_registry(0, 1, 2)
    registry.remove(1)
    assert registry.add_entry().uid == 1

def test_remove():
    registry = make_registry(0, 1, 2)
    assert registry.remove(1)
    assert order(registry) == [0, 2]
    assert_contiguous(registry)
    assert not registry.remove(1)

def test_move_up_and_down():
    registry = make_registry(0, 1, 2)
    assert registry.move_up(2)
    assert order(registry) == [0, 2, 1]
    assert registry.move_down(0)
    assert order(registry) == [2, 0, 1]
    assert_contiguous(registry)

def test_moves_at_boundaries_are_noops():
    registry = make_registry(0, 1, 2)
    assert not registry.move_up(0)
    assert not registry.move_down(2)
    assert not registry.move_up(99)
    assert order(registry) == [0, 1, 2]

def test_move_to_clamps_final_index():
    registry = make_registry(0, 1, 2, 3)
    assert registry.move_to(0, 10)
    assert order(registry) == [1, 2, 3, 0]
    assert registry.move_to(3, -5)
    assert order(registry) == [3, 1, 2, 0]
    assert not registry.move_to(3, 0)
    assert_contiguous(registry)

def test_duplicate_inserts_after_source():
    registry = make_registry(0, 1)
    registry.update_entry(0, keys=['a'])
    duplicate = registry.duplicate(0)
    assert duplicate.uid == 2
    assert duplicate.keys == ['a']
    assert duplicate.comment == 'entry 0'
    assert order(registry) == [0, 2, 1]
    assert registry.duplicate(42) is None

def test_move_affordances():
    registry = make_registry(0, 1, 2)
    assert not registry.can_move_up(0)
    assert registry.can_move_down(0)
    assert registry.can_move_up(2)
    assert not registry.can_move_down(2)
    assert not registry.can_move_up(99)

def test_single_entry_cannot_move():
    registry = make_registry(0)
    assert not registry.can_move_up(0)
    assert not registry.can_move_down(0)

def test_field_edits():
    registry = make_registry(0)
    assert registry.toggle_enabled(0)
    assert registry.get(0).disabled
    assert registry.set_strategy(0, Strategy.CONSTANT)
    assert registry.get(0).strategy == Strategy.CONSTANT
    assert not registry.update_entry(5, comment='x')

def test_listeners_receive_events():
    registry = make_registry(0, 1)
    events = []
    registry.subscribe(events.append)

    registry.add_entry()
    registry.move_up(2)
    registry.toggle_enabled(0)
    registry.remove(1)

    assert [event.type for event in events] == [
        RegistryEventType.ENTRY_INSERTED,
        RegistryEventType.ENTRY_MOVED,
        RegistryEventType.ENTRY_UPDATED,
        RegistryEventType.ENTRY_REMOVED,
    ]
    assert events[1].uid == 2
    assert events[1].index == 1
    assert events[3].index is None

def test_listener_error_surfaces_after_mutation():
    registry = make_registry(0)

    def failing(event):
        raise RuntimeError("boom")

    registry.subscribe(failing)
    with pytest.raises(RuntimeError):
        registry.add_entry()
    assert len(registry) == 2

def test_unsubscribe():
    registry = make_registry(0)
    events = []
    registry.subscribe(events.append)
    registry.unsubscribe(events.append)
    registry.add_entry()
    assert events == []

def test_uids_stay_unique_over_random_mutations():
    rng = random.Random(1234)
    registry = make_registry(0, 1, 2)
    for _ in range(500):
        uids = order(registry)
        action = rng.choice(['add', 'duplicate', 'remove', 'move'])
        if action == 'add' or not uids:
            registry.add_entry(rng.choice(uids) if uids else None, rng.choice([Placement.ABOVE, Placement.BELOW, Placement.BOTTOM]))
        elif action == 'duplicate':
            registry.duplicate(rng.choice(uids))
        elif action == 'remove':
            registry.remove(rng.choice(uids))
        else:
            registry.move_to(rng.choice(uids), rng.randrange(len(uids)))

        current = order(registry)
        assert len(current) == len(set(current))
        assert_contiguous(registry)
