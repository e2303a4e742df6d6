import pytest
from lorebook_editor.models.strategy import Strategy, to_flags, to_strategy

@pytest.mark.parametrize('strategy, flags', [
    (Strategy.NORMAL, (False, False)),
    (Strategy.CONSTANT, (True, False)),
    (Strategy.VECTORIZED, (True, True)),
])
def test_to_flags(strategy, flags):
    assert to_flags(strategy) == flags

@pytest.mark.parametrize('strategy', list(Strategy))
def test_flags_round_trip(strategy):
    assert to_strategy(*to_flags(strategy)) == strategy

def test_vectorized_takes_precedence():
    assert to_strategy(True, True) == Strategy.VECTORIZED
    assert to_strategy(False, True) == Strategy.VECTORIZED

def test_constant_without_vectorized():
    assert to_strategy(True, False) == Strategy.CONSTANT

def test_to_flags_accepts_values():
    assert to_flags('constant') == (True, False)
