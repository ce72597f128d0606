"""Effect duration ticker tests"""

from guildquest.core.effect.models import Effect
from guildquest.core.effect.ticker import newly_expired, tick_effects


def _effects(*durations: int) -> list[Effect]:
    return [
        Effect(effect_id=f"effect_{i}", name=f"e{i}", duration=d, max_duration=7)
        for i, d in enumerate(durations)
    ]


def test_tick_decrements_and_floors_at_zero():
    after = tick_effects(_effects(3, 1, 0))
    assert [e.duration for e in after] == [2, 0, 0]


def test_tick_leaves_input_untouched():
    before = _effects(2)
    tick_effects(before)
    assert before[0].duration == 2


def test_tick_keeps_other_fields():
    before = _effects(5)
    after = tick_effects(before)
    assert after[0].effect_id == before[0].effect_id
    assert after[0].max_duration == 7
    assert after[0].name == "e0"


def test_expired_effect_stays_at_zero():
    after = tick_effects(tick_effects(_effects(0)))
    assert after[0].duration == 0


def test_newly_expired():
    before = _effects(1, 2, 0)
    after = tick_effects(before)
    assert [e.effect_id for e in newly_expired(before, after)] == ["effect_0"]
