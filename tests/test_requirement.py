"""Tests for requirement module."""
from signalsalvage.requirement import Req
from signalsalvage.state import GameState


def _make_state() -> GameState:
    """A GameState with known values."""
    return GameState(
        signal=500,
        total_signal_earned=1200,
        noise=12.5,
        total_relays_earned=6,
        generators={"scanner": 5, "dish": 0},
        upgrades={"better_antenna": 1, "narrowband_filter": 0},
        milestones_claimed=("m_first_scan",),
    )


def test_always():
    assert Req.always().evaluate(GameState())


def test_generator_count():
    state = _make_state()
    assert Req.generator_count("scanner", ">=", 5).evaluate(state)
    assert not Req.generator_count("scanner", ">=", 6).evaluate(state)
    assert Req.generator_count("probe", "==", 0).evaluate(state)


def test_owns():
    state = _make_state()
    assert Req.owns("scanner").evaluate(state)
    assert not Req.owns("dish").evaluate(state)
    assert not Req.owns("unknown").evaluate(state)


def test_upgrade_owned():
    state = _make_state()
    assert Req.upgrade_owned("better_antenna").evaluate(state)
    assert not Req.upgrade_owned("narrowband_filter").evaluate(state)


def test_total_signal():
    state = _make_state()
    assert Req.total_signal(">=", 1000).evaluate(state)
    assert not Req.total_signal(">", 1200).evaluate(state)


def test_total_relays():
    state = _make_state()
    assert Req.total_relays(">=", 5).evaluate(state)
    assert not Req.total_relays(">=", 15).evaluate(state)


def test_noise():
    state = _make_state()
    assert Req.noise(">=", 12).evaluate(state)
    assert not Req.noise(">=", 30).evaluate(state)


def test_milestone():
    state = _make_state()
    assert Req.milestone("m_first_scan").evaluate(state)
    assert not Req.milestone("m_first_dish").evaluate(state)


def test_all_any():
    state = _make_state()
    yes = Req.owns("scanner")
    no = Req.owns("dish")
    assert Req.all(yes, yes).evaluate(state)
    assert not Req.all(yes, no).evaluate(state)
    assert Req.any(no, yes).evaluate(state)
    assert not Req.any(no, no).evaluate(state)


def test_operators():
    state = _make_state()
    assert (Req.owns("scanner") & Req.total_signal(">=", 100)).evaluate(state)
    assert not (Req.owns("scanner") & Req.owns("dish")).evaluate(state)
    assert (Req.owns("dish") | Req.total_signal(">", 1000)).evaluate(state)


def test_custom():
    req = Req.custom(lambda s: s.signal > 100)
    assert req.evaluate(_make_state())
    assert not req.evaluate(GameState())
