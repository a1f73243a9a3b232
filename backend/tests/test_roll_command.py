from unittest.mock import MagicMock, patch

from app.commands import CommandRegistry
from app.commands.base import CommandContext
from app.commands.dice import RollCommand
from app.models import RollHistory
from game_engine.dice import Roll


def make_ctx(sender_id="alice"):
    return CommandContext(sender_id=sender_id, history=RollHistory(), emit=MagicMock())


def test_roll_command_is_registered():
    assert isinstance(CommandRegistry.get_command("roll"), RollCommand)
    assert isinstance(CommandRegistry.get_command("R"), RollCommand)


def test_roll_records_history_and_emits_result():
    ctx = make_ctx()
    with patch("game_engine.dice.random.random", side_effect=[0.5, 0.8]):
        handled = CommandRegistry.dispatch("@roll 2d6+3 # fire bolt damage", ctx)

    assert handled
    assert len(ctx.history.history) == 1
    entry = ctx.history.history[0]
    assert entry.user_id == "alice"
    assert entry.description == "fire bolt damage"
    assert entry.roll.expression == "2d6+3"
    assert entry.roll.result == 12

    event, payload = ctx.emit.call_args[0]
    assert event == "roll_result"
    assert payload["roll"]["result"] == 12
    assert payload["user_id"] == "alice"
    assert payload["detail"] == "d6(4) + d6(5)"


def test_roll_alias_and_spaced_expression():
    ctx = make_ctx()
    with patch("game_engine.dice.random.random", side_effect=[0.9, 0.75, 0.1, 0.25]):
        assert CommandRegistry.dispatch("@r (1d8 + 1d4)-", ctx)

    entry = ctx.history.latest()
    assert entry.roll.result == 3
    assert entry.description == ""
    assert len(entry.roll.dice) == 2


def test_invalid_roll_records_nothing():
    ctx = make_ctx()
    with patch("game_engine.dice.random.random") as mock_random:
        assert CommandRegistry.dispatch("@roll 2d", ctx)

    mock_random.assert_not_called()
    assert ctx.history.history == []
    event, payload = ctx.emit.call_args[0]
    assert event == "system_message"
    assert "Invalid roll '2d'" in payload["content"]


def test_impossible_keep_records_nothing():
    ctx = make_ctx()
    with patch("game_engine.dice.random.random") as mock_random:
        CommandRegistry.dispatch("@roll 3d6k5", ctx)

    mock_random.assert_not_called()
    assert ctx.history.history == []
    assert ctx.emit.call_args[0][0] == "system_message"


def test_roll_without_expression_shows_usage():
    ctx = make_ctx()
    CommandRegistry.dispatch("@roll", ctx)
    assert "Usage" in ctx.emit.call_args[0][1]["content"]
    assert ctx.history.history == []


def test_dispatch_ignores_unknown_and_plain_text():
    ctx = make_ctx()
    assert not CommandRegistry.dispatch("@fly north", ctx)
    assert not CommandRegistry.dispatch("roll 2d6", ctx)
    assert not CommandRegistry.dispatch("   ", ctx)
    ctx.emit.assert_not_called()


def test_help_lists_roll():
    ctx = make_ctx()
    CommandRegistry.dispatch("@help", ctx)
    assert "@roll <expression>" in ctx.emit.call_args[0][1]["content"]


def test_history_latest_by_user():
    history = RollHistory()
    first = history.record(Roll(expression="1", dice=[], result=1), "", "alice")
    history.record(Roll(expression="2", dice=[], result=2), "", "bob")

    assert history.latest("alice") is first
    assert history.latest().roll.result == 2
    assert history.latest("carol") is None


def test_history_serializes_for_shared_document():
    history = RollHistory()
    history.record(Roll(expression="1d4", dice=[[{"sides": 4, "value": 2}]], result=2), "test", "alice")

    assert history.model_dump() == {
        "history": [{
            "roll": {"expression": "1d4", "dice": [[{"sides": 4, "value": 2}]], "result": 2},
            "description": "test",
            "user_id": "alice",
        }]
    }


def test_oversized_expressions_are_reported_not_raised():
    ctx = make_ctx()
    with patch("game_engine.dice.random.random") as mock_random:
        assert CommandRegistry.dispatch("@roll " + "+".join(["1d6"] * 200), ctx)
        assert CommandRegistry.dispatch("@roll " + "(" * 400 + "1" + ")" * 400, ctx)
        assert CommandRegistry.dispatch("@roll " + "1" * 5000, ctx)

    mock_random.assert_not_called()
    assert ctx.history.history == []
    assert [c[0][0] for c in ctx.emit.call_args_list] == ["system_message"] * 3
