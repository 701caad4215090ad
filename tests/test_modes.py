# file: tests/test_modes.py
import pytest

from conftest import FailingEngine
from dashboard import keys
from dashboard.commands import CommandInterpreter
from dashboard.keys import KeyEvent
from dashboard.modes import KEYBOARD_HELP, ModeStateMachine
from dashboard.state import (
    CommandEntryMode,
    LeaveConfirmMode,
    LogLevel,
    NormalMode,
    QuitConfirmMode,
    Selection,
    Tab,
)


async def press(machine, *events):
    for event in events:
        if isinstance(event, str):
            for ch in event:
                await machine.handle(KeyEvent.of(ch))
        else:
            await machine.handle(event)


class TestQuit:

    @pytest.mark.asyncio
    async def test_quit_confirm_yes(self, machine):
        await press(machine, "q")
        assert isinstance(machine.mode, QuitConfirmMode)
        assert machine.mode.selection is Selection.NO

        await press(machine, keys.RIGHT)
        assert machine.mode.selection is Selection.YES
        await press(machine, keys.ENTER)
        assert machine.should_quit
        assert isinstance(machine.mode, NormalMode)

    @pytest.mark.asyncio
    async def test_quit_confirm_no_and_toggle_keys(self, machine):
        await press(machine, "Q", keys.LEFT, keys.TAB, keys.UP, keys.DOWN)
        # four toggles brings it back to NO
        assert machine.mode.selection is Selection.NO
        await press(machine, keys.ENTER)
        assert not machine.should_quit
        assert isinstance(machine.mode, NormalMode)

    @pytest.mark.asyncio
    async def test_quit_escape(self, machine):
        await press(machine, "q", keys.RIGHT, keys.ESC)
        assert not machine.should_quit
        assert isinstance(machine.mode, NormalMode)

    @pytest.mark.asyncio
    async def test_modal_ignores_other_keys(self, machine):
        await press(machine, "q", "x", keys.BACKSPACE)
        assert isinstance(machine.mode, QuitConfirmMode)
        assert machine.mode.selection is Selection.NO

    @pytest.mark.asyncio
    async def test_ctrl_c_quits_immediately(self, machine):
        await press(machine, keys.CTRL_C)
        assert machine.should_quit


class TestCommandEntry:

    @pytest.mark.asyncio
    async def test_colon_and_slash_open_empty_buffer(self, machine):
        await press(machine, ":")
        assert machine.mode == CommandEntryMode("")
        await press(machine, keys.ESC, "/")
        assert machine.mode == CommandEntryMode("")

    @pytest.mark.asyncio
    async def test_typing_and_backspace(self, machine):
        await press(machine, ":", "helq", keys.BACKSPACE, "p")
        assert machine.mode.buffer == "help"
        await press(machine, keys.BACKSPACE, keys.BACKSPACE, keys.BACKSPACE, keys.BACKSPACE, keys.BACKSPACE)
        assert machine.mode.buffer == ""

    @pytest.mark.asyncio
    async def test_escape_discards_buffer(self, machine, logs):
        await press(machine, ":", "/help", keys.ESC)
        assert isinstance(machine.mode, NormalMode)
        assert len(logs) == 0

    @pytest.mark.asyncio
    async def test_enter_executes_and_returns_to_normal(self, machine, logs):
        await press(machine, ":", "/help", keys.ENTER)
        assert isinstance(machine.mode, NormalMode)
        assert logs.entries()[0].message == "--- Available Commands ---"

    @pytest.mark.asyncio
    async def test_quick_search_prefills_and_focuses_markets(self, machine, service, watchlist):
        await press(machine, "S")
        assert machine.mode == CommandEntryMode("/search ")
        assert machine.current_tab is Tab.MARKETS

        await press(machine, "btc", keys.ENTER)
        assert service.calls == [("search", "btc", 50)]
        assert len(watchlist.available_markets) == 3

    @pytest.mark.asyncio
    async def test_q_in_command_entry_is_text(self, machine):
        await press(machine, ":", "q")
        assert machine.mode == CommandEntryMode("q")
        assert not machine.should_quit


class TestNormalNavigation:

    @pytest.mark.asyncio
    async def test_tab_keys(self, machine):
        await press(machine, keys.TAB)
        assert machine.current_tab is Tab.ORDERS
        await press(machine, keys.BACKTAB, keys.LEFT)
        assert machine.current_tab is Tab.DOCS
        await press(machine, keys.RIGHT)
        assert machine.current_tab is Tab.DASHBOARD

    @pytest.mark.asyncio
    async def test_digit_selects_tab(self, machine):
        await press(machine, "5")
        assert machine.current_tab is Tab.LOGS
        await press(machine, "1")
        assert machine.current_tab is Tab.DASHBOARD
        await press(machine, "7")
        assert machine.current_tab is Tab.DASHBOARD

    @pytest.mark.asyncio
    async def test_trending_key_focuses_markets(self, machine, service):
        await press(machine, "t")
        assert service.calls == [("trending", 20)]
        assert machine.current_tab is Tab.MARKETS

    @pytest.mark.asyncio
    async def test_list_navigation_saturates_on_markets_tab(self, machine, watchlist):
        await press(machine, "3")
        await press(machine, keys.DOWN)
        assert watchlist.selected_market_index == 0

        await watchlist.search("x")
        await press(machine, keys.UP)
        assert watchlist.selected_market_index == 0
        await press(machine, keys.DOWN, "j", keys.DOWN, keys.DOWN)
        assert watchlist.selected_market_index == 2
        await press(machine, "k")
        assert watchlist.selected_market_index == 1

    @pytest.mark.asyncio
    async def test_enter_on_markets_joins_selected(self, machine, watchlist):
        await watchlist.search("x")
        await press(machine, "3", keys.DOWN, keys.ENTER)
        assert watchlist.watched_ids == ["m2"]

    @pytest.mark.asyncio
    async def test_enter_elsewhere_does_nothing(self, machine, watchlist):
        await watchlist.search("x")
        await press(machine, keys.ENTER)
        assert len(watchlist) == 0

    @pytest.mark.asyncio
    async def test_help_key(self, machine, logs):
        await press(machine, "h")
        assert [e.message for e in logs.entries()] == KEYBOARD_HELP


class TestEngineControls:

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, machine, engine, logs):
        await press(machine, "p")
        assert await engine.is_paused()
        assert machine.status.is_paused
        assert logs.entries()[-1].level is LogLevel.WARNING
        assert logs.entries()[-1].message == "Bot PAUSED - trading disabled"

        await press(machine, "R")
        assert not await engine.is_paused()
        assert not machine.status.is_paused
        assert logs.entries()[-1].level is LogLevel.SUCCESS

    @pytest.mark.asyncio
    async def test_panic_cancels_and_pauses(self, machine, engine, logs):
        await engine.place_order("m1", "buy", 10.0, 0.5)
        await engine.place_order("m1", "sell", 10.0, 0.6)
        await press(machine, "!")

        assert await engine.is_paused()
        assert machine.status.is_paused
        messages = [e.message for e in logs.entries()]
        assert messages == ["PANIC MODE ACTIVATED", "Cancelled 2 orders", "Bot is now PAUSED"]
        assert all(e.level is LogLevel.ERROR for e in logs.entries())

    @pytest.mark.asyncio
    async def test_panic_failure_still_marks_paused(self, watchlist, logs):
        engine = FailingEngine()
        interp = CommandInterpreter(watchlist, logs)
        machine = ModeStateMachine(watchlist, interp, engine, logs)
        await press(machine, "!")

        assert machine.status.is_paused
        assert logs.entries()[-1].message == "Panic error: venue unreachable"


class TestLeaveConfirm:

    async def _setup(self, machine, watchlist):
        for m in ("a", "b", "c"):
            await watchlist.join(m)
        await press(machine, "4")

    @pytest.mark.asyncio
    async def test_delete_opens_leave_confirm(self, machine, watchlist):
        await self._setup(machine, watchlist)
        await press(machine, keys.DELETE)
        assert machine.mode == LeaveConfirmMode(Selection.NO)

    @pytest.mark.asyncio
    async def test_confirm_yes_leaves_selected(self, machine, watchlist):
        await self._setup(machine, watchlist)
        await press(machine, keys.DOWN, keys.DOWN, keys.BACKSPACE, keys.RIGHT, keys.ENTER)

        assert isinstance(machine.mode, NormalMode)
        assert watchlist.watched_ids == ["a", "b"]
        assert watchlist.selected_watched_index == 1

    @pytest.mark.asyncio
    async def test_confirm_no_keeps_market(self, machine, watchlist):
        await self._setup(machine, watchlist)
        await press(machine, keys.DELETE, keys.ENTER)
        assert watchlist.watched_ids == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_escape_cancels(self, machine, watchlist):
        await self._setup(machine, watchlist)
        await press(machine, keys.DELETE, keys.RIGHT, keys.ESC)
        assert isinstance(machine.mode, NormalMode)
        assert len(watchlist) == 3

    @pytest.mark.asyncio
    async def test_no_modal_when_watchlist_empty(self, machine):
        await press(machine, "4", keys.DELETE)
        assert isinstance(machine.mode, NormalMode)

    @pytest.mark.asyncio
    async def test_no_modal_on_other_tabs(self, machine, watchlist):
        await watchlist.join("a")
        await press(machine, keys.DELETE)
        assert isinstance(machine.mode, NormalMode)


class TestDocs:

    @pytest.mark.asyncio
    async def test_browse_and_view(self, machine):
        await press(machine, "6")
        docs = machine.docs
        await press(machine, keys.UP)
        assert docs.selected_section == 0
        await press(machine, keys.DOWN, keys.DOWN)
        assert docs.selected_section == 2

        await press(machine, keys.ENTER)
        assert docs.viewing_content
        assert docs.scroll_offset == 0
        await press(machine, keys.DOWN, keys.DOWN)
        assert docs.scroll_offset == 2
        assert docs.selected_section == 2

        # Right is consumed while viewing; Left backs out
        await press(machine, keys.RIGHT)
        assert machine.current_tab is Tab.DOCS
        await press(machine, keys.LEFT)
        assert not docs.viewing_content
        assert machine.current_tab is Tab.DOCS

    @pytest.mark.asyncio
    async def test_scroll_saturates(self, machine):
        await press(machine, "6", keys.ENTER)
        docs = machine.docs
        for _ in range(200):
            await press(machine, keys.DOWN)
        assert docs.scroll_offset == len(docs.current.body) - 1
        await press(machine, keys.ESC)
        assert not docs.viewing_content

    @pytest.mark.asyncio
    async def test_section_saturates_at_end(self, machine):
        await press(machine, "6")
        for _ in range(20):
            await press(machine, keys.DOWN)
        assert machine.docs.selected_section == len(machine.docs.sections) - 1

    @pytest.mark.asyncio
    async def test_left_while_browsing_changes_tab(self, machine):
        await press(machine, "6", keys.LEFT)
        assert machine.current_tab is Tab.LOGS
