"""Tests for the Textual TUI using the app pilot."""
import pytest

from parley.llm import CompletionErrorKind, CompletionResult
from parley.session import Message, MessageFilter, Role
from parley.ui import ChatHistoryWidget, ChatInputBar, ErrorBanner, ParleyApp


@pytest.fixture
def tui_controller(make_controller, client):
    controller = make_controller(client)
    controller.start()
    controller.update_settings(typing_speed=0)
    return controller


class TestParleyApp:
    """Tests for ParleyApp wiring."""

    @pytest.mark.asyncio
    async def test_welcome_on_empty_session(self, tui_controller):
        """Test that an empty session shows the welcome text."""
        app = ParleyApp(tui_controller)
        async with app.run_test() as pilot:
            await pilot.pause()
            assert len(app.query(".welcome")) == 1

    @pytest.mark.asyncio
    async def test_submit_sends(self, tui_controller):
        """Test that submitting the input bar runs one exchange."""
        app = ParleyApp(tui_controller)
        async with app.run_test() as pilot:
            app.query_one("#chat-input-bar", ChatInputBar).post_message(ChatInputBar.Submitted("hi"))
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()

            assert [m.content for m in tui_controller.messages] == ["hi", "ok"]
            chat = app.query_one("#chat-history", ChatHistoryWidget)
            assert chat.get_last_response() == "ok"
            assert len(app.query(".welcome")) == 0

    @pytest.mark.asyncio
    async def test_error_banner(self, tui_controller, client):
        """Test that a failed request shows the error banner."""
        client.results = [CompletionResult.err(CompletionErrorKind.NETWORK, "offline")]
        app = ParleyApp(tui_controller)
        async with app.run_test() as pilot:
            app.query_one("#chat-input-bar", ChatInputBar).post_message(ChatInputBar.Submitted("hi"))
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()

            assert app.query_one("#error-banner", ErrorBanner).has_class("-visible")

    @pytest.mark.asyncio
    async def test_clear_with_confirmation(self, tui_controller):
        """Test that clear only happens after confirming."""
        tui_controller.store.append(Message(role=Role.USER, content="hi"))
        app = ParleyApp(tui_controller)
        async with app.run_test() as pilot:
            app.action_clear_chat()
            await pilot.pause()
            await pilot.press("y")
            await pilot.pause()

            assert tui_controller.messages == ()

    @pytest.mark.asyncio
    async def test_toggle_theme_persists(self, tui_controller):
        """Test that the theme toggle updates settings and the theme."""
        app = ParleyApp(tui_controller)
        async with app.run_test() as pilot:
            assert app.theme == "catppuccin-mocha"
            app.action_toggle_theme()
            await pilot.pause()

            assert tui_controller.settings.dark_mode is False
            assert app.theme == "catppuccin-latte"

    @pytest.mark.asyncio
    async def test_cycle_filter(self, tui_controller):
        """Test that the filter cycles all, code, text."""
        app = ParleyApp(tui_controller)
        async with app.run_test() as pilot:
            chat = app.query_one("#chat-history", ChatHistoryWidget)
            app.action_cycle_filter()
            await pilot.pause()
            assert chat.message_filter is MessageFilter.CODE
            app.action_cycle_filter()
            app.action_cycle_filter()
            await pilot.pause()
            assert chat.message_filter is MessageFilter.ALL

    @pytest.mark.asyncio
    async def test_second_submit_does_not_cancel_request(self, make_controller, blocking_client):
        """Test that a submit during a request is rejected and the first answer arrives."""
        controller = make_controller(blocking_client)
        controller.start()
        controller.update_settings(typing_speed=0)
        app = ParleyApp(controller)
        async with app.run_test() as pilot:
            bar = app.query_one("#chat-input-bar", ChatInputBar)
            bar.post_message(ChatInputBar.Submitted("one"))
            bar.post_message(ChatInputBar.Submitted("two"))
            await pilot.pause()

            blocking_client.release.set()
            await app.workers.wait_for_complete()
            await pilot.pause()

            assert len(blocking_client.calls) == 1
            assert [m.content for m in controller.messages] == ["one", "late answer"]
