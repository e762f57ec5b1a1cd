"""
Tests for the console coordinator and interactive shell
"""
import io
from unittest.mock import MagicMock

import pytest

from config import BaseConfiguration
from console import app
from console.app import ConsoleShell
from console.coordinator import ConsoleCoordinator
from core.api_client import SubOneAPIClient
from core.data_models import ApiResponse

DATA = {
    "subs": [
        {"id": "s1", "name": "Alpha", "url": "https://a"},
        {"id": "s2", "name": "Beta", "url": "https://b"},
        {"id": "n1", "name": "Node", "url": "ss://x"},
    ],
    "profiles": [{"id": "p1", "name": "Family", "subscriptions": ["s1"]}],
}


class StaticConfiguration(BaseConfiguration):
    def __init__(self, username="admin", password="pw"):
        self._username = username
        self._password = password

    @property
    def api_base_url(self):
        return "https://sub.example.com"

    @property
    def username(self):
        return self._username

    @property
    def password(self):
        return self._password


@pytest.fixture
def api():
    client = MagicMock(spec=SubOneAPIClient)
    client.login.return_value = True
    client.fetch_initial_data.return_value = DATA
    client.save_all_data.return_value = ApiResponse(success=True)
    return client


@pytest.fixture
def coordinator(api):
    coordinator = ConsoleCoordinator(StaticConfiguration(), api_client=api)
    assert coordinator.start() is True
    return coordinator


def run(shell, *commands):
    for command in commands:
        shell.onecmd(command)
        shell.postcmd(False, command)
    return shell.stdout.getvalue()


def test_start_logs_in_and_loads(coordinator, api):
    api.login.assert_called_once_with("admin", "pw")
    assert coordinator.is_authenticated
    assert [r.item_id for r in coordinator.views["subscriptions"].rows()] == ["s1", "s2"]
    assert [r.item_id for r in coordinator.views["nodes"].rows()] == ["n1"]
    assert [r.item_id for r in coordinator.views["profiles"].rows()] == ["p1"]


def test_start_fails_on_bad_login(api):
    api.login.return_value = False
    coordinator = ConsoleCoordinator(StaticConfiguration(), api_client=api)
    assert coordinator.start() is False
    api.fetch_initial_data.assert_not_called()


def test_start_without_credentials_uses_session(api):
    coordinator = ConsoleCoordinator(StaticConfiguration(username=None, password=None), api_client=api)
    assert coordinator.start() is True
    api.login.assert_not_called()


def test_views_have_independent_selections(coordinator):
    coordinator.views["subscriptions"].toggle("s1")
    assert not coordinator.views["profiles"].selection.is_selected("s1")


def test_refresh_keeps_selection(coordinator):
    view = coordinator.views["subscriptions"]
    view.toggle_batch_mode()
    view.toggle("s2")
    assert coordinator.refresh() is True
    assert view.selection.is_selected("s2")


def test_cleanup_closes_client(coordinator, api):
    coordinator.cleanup()
    api.close.assert_called_once()


def test_shell_batch_delete_flow(coordinator):
    shell = ConsoleShell(coordinator, stdout=io.StringIO())
    assert shell.prompt == "(subscriptions) "
    output = run(shell, "batch", "toggle s1", "delete")
    assert "1 selected" in output
    assert "Deleted 1 subscriptions" in output
    assert [s.id for s in coordinator.store.subscriptions] == ["s2"]
    assert coordinator.store.profiles[0].subscriptions == []
    assert shell.prompt == "(subscriptions) "


def test_shell_prompt_shows_batch_mode(coordinator):
    shell = ConsoleShell(coordinator, stdout=io.StringIO())
    run(shell, "view nodes", "batch")
    assert shell.prompt == "(nodes batch) "


def test_shell_all_requires_batch_mode(coordinator):
    shell = ConsoleShell(coordinator, stdout=io.StringIO())
    output = run(shell, "all", "invert", "toggle s1")
    assert output.count("Enter batch mode first") == 3


def test_shell_filter_all_invert_list(coordinator):
    shell = ConsoleShell(coordinator, stdout=io.StringIO())
    output = run(shell, "batch", "filter beta", "all", "filter", "invert", "list")
    assert "[x] Alpha (s1)" in output
    assert "[ ] Beta (s2)" in output


def test_shell_done_keeps_selection_and_none_clears(coordinator):
    shell = ConsoleShell(coordinator, stdout=io.StringIO())
    run(shell, "batch", "toggle s1 s2", "done")
    view = coordinator.views["subscriptions"]
    assert view.batch_mode is False
    assert view.selection.selected_ids() == ["s1", "s2"]
    output = run(shell, "none")
    assert "0 selected" in output


def test_shell_delete_with_nothing_selected(coordinator):
    shell = ConsoleShell(coordinator, stdout=io.StringIO())
    output = run(shell, "batch", "delete")
    assert "Nothing selected" in output
    assert len(coordinator.store.subscriptions) == 2


def test_shell_delete_reports_failed_save(coordinator, api):
    api.save_all_data.return_value = ApiResponse(success=False, message="denied")
    shell = ConsoleShell(coordinator, stdout=io.StringIO())
    output = run(shell, "batch", "toggle s2", "delete")
    assert "Deleted 1 subscriptions" in output
    assert "Warning: changes not saved to backend (denied)" in output
    assert coordinator.store.has_unsaved_changes is True


def test_shell_delete_success_has_no_warning(coordinator):
    shell = ConsoleShell(coordinator, stdout=io.StringIO())
    output = run(shell, "batch", "toggle s2", "delete")
    assert "Warning" not in output


def test_shell_unknown_view(coordinator):
    shell = ConsoleShell(coordinator, stdout=io.StringIO())
    output = run(shell, "view bogus")
    assert "Unknown view" in output
    assert shell.view.name == "subscriptions"


def test_shell_list_empty_and_quit(coordinator):
    shell = ConsoleShell(coordinator, stdout=io.StringIO())
    output = run(shell, "filter zzz", "list")
    assert "(empty)" in output
    assert shell.onecmd("quit") is True


def test_main_reports_configuration_error(monkeypatch, capsys):
    monkeypatch.setenv("SUBONE_API_BASE_URL", "not-a-url")
    assert app.main([]) == 1
    assert "Configuration error" in capsys.readouterr().out
