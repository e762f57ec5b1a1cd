import cmd
import sys
from typing import List, Optional

from config import ConfigurationError, EnvConfiguration
from .coordinator import ConsoleCoordinator
from .list_view import BatchListView


class ConsoleShell(cmd.Cmd):
    """Line-oriented shell over the console's list views."""

    intro = "Sub-One console. Type help or ? to list commands."

    def __init__(self, coordinator: ConsoleCoordinator, stdout=None) -> None:
        super().__init__(stdout=stdout)
        self.coordinator = coordinator
        self.view: BatchListView = coordinator.views["subscriptions"]
        self._update_prompt()

    def _update_prompt(self) -> None:
        mode = " batch" if self.view.batch_mode else ""
        self.prompt = f"({self.view.name}{mode}) "

    def _say(self, line: str) -> None:
        self.stdout.write(line + "\n")

    def postcmd(self, stop: bool, line: str) -> bool:
        self._update_prompt()
        return stop

    def emptyline(self) -> bool:
        return False

    def do_view(self, arg: str) -> None:
        """view subscriptions|nodes|profiles - switch the active list"""
        name = arg.strip()
        if name not in self.coordinator.views:
            self._say(f"Unknown view: {name!r}. Choose from {', '.join(self.coordinator.views)}")
            return
        self.view = self.coordinator.views[name]

    def do_list(self, arg: str) -> None:
        """list - show the visible items"""
        rows = self.view.rows()
        if not rows:
            self._say("(empty)")
        for row in rows:
            self._say(str(row) if self.view.batch_mode else f"{row.label} ({row.item_id})")
        if self.view.batch_mode:
            self._say(self.view.status_label())

    def do_filter(self, arg: str) -> None:
        """filter [text] - show only matching items, no text clears the filter"""
        self.view.set_filter(arg)

    def do_batch(self, arg: str) -> None:
        """batch - enter batch mode, or cancel it and clear the selection"""
        self.view.toggle_batch_mode()

    def do_done(self, arg: str) -> None:
        """done - leave batch mode keeping the selection"""
        self.view.confirm_exit()

    def do_toggle(self, arg: str) -> None:
        """toggle ID [ID ...] - flip selection of items"""
        if not self.view.batch_mode:
            self._say("Enter batch mode first")
            return
        for item_id in arg.split():
            self.view.toggle(item_id)
        self._say(self.view.status_label())

    def do_all(self, arg: str) -> None:
        """all - select every visible item"""
        if not self.view.select_all():
            self._say("Enter batch mode first")
            return
        self._say(self.view.status_label())

    def do_invert(self, arg: str) -> None:
        """invert - invert selection of the visible items"""
        if not self.view.invert():
            self._say("Enter batch mode first")
            return
        self._say(self.view.status_label())

    def do_none(self, arg: str) -> None:
        """none - clear the selection"""
        self.view.deselect_all()
        self._say(self.view.status_label())

    def do_delete(self, arg: str) -> None:
        """delete - delete the selected items and leave batch mode"""
        if not self.view.batch_mode or not self.view.selection.selected_count:
            self._say("Nothing selected")
            return
        removed = self.view.delete_selected()
        self._say(f"Deleted {removed} {self.view.name}")
        store = self.coordinator.store
        if removed and store.has_unsaved_changes:
            self._say(f"Warning: changes not saved to backend ({store.last_save_error})")

    def do_refresh(self, arg: str) -> None:
        """refresh - reload all lists from the backend"""
        if not self.coordinator.refresh():
            self._say("Refresh failed")

    def do_quit(self, arg: str) -> bool:
        """quit - exit the console"""
        return True

    do_EOF = do_quit


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = EnvConfiguration()
        config.validate()
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 1

    coordinator = ConsoleCoordinator(config)
    try:
        if not coordinator.start():
            print("Failed to load data")
            return 1
        shell = ConsoleShell(coordinator)
        # Remaining arguments run as one command, otherwise start the loop
        if argv:
            shell.onecmd(" ".join(argv))
        else:
            shell.cmdloop()
        return 0
    finally:
        coordinator.cleanup()


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
