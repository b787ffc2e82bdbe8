import asyncio

import pytest

from farm_catalog.core.errors import ValidationFailure
from farm_catalog.core.i18n import Translator
from farm_catalog.core.notifier import CollectingNotifier
from farm_catalog.services.ranking import SelectionItem
from farm_catalog.services.selection_widget import RankedSelectionWidget, merge_items


def item(item_id, name, usage=0, favorite=False, is_local=False):
    return SelectionItem(id=item_id, name=name, usage_count=usage, is_favorite=favorite, is_local=is_local)


class Recorder:
    """Collects callback calls"""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)


@pytest.fixture
def notifier():
    return CollectingNotifier()


class TestSelect:

    def test_select_notifies_and_closes(self):
        changes = Recorder()
        widget = RankedSelectionWidget(on_change=changes)
        widget.set_items([item(1, "Rembi"), item(2, "Hamra")])
        widget.open()
        widget.set_search("rem")

        widget.select(1)

        assert changes.calls == [(1,)]
        assert widget.value == 1
        assert widget.is_open is False
        assert widget.search == ""
        assert widget.items[0].usage_count == 1

    def test_usage_failure_is_ignored(self):
        """The increment runs in the background; its failure never surfaces."""
        changes = Recorder()

        async def failing_usage(item_id):
            raise ConnectionError("offline")

        async def scenario():
            widget = RankedSelectionWidget(on_change=changes, record_usage=failing_usage)
            widget.set_items([item(1, "Rembi")])
            widget.select(1)
            await widget.wait_pending()
            return widget

        widget = asyncio.run(scenario())

        assert changes.calls == [(1,)]
        assert widget.value == 1

    def test_usage_is_recorded(self):
        recorded = []

        async def record_usage(item_id):
            recorded.append(item_id)

        async def scenario():
            widget = RankedSelectionWidget(on_change=Recorder(), record_usage=record_usage)
            widget.set_items([item(7, "Rembi")])
            widget.select(7)
            await widget.wait_pending()

        asyncio.run(scenario())

        assert recorded == [7]

    def test_async_on_change_is_awaited(self):
        """A coroutine change callback is scheduled, ahead of the usage increment."""
        changes = []
        recorded = []

        async def on_change(item_id):
            changes.append(item_id)

        async def record_usage(item_id):
            # The change notification was scheduled first
            recorded.append((item_id, list(changes)))

        async def scenario():
            widget = RankedSelectionWidget(on_change=on_change, record_usage=record_usage)
            widget.set_items([item(1, "Rembi"), item(2, "Hamra")])
            widget.select(2)
            await widget.wait_pending()
            return widget

        widget = asyncio.run(scenario())

        assert changes == [2]
        assert recorded == [(2, [2])]
        assert widget.value == 2

    def test_async_on_change_failure_is_logged(self, caplog):
        async def on_change(item_id):
            raise RuntimeError("form closed")

        async def scenario():
            widget = RankedSelectionWidget(on_change=on_change)
            widget.set_items([item(1, "Rembi")])
            widget.select(1)
            await widget.wait_pending()
            return widget

        with caplog.at_level("WARNING", logger="farm_catalog.services.selection_widget"):
            widget = asyncio.run(scenario())

        assert widget.value == 1
        assert "Change notification failed for 1" in caplog.text

    def test_sync_usage_callback_failure_is_ignored(self):
        def broken(item_id):
            raise RuntimeError("boom")

        widget = RankedSelectionWidget(on_change=Recorder(), record_usage=broken)
        widget.set_items([item(1, "Rembi")])

        widget.select(1)

        assert widget.value == 1

    def test_groups_follow_usage(self):
        widget = RankedSelectionWidget(on_change=Recorder())
        widget.set_items([item(1, "A", usage=3), item(2, "B", favorite=True), item(3, "C"), item(4, "D", usage=7)])

        assert [i.id for i in widget.groups.ordered()] == [2, 4, 1, 3]


class TestCreateLocal:

    def test_success_selects_the_new_item(self, notifier):
        changes = Recorder()

        async def create_local(name, extra):
            return item(99, name, is_local=True)

        widget = RankedSelectionWidget(on_change=changes, create_local=create_local, notifier=notifier)
        widget.set_search("Race du douar")
        widget.open_create_dialog()
        assert widget.dialog.name == "Race du douar"

        created = asyncio.run(widget.create_local())

        assert created.id == 99
        assert widget.value == 99
        assert changes.calls == [(99,)]
        assert widget.dialog.is_open is False
        assert widget.dialog.name == ""
        assert any(i.id == 99 for i in widget.items)

    def test_failure_keeps_the_dialog(self, notifier):
        changes = Recorder()

        async def create_local(name, extra):
            raise ValidationFailure("code already exists", field="code")

        widget = RankedSelectionWidget(
            on_change=changes, create_local=create_local, notifier=notifier, translator=Translator("en")
        )
        widget.open_create_dialog("Race du douar")

        created = asyncio.run(widget.create_local(extra={"species_id": 1}))

        assert created is None
        assert widget.dialog.is_open
        assert widget.dialog.name == "Race du douar"
        assert widget.dialog.extra == {"species_id": 1}
        assert widget.dialog.is_creating is False
        assert changes.calls == []
        assert notifier.notices[-1].level == "error"
        assert notifier.notices[-1].message == "Invalid data: code already exists"

    def test_blank_name_does_nothing(self):
        calls = []

        async def create_local(name, extra):
            calls.append(name)

        widget = RankedSelectionWidget(on_change=Recorder(), create_local=create_local)
        widget.open_create_dialog("   ")

        assert asyncio.run(widget.create_local()) is None
        assert calls == []


class TestLoad:

    def test_sources_are_merged(self):
        async def favorites():
            return [item(1, "Rembi", favorite=True)]

        async def catalog():
            return [item(1, "Rembi"), item(2, "Hamra")]

        widget = RankedSelectionWidget(on_change=Recorder())
        asyncio.run(widget.load(favorites, catalog))

        assert [(i.id, i.is_favorite) for i in widget.items] == [(1, True), (2, False)]

    def test_one_failure_leaves_items_untouched(self):
        async def ok():
            return [item(3, "Hamra")]

        async def broken():
            raise ConnectionError("offline")

        widget = RankedSelectionWidget(on_change=Recorder())
        widget.set_items([item(1, "Rembi")])

        with pytest.raises(ConnectionError):
            asyncio.run(widget.load(ok, broken))

        assert [i.id for i in widget.items] == [1]


class TestDispose:

    def test_updates_after_dispose_are_ignored(self):
        changes = Recorder()
        widget = RankedSelectionWidget(on_change=changes)
        widget.set_items([item(1, "Rembi")])

        widget.dispose()
        widget.select(1)
        widget.set_search("x")
        widget.set_items([])

        assert changes.calls == []
        assert widget.value is None
        assert widget.search == ""
        assert len(widget.items) == 1

    def test_late_load_result_is_dropped(self):
        widget = RankedSelectionWidget(on_change=Recorder())

        async def slow():
            widget.dispose()
            return [item(1, "Rembi")]

        asyncio.run(widget.load(slow))

        assert widget.items == []

    def test_late_creation_does_not_select(self):
        changes = Recorder()

        async def create_local(name, extra):
            widget.dispose()
            return item(5, name)

        widget = RankedSelectionWidget(on_change=changes, create_local=create_local)
        widget.open_create_dialog("Race")

        created = asyncio.run(widget.create_local())

        assert created.id == 5
        assert changes.calls == []
        assert widget.value is None


class TestToggleFavorite:

    def test_flag_flips_after_persist(self):
        persisted = []

        async def toggle(item_id):
            persisted.append(item_id)

        widget = RankedSelectionWidget(on_change=Recorder(), toggle_favorite=toggle)
        widget.set_items([item(1, "Rembi")])

        asyncio.run(widget.toggle_favorite(1))

        assert persisted == [1]
        assert widget.items[0].is_favorite

    def test_failed_persist_keeps_the_flag(self):
        async def toggle(item_id):
            raise ValidationFailure("maximum 5 favorites", message_key="errors.favorites_limit", limit=5)

        widget = RankedSelectionWidget(on_change=Recorder(), toggle_favorite=toggle)
        widget.set_items([item(1, "Rembi")])

        with pytest.raises(ValidationFailure):
            asyncio.run(widget.toggle_favorite(1))

        assert not widget.items[0].is_favorite


def test_merge_items_keeps_first_occurrence():
    merged = merge_items([item(1, "A", usage=4)], [item(1, "A"), item(2, "B")])

    assert [(i.id, i.usage_count) for i in merged] == [(1, 4), (2, 0)]
