from __future__ import annotations

from chat_composer.core.session import ComposerRegistry
from chat_composer.core.types import AttachmentStatus

from conftest import RecordingView, make_file


async def test_each_group_gets_its_own_composer(backend, context) -> None:
    views: dict[str, RecordingView] = {}

    def view_factory(group_id: str) -> RecordingView:
        views[group_id] = RecordingView()
        return views[group_id]

    registry = ComposerRegistry(backend, context, view_factory)
    home = registry.get("home")
    work = registry.get("work")
    assert registry.get("home") is home

    home.text = "dinner?"
    work.add_attachment(make_file("report.pdf"))
    await registry.wait_for_uploads()

    assert work.text == ""
    assert len(home.attachments) == 0
    assert work.attachments.all()[0].status == AttachmentStatus.SUCCESS

    await home.send()
    assert backend.sent[0].group_id == "home"
    assert len(views["home"].confirmed) == 1
    assert views["work"].pending == []


async def test_closed_composer_starts_fresh(backend, context) -> None:
    registry = ComposerRegistry(backend, context, lambda _group_id: RecordingView())
    registry.get("home").text = "draft"

    registry.close("home")

    assert registry.get("home").text == ""
