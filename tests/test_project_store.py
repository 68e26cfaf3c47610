from pathlib import Path

from vibeforge.store import NewFragment, SQLiteProjectStore


def test_recent_messages_are_newest_first_and_scoped(tmp_path: Path) -> None:
    store = SQLiteProjectStore(str(tmp_path / "projects.db"))
    for idx in range(4):
        store.add_user_message("p1", f"m{idx}")
    store.add_user_message("p2", "other")

    recent = store.recent_messages("p1", limit=3)

    assert [record.content for record in recent] == ["m3", "m2", "m1"]
    assert {record.project_id for record in recent} == {"p1"}
    store.close()


def test_result_message_carries_fragment(tmp_path: Path) -> None:
    store = SQLiteProjectStore(str(tmp_path / "projects.db"))

    created = store.create_message(
        "p1",
        content="Here is your app.",
        role="ASSISTANT",
        type="RESULT",
        fragment=NewFragment(sandbox_url="https://3000-x.test", title="Todo", files={"app/page.tsx": "x"}),
    )

    fetched = store.recent_messages("p1", limit=1)[0]
    assert fetched.id == created.id
    assert fetched.fragment == created.fragment
    assert fetched.fragment is not None
    assert fetched.fragment.files == {"app/page.tsx": "x"}
    store.close()


def test_error_message_has_no_fragment() -> None:
    store = SQLiteProjectStore()

    created = store.create_message("p1", content="Something went wrong.", role="ASSISTANT", type="ERROR")

    assert created.fragment is None
    assert store.fragment_for(created.id) is None
    assert store.recent_messages("p1", limit=5)[0].type == "ERROR"


def test_store_survives_reopen(tmp_path: Path) -> None:
    path = str(tmp_path / "projects.db")
    first = SQLiteProjectStore(path)
    first.add_user_message("p1", "hello")
    first.close()

    reopened = SQLiteProjectStore(path)

    assert [record.content for record in reopened.recent_messages("p1", limit=5)] == ["hello"]
    reopened.close()
