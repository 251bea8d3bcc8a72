"""Tests for walking through a review session."""

import asyncio
import itertools

import pytest

from dailyreview.navigator import COMPLETE, CONTENT_UNAVAILABLE, NoteView, ReviewNavigator
from dailyreview.repository import VaultRepository
from dailyreview.types import Note


def _notes(n):
    return [Note(f"n{i}.md") for i in range(n)]


class TestWrapping:
    def test_next_wraps(self):
        nav = ReviewNavigator(_notes(3))
        assert [nav.next().path for _ in range(4)] == ["n1.md", "n2.md", "n0.md", "n1.md"]

    def test_previous_wraps(self):
        nav = ReviewNavigator(_notes(3))
        assert nav.previous().path == "n2.md"
        assert nav.previous().path == "n1.md"

    def test_single_note(self):
        nav = ReviewNavigator(_notes(1))
        assert nav.next().path == "n0.md"
        assert nav.previous().path == "n0.md"

    def test_starts_at_current_path(self):
        nav = ReviewNavigator(_notes(3), current_path="n2.md")
        assert nav.current.path == "n2.md"

    def test_unknown_current_path_starts_at_zero(self):
        nav = ReviewNavigator(_notes(3), current_path="gone.md")
        assert nav.index == 0

    def test_advance_direction(self):
        nav = ReviewNavigator(_notes(3))
        assert nav.advance(1).path == "n1.md"
        assert nav.advance(-1).path == "n0.md"

    def test_copy_of_notes(self):
        notes = _notes(2)
        nav = ReviewNavigator(notes)
        notes.clear()
        assert nav.total == 2


class TestDone:
    def test_skips_done(self):
        nav = ReviewNavigator(_notes(4), done_paths=["n1.md", "n2.md"])
        assert nav.next().path == "n3.md"
        assert nav.next().path == "n0.md"
        assert nav.previous().path == "n3.md"

    def test_mark_done_advances(self):
        nav = ReviewNavigator(_notes(3))
        assert nav.mark_current_done().path == "n1.md"
        assert nav.remaining == 2
        assert nav.done_paths == ["n0.md"]

    def test_only_current_left(self):
        nav = ReviewNavigator(_notes(3), current_path="n1.md", done_paths=["n0.md", "n2.md"])
        assert nav.next().path == "n1.md"
        assert nav.previous().path == "n1.md"

    def test_complete_after_all_done(self):
        nav = ReviewNavigator(_notes(2))
        nav.mark_current_done()
        assert nav.mark_current_done() is COMPLETE
        assert nav.is_complete
        assert nav.current is COMPLETE

    def test_complete_is_terminal(self):
        nav = ReviewNavigator(_notes(1))
        nav.mark_current_done()
        assert nav.next() is COMPLETE
        assert nav.previous() is COMPLETE
        assert nav.mark_current_done() is COMPLETE

    def test_all_done_at_start(self):
        nav = ReviewNavigator(_notes(2), done_paths=["n0.md", "n1.md"])
        assert nav.current is COMPLETE

    def test_empty_list_is_complete(self):
        assert ReviewNavigator([]).current is COMPLETE

    def test_starting_on_done_note_moves_on(self):
        nav = ReviewNavigator(_notes(3), current_path="n1.md", done_paths=["n1.md"])
        assert nav.current.path == "n2.md"

    def test_unknown_done_paths_ignored(self):
        nav = ReviewNavigator(_notes(2), done_paths=["other.md"])
        assert nav.remaining == 2

    @pytest.mark.parametrize("n", [1, 2, 5])
    def test_termination_for_every_done_subset(self, n):
        notes = _notes(n)
        for k in range(n + 1):
            for done in itertools.combinations([x.path for x in notes], k):
                for start in range(n):
                    nav = ReviewNavigator(notes, current_path=notes[start].path, done_paths=done)
                    for move in (nav.next, nav.previous):
                        result = move()
                        if k == n:
                            assert result is COMPLETE
                        else:
                            assert result.path not in done


class FakeRepo:
    def __init__(self, texts, gate=None):
        self.texts = texts
        self.gate = gate

    async def read_async(self, note):
        if self.gate is not None:
            await self.gate.wait()
        text = self.texts.get(note.path)
        if text is None:
            raise FileNotFoundError(note.path)
        return text


class TestLoadCurrent:
    @pytest.mark.asyncio
    async def test_view(self):
        nav = ReviewNavigator(_notes(2))
        view = await nav.load_current(FakeRepo({"n0.md": "Hello #tag"}))
        assert isinstance(view, NoteView)
        assert view.note.path == "n0.md"
        assert view.position == 1
        assert view.total == 2
        assert view.content == "Hello #tag"
        assert view.tags == ["#tag"]
        assert view.available

    @pytest.mark.asyncio
    async def test_read_failure_degrades(self):
        nav = ReviewNavigator(_notes(2))
        view = await nav.load_current(FakeRepo({}))
        assert view.content == CONTENT_UNAVAILABLE
        assert not view.available
        assert view.tags == []
        # Navigation still works after a failed read
        assert nav.next().path == "n1.md"

    @pytest.mark.asyncio
    async def test_stale_read_dropped(self):
        gate = asyncio.Event()
        nav = ReviewNavigator(_notes(3))
        task = asyncio.create_task(nav.load_current(FakeRepo({"n0.md": "a", "n1.md": "b"}, gate)))
        await asyncio.sleep(0)
        nav.next()
        gate.set()
        assert await task is None

    @pytest.mark.asyncio
    async def test_read_for_current_index_kept(self):
        gate = asyncio.Event()
        nav = ReviewNavigator(_notes(3))
        task = asyncio.create_task(nav.load_current(FakeRepo({"n0.md": "a"}, gate)))
        await asyncio.sleep(0)
        gate.set()
        view = await task
        assert view.content == "a"

    @pytest.mark.asyncio
    async def test_complete(self):
        nav = ReviewNavigator(_notes(1), done_paths=["n0.md"])
        assert await nav.load_current(FakeRepo({})) is COMPLETE

    def test_stamp(self):
        nav = ReviewNavigator(_notes(3))
        stamp = nav.begin_read()
        assert not nav.is_stale(stamp)
        nav.next()
        assert nav.is_stale(stamp)

    @pytest.mark.asyncio
    async def test_undecodable_note_degrades(self, vault):
        (vault / "latin.md").write_bytes(b"caf\xe9 #work")
        (vault / "ok.md").write_text("fine")
        nav = ReviewNavigator([Note("latin.md"), Note("ok.md")])
        repository = VaultRepository(vault)

        view = await nav.load_current(repository)
        assert view.content == CONTENT_UNAVAILABLE
        assert not view.available

        nav.next()
        assert (await nav.load_current(repository)).content == "fine"
