"""Tests for the filesystem note repository."""

import pytest

from dailyreview.repository import NoteRepository, VaultRepository
from dailyreview.types import Note

from conftest import mtime_for, write_note


@pytest.fixture
def populated(vault):
    write_note(vault, "a.md", "alpha #one", days_ago=2)
    write_note(vault, "Sub/b.md", "beta")
    write_note(vault, "Sub/Deep/c.md", "gamma")
    write_note(vault, "notes.txt", "not a note")
    write_note(vault, ".hidden.md", "hidden")
    write_note(vault, ".obsidian/config.md", "hidden folder")
    write_note(vault, ".daily-review/x.md", "state")
    write_note(vault, "Skip/d.md", "ignored")
    return vault


class TestListing:
    def test_conforms_to_protocol(self, vault):
        assert isinstance(VaultRepository(vault), NoteRepository)

    def test_markdown_only_and_hidden_skipped(self, populated):
        repo = VaultRepository(populated)
        paths = [n.path for n in repo.list_notes()]
        assert paths == ["a.md", "Skip/d.md", "Sub/b.md", "Sub/Deep/c.md"]

    def test_ignore(self, populated):
        repo = VaultRepository(populated, ignore=[populated / "Skip"])
        assert "Skip/d.md" not in [n.path for n in repo.list_notes()]
        assert "Skip" not in repo.list_folders()

    def test_mtime(self, populated):
        note = VaultRepository(populated).get("a.md")
        assert note.mtime == pytest.approx(mtime_for(2))

    def test_folders(self, populated):
        assert VaultRepository(populated).list_folders() == ["Skip", "Sub", "Sub/Deep"]

    def test_empty_vault(self, vault):
        assert VaultRepository(vault).list_notes() == []


class TestLookup:
    def test_get(self, populated):
        repo = VaultRepository(populated)
        assert repo.get("Sub/b.md").path == "Sub/b.md"
        assert repo.exists("Sub/b.md")

    def test_missing(self, populated):
        repo = VaultRepository(populated)
        assert repo.get("nope.md") is None
        assert not repo.exists("nope.md")

    def test_outside_vault(self, populated, tmp_path):
        (tmp_path / "outside.md").write_text("secret")
        assert VaultRepository(populated).get("../outside.md") is None

    def test_hidden_not_found(self, populated):
        assert VaultRepository(populated).get(".obsidian/config.md") is None

    def test_directory_is_not_a_note(self, populated):
        assert VaultRepository(populated).get("Sub") is None


class TestRead:
    def test_read(self, populated):
        repo = VaultRepository(populated)
        assert repo.read(Note("a.md")) == "alpha #one"

    def test_read_missing_raises(self, populated):
        with pytest.raises(OSError):
            VaultRepository(populated).read(Note("gone.md"))

    def test_read_outside_vault_raises(self, populated, tmp_path):
        (tmp_path / "outside.md").write_text("secret")
        with pytest.raises(OSError, match="outside"):
            VaultRepository(populated).read(Note("../outside.md"))

    @pytest.mark.asyncio
    async def test_read_async(self, populated):
        repo = VaultRepository(populated)
        assert await repo.read_async(Note("Sub/b.md")) == "beta"

    def test_last_modified(self, populated):
        repo = VaultRepository(populated)
        assert repo.last_modified(Note("a.md")) == pytest.approx(mtime_for(2))


class TestUndecodable:
    @pytest.fixture
    def latin(self, vault):
        (vault / "latin.md").write_bytes(b"caf\xe9 #work")
        return VaultRepository(vault)

    def test_read_raises_os_error(self, latin):
        with pytest.raises(OSError, match="UTF-8") as info:
            latin.read(Note("latin.md"))
        assert isinstance(info.value.__cause__, UnicodeDecodeError)

    @pytest.mark.asyncio
    async def test_read_async_raises_os_error(self, latin):
        with pytest.raises(OSError):
            await latin.read_async(Note("latin.md"))

    def test_still_listed(self, latin):
        assert [n.path for n in latin.list_notes()] == ["latin.md"]
