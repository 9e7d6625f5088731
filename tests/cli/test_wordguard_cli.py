from __future__ import annotations

import asyncio
import json

import pytest

from wordguard import cli
from wordguard.errors import StoreUnavailableError
from wordguard.models.dictionary import WordEntry
from wordguard.services.store import InMemoryDictionaryStore


class UnreachableStore(InMemoryDictionaryStore):
    async def fetch_all(self) -> list[WordEntry]:
        raise StoreUnavailableError()


@pytest.fixture
def cli_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryDictionaryStore:
    store = InMemoryDictionaryStore()
    monkeypatch.setattr(cli, "_open_store", lambda: store)
    return store


def _words(store: InMemoryDictionaryStore) -> list[str]:
    return [e.word for e in asyncio.run(store.fetch_all())]


class TestImportCommand:
    def test_import_csv(self, cli_store: InMemoryDictionaryStore, tmp_path) -> None:
        path = tmp_path / "words.csv"
        path.write_text("word,language,category\nbadword,English,profanity\nputa,Filipino,profanity\n")

        assert cli.main(["import", str(path)]) == cli.EXIT_OK
        assert _words(cli_store) == ["badword", "puta"]

    def test_dry_run_writes_nothing(self, cli_store: InMemoryDictionaryStore, tmp_path) -> None:
        path = tmp_path / "list.txt"
        path.write_text("alpha\nbeta\n")

        assert cli.main(["import", str(path), "--dry-run"]) == cli.EXIT_OK
        assert _words(cli_store) == []

    def test_reported_invalid_records_set_exit_code(self, cli_store: InMemoryDictionaryStore, tmp_path) -> None:
        path = tmp_path / "words.json"
        path.write_text(json.dumps([{"word": "ok"}, {"word": " "}]))

        assert cli.main(["import", str(path), "--report-invalid"]) == cli.EXIT_RECORD_ERRORS
        assert _words(cli_store) == ["ok"]

    def test_bad_format(self, cli_store: InMemoryDictionaryStore, tmp_path) -> None:
        path = tmp_path / "words.json"
        path.write_text("{broken")

        assert cli.main(["import", str(path)]) == cli.EXIT_BAD_FORMAT

    def test_store_down(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.setattr(cli, "_open_store", UnreachableStore)
        path = tmp_path / "list.txt"
        path.write_text("alpha\n")

        assert cli.main(["import", str(path)]) == cli.EXIT_STORE_DOWN


class TestExportCommand:
    def test_export_to_file(self, cli_store: InMemoryDictionaryStore, tmp_path) -> None:
        source = tmp_path / "in.txt"
        source.write_text("gago|Filipino|profanity|gaga\n")
        cli.main(["import", str(source)])
        target = tmp_path / "out.csv"

        assert cli.main(["export", "--format", "csv", "-o", str(target)]) == cli.EXIT_OK
        assert target.read_text() == "word,language,category,variations\ngago,Filipino,profanity,gaga\n"

    def test_export_to_stdout(self, cli_store: InMemoryDictionaryStore, tmp_path, capsys) -> None:
        source = tmp_path / "list.txt"
        source.write_text("alpha\n")
        cli.main(["import", str(source)])
        capsys.readouterr()

        assert cli.main(["export", "--format", "text"]) == cli.EXIT_OK
        assert capsys.readouterr().out == "alpha\n"
