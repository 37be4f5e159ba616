"""
Tests unitaires pour CheckpointStore.

Ces tests verifient:
- Nommage unique des artefacts temporaires par famille
- Fusion : derniere ecriture gagne, une entree par ID local, tri par ID
- Idempotence : meme entree -> sortie identique octet pour octet
- Temporaires illisibles laisses en place, canonique illisible non ecrase
"""

from pathlib import Path

import pytest

from src.core.entities.catalog import MovieTitle, SeriesTitle
from src.infrastructure.persistence.checkpoint import CheckpointStore, family_kind
from src.core.entities.catalog import TitleKind


@pytest.fixture
def store(tmp_path: Path) -> CheckpointStore:
    return CheckpointStore(temp_dir=tmp_path / "tmp", catalog_dir=tmp_path / "catalog")


class TestFamilies:
    """Tests pour family_kind()."""

    @pytest.mark.parametrize(
        "family,kind",
        [
            ("movie", TitleKind.MOVIE),
            ("movie_index", TitleKind.MOVIE),
            ("tv", TitleKind.SERIES),
            ("tv_index", TitleKind.SERIES),
        ],
    )
    def test_known_families(self, family: str, kind: TitleKind) -> None:
        assert family_kind(family) is kind

    def test_unknown_family_rejected(self) -> None:
        with pytest.raises(ValueError):
            family_kind("anime")


class TestSave:
    """Tests pour CheckpointStore.save()."""

    def test_save_writes_uniquely_named_artifact(self, store: CheckpointStore) -> None:
        first = store.save("movie", [MovieTitle(local_id="a", title="A")])
        second = store.save("movie", [MovieTitle(local_id="b", title="B")])

        assert first != second
        assert first.name.startswith("movie_")
        assert first.suffix == ".json"
        assert store.temporaries("movie") == sorted([first, second])

    def test_save_nothing_returns_none(self, store: CheckpointStore) -> None:
        assert store.save("movie", []) is None

    def test_family_filter_is_strict(self, store: CheckpointStore) -> None:
        store.save("tv", [SeriesTitle(local_id="s", title="S")])
        store.save("tv_index", [SeriesTitle(local_id="s", title="S")])

        assert len(store.temporaries("tv")) == 1
        assert len(store.temporaries("tv_index")) == 1

    def test_no_partial_files_left(self, store: CheckpointStore) -> None:
        store.save("movie", [MovieTitle(local_id="a", title="A")])
        assert not list(store.temp_dir.glob("*.part"))


class TestMerge:
    """Tests pour CheckpointStore.merge()."""

    def test_last_write_wins_and_sorted(self, store: CheckpointStore) -> None:
        store.save("movie", [MovieTitle(local_id="b", title="old"), MovieTitle(local_id="a", title="A")])
        store.save("movie", [MovieTitle(local_id="b", title="new")])

        result = store.merge("movie")

        titles = store.load("movie")
        assert [t.local_id for t in titles] == ["a", "b"]
        assert titles[1].title == "new"
        assert result.total == 2
        assert len(result.consumed) == 2
        assert store.temporaries("movie") == []

    def test_canonical_applied_before_temporaries(self, store: CheckpointStore) -> None:
        store.save("movie", [MovieTitle(local_id="a", title="v1"), MovieTitle(local_id="z", title="Z")])
        store.merge("movie")
        store.save("movie", [MovieTitle(local_id="a", title="v2")])

        store.merge("movie")

        titles = {t.local_id: t.title for t in store.load("movie")}
        assert titles == {"a": "v2", "z": "Z"}

    def test_merge_is_idempotent(self, store: CheckpointStore) -> None:
        store.save("movie", [MovieTitle(local_id="b", title="B"), MovieTitle(local_id="a", title="A")])
        store.merge("movie")
        first = store.canonical_path("movie").read_bytes()

        store.merge("movie")
        second = store.canonical_path("movie").read_bytes()

        assert first == second

    def test_same_snapshots_give_identical_output(self, tmp_path: Path) -> None:
        """Deux stockages alimentes par les memes titres produisent les memes octets."""
        outputs = []
        for name in ("run1", "run2"):
            store = CheckpointStore(tmp_path / name / "tmp", tmp_path / name / "catalog")
            store.save("movie", [MovieTitle(local_id="c", title="C"), MovieTitle(local_id="a", title="A")])
            store.save("movie", [MovieTitle(local_id="b", title="B")])
            store.merge("movie")
            outputs.append(store.canonical_path("movie").read_bytes())

        assert outputs[0] == outputs[1]

    def test_corrupt_temporary_left_in_place(self, store: CheckpointStore) -> None:
        store.save("movie", [MovieTitle(local_id="a", title="A")])
        corrupt = store.temp_dir / "movie_20240101_000000_000000_deadbeef.json"
        corrupt.write_text("{not json")

        result = store.merge("movie")

        assert result.corrupt == [corrupt]
        assert corrupt.exists()
        assert [t.local_id for t in store.load("movie")] == ["a"]

    def test_corrupt_canonical_aborts_merge(self, store: CheckpointStore) -> None:
        store.catalog_dir.mkdir(parents=True)
        canonical = store.canonical_path("movie")
        canonical.write_text("garbage")
        pending = store.save("movie", [MovieTitle(local_id="a", title="A")])

        result = store.merge("movie")

        assert result.output is None
        assert canonical.read_text() == "garbage"
        assert pending.exists()

    def test_merge_without_input_writes_nothing(self, store: CheckpointStore) -> None:
        result = store.merge("tv")

        assert result.output is None
        assert not store.canonical_path("tv").exists()

    def test_load_missing_family_returns_empty(self, store: CheckpointStore) -> None:
        assert store.load("movie_index") == []
