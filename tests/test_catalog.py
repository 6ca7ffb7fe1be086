"""Tests for catalog writing and library statistics."""

from pathlib import Path

import pytest

from library_importer.errors import CatalogWriteError
from library_importer.extractors.artwork import CoverArt
from library_importer.models.catalog import Library
from library_importer.models.track import AudioMetadata
from library_importer.processors.catalog import CatalogWriter
from library_importer.processors.statistics import StatisticsAggregator
from library_importer.services.repository import InMemoryCatalogRepository


def make_metadata(**overrides) -> AudioMetadata:
    values = {"duration": 200.0, "file_size": 1000, "format": "mp3"}
    values.update(overrides)
    return AudioMetadata(**values)


class FakeArtwork:
    """Artwork extractor returning the same cover for every file."""

    def __init__(self, cover: CoverArt | None) -> None:
        self.cover = cover
        self.calls = 0

    def extract(self, file_path: Path) -> CoverArt | None:
        self.calls += 1
        return self.cover


class TestCatalogWriter:
    """Tests for CatalogWriter.write()."""

    @pytest.fixture
    def writer(self, repository):
        return CatalogWriter(repository)

    def test_creates_artist_album_track(self, writer, repository, library):
        metadata = make_metadata(
            title="Movement", artist="Hozier", album_title="Wasteland, Baby!",
            track_number=2, year=2019, genre="Rock", bitrate=320,
        )
        track = writer.write(metadata, Path("/music/movement.mp3"), library)

        artist = repository.find_artist("Hozier", library)
        album = repository.find_album("Wasteland, Baby!", artist)
        assert track.album_id == album.id
        assert track.file_path == "/music/movement.mp3"
        assert track.track_number == 2
        assert track.disc_number == 1
        assert track.bitrate == 320
        assert album.year == 2019
        assert album.genre == "Rock"

    def test_find_or_create_reuses_records(self, writer, repository, library):
        """Tracks of the same album share one artist and one album."""
        for name in ("a.mp3", "b.mp3"):
            writer.write(
                make_metadata(artist="Hozier", album_title="Hozier"), Path(f"/m/{name}"), library
            )
        writer.write(make_metadata(artist="HOZIER", album_title="hozier"), Path("/m/c.mp3"), library)

        artists = repository.artists_for(library)
        assert len(artists) == 1
        albums = repository.albums_for(artists[0])
        assert len(albums) == 1
        assert len(repository.tracks_for(albums[0])) == 3

    def test_album_artist_preferred(self, writer, repository, library):
        writer.write(
            make_metadata(artist="Guest", album_artist="Band"), Path("/m/a.mp3"), library
        )
        assert [a.name for a in repository.artists_for(library)] == ["Band"]

    def test_unknown_fallbacks(self, writer, repository, library):
        track = writer.write(make_metadata(), Path("/m/untitled.mp3"), library)

        artist = repository.find_artist("Unknown Artist", library)
        album = repository.find_album("Unknown Album", artist)
        assert track.album_id == album.id
        assert track.title == "untitled"

    def test_album_running_totals(self, writer, repository, library):
        writer.write(make_metadata(album_title="A", duration=100.0), Path("/m/1.mp3"), library)
        writer.write(make_metadata(album_title="A", duration=50.5), Path("/m/2.mp3"), library)

        album = repository.albums_for(repository.artists_for(library)[0])[0]
        assert album.track_count == 2
        assert album.total_duration == pytest.approx(150.5)

    def test_repository_failure_wrapped(self, repository, library, monkeypatch):
        def reject(track):
            raise RuntimeError("disk full")

        monkeypatch.setattr(repository, "create_track", reject)
        with pytest.raises(CatalogWriteError, match="disk full") as exc_info:
            CatalogWriter(repository).write(make_metadata(), Path("/m/x.mp3"), library)
        assert exc_info.value.path == Path("/m/x.mp3")

    def test_callback_receives_new_tracks(self, repository, library):
        received = []
        writer = CatalogWriter(repository, on_track_imported=received.append)
        track = writer.write(make_metadata(), Path("/m/x.mp3"), library)
        assert received == [track]

    def test_callback_failure_does_not_fail_write(self, repository, library):
        def explode(track):
            raise RuntimeError("listener broke")

        writer = CatalogWriter(repository, on_track_imported=explode)
        assert writer.write(make_metadata(), Path("/m/x.mp3"), library) is not None

    def test_artwork_saved_once_per_album(self, repository, library, tmp_path):
        artwork = FakeArtwork(CoverArt(data=b"\x89PNG", mime_type="image/png"))
        writer = CatalogWriter(repository, artwork_extractor=artwork, artwork_dir=tmp_path / "art")

        writer.write(make_metadata(album_title="A"), Path("/m/1.mp3"), library)
        writer.write(make_metadata(album_title="A"), Path("/m/2.mp3"), library)

        album = repository.albums_for(repository.artists_for(library)[0])[0]
        assert album.artwork_path == str(tmp_path / "art" / f"{album.id}.png")
        assert Path(album.artwork_path).read_bytes() == b"\x89PNG"
        assert artwork.calls == 1

    def test_missing_artwork_ignored(self, repository, library, tmp_path):
        writer = CatalogWriter(repository, artwork_extractor=FakeArtwork(None), artwork_dir=tmp_path)
        writer.write(make_metadata(), Path("/m/1.mp3"), library)
        album = repository.albums_for(repository.artists_for(library)[0])[0]
        assert album.artwork_path is None

    def test_artwork_record_failure_keeps_track(self, tmp_path):
        """A repository error while recording the cover leaves the album without artwork."""

        class ArtworkRejectingRepository(InMemoryCatalogRepository):
            def update_album(self, album):
                if album.artwork_path is not None:
                    raise RuntimeError("catalog locked")
                super().update_album(album)

        repository = ArtworkRejectingRepository()
        library = repository.create_library(Library(name="Test Library"))
        artwork = FakeArtwork(CoverArt(data=b"\xff\xd8", mime_type="image/jpeg"))
        writer = CatalogWriter(repository, artwork_extractor=artwork, artwork_dir=tmp_path / "art")

        track = writer.write(make_metadata(album_title="A"), Path("/m/1.mp3"), library)

        album = repository.albums_for(repository.artists_for(library)[0])[0]
        assert repository.tracks_for(album) == [track]
        assert album.artwork_path is None


class FailingRepository(InMemoryCatalogRepository):
    """In-memory repository that rejects one kind of write."""

    def __init__(self, failing: str) -> None:
        super().__init__()
        self.failing = failing

    def create_track(self, track):
        if self.failing == "create_track":
            raise RuntimeError("disk full")
        return super().create_track(track)

    def update_album(self, album):
        if self.failing == "update_album":
            raise RuntimeError("disk full")
        super().update_album(album)


class TestCatalogWriterRollback:
    """A failed write leaves no partial records behind."""

    @pytest.mark.parametrize("failing", ["create_track", "update_album"])
    def test_new_artist_and_album_removed(self, failing):
        repository = FailingRepository(failing)
        library = repository.create_library(Library(name="Test Library"))

        with pytest.raises(CatalogWriteError, match="disk full"):
            CatalogWriter(repository).write(
                make_metadata(artist="Band", album_title="Record"), Path("/m/x.mp3"), library
            )

        assert repository.artists_for(library) == []
        assert repository.find_track_by_file_name("x.mp3", library) is None
        stats = StatisticsAggregator(repository).compute(library)
        assert (stats.artist_count, stats.album_count, stats.track_count) == (0, 0, 0)

    @pytest.mark.parametrize("failing", ["create_track", "update_album"])
    def test_existing_album_restored(self, failing):
        """Records from earlier writes survive and the album totals are put back."""
        repository = FailingRepository("")
        library = repository.create_library(Library(name="Test Library"))
        writer = CatalogWriter(repository)
        first = writer.write(
            make_metadata(artist="Band", album_title="Record", duration=100.0), Path("/m/1.mp3"), library
        )

        repository.failing = failing
        with pytest.raises(CatalogWriteError):
            writer.write(
                make_metadata(artist="Band", album_title="Record", year=2001, genre="Jazz"),
                Path("/m/2.mp3"),
                library,
            )

        artist = repository.find_artist("Band", library)
        album = repository.find_album("Record", artist)
        assert repository.tracks_for(album) == [first]
        assert album.track_count == 1
        assert album.total_duration == pytest.approx(100.0)
        assert album.year is None
        assert album.genre is None

    def test_failed_file_can_be_written_again(self):
        repository = FailingRepository("update_album")
        library = repository.create_library(Library(name="Test Library"))
        writer = CatalogWriter(repository)
        with pytest.raises(CatalogWriteError):
            writer.write(make_metadata(album_title="A"), Path("/m/x.mp3"), library)

        repository.failing = ""
        track = writer.write(make_metadata(album_title="A"), Path("/m/x.mp3"), library)

        assert repository.find_track_by_file_name("x.mp3", library) is track
        assert len(repository.artists_for(library)) == 1


class TestStatisticsAggregator:
    """Tests for StatisticsAggregator."""

    @pytest.fixture
    def populated(self, repository, library):
        writer = CatalogWriter(repository)
        writer.write(make_metadata(artist="A", album_title="X", duration=3600.0, file_size=500), Path("/m/1.mp3"), library)
        writer.write(make_metadata(artist="A", album_title="Y", duration=600.0, file_size=300), Path("/m/2.mp3"), library)
        writer.write(make_metadata(artist="B", album_title="Z", duration=60.0, file_size=200), Path("/m/3.mp3"), library)
        return library

    def test_compute(self, repository, populated):
        stats = StatisticsAggregator(repository).compute(populated)

        assert stats.artist_count == 2
        assert stats.album_count == 3
        assert stats.track_count == 3
        assert stats.total_duration == pytest.approx(4260.0)
        assert stats.total_size_bytes == 1000
        assert stats.duration_formatted == "1h 11m"

    def test_empty_library(self, repository, library):
        stats = StatisticsAggregator(repository).compute(library)
        assert (stats.artist_count, stats.album_count, stats.track_count) == (0, 0, 0)
        assert stats.duration_formatted == "0h 0m"

    def test_refresh_corrects_drifted_totals(self, repository, populated):
        """Album caches are recomputed from their tracks."""
        album = repository.albums_for(repository.artists_for(populated)[0])[0]
        album.track_count = 99
        album.total_duration = 1.0

        aggregator = StatisticsAggregator(repository)
        assert aggregator.refresh_album_totals(populated) == 1
        assert album.track_count == 1
        assert album.total_duration == pytest.approx(3600.0)
        assert aggregator.refresh_album_totals(populated) == 0

    def test_compute_ignores_album_cache(self, repository, populated):
        album = repository.albums_for(repository.artists_for(populated)[0])[0]
        album.track_count = 99
        assert StatisticsAggregator(repository).compute(populated).track_count == 3
