"""Tests for metadata and artwork extraction."""

from types import SimpleNamespace

import pytest

from library_importer.errors import MetadataExtractionError
from library_importer.extractors import artwork as artwork_module
from library_importer.extractors import metadata as metadata_module
from library_importer.extractors.artwork import ArtworkExtractor, CoverArt
from library_importer.extractors.metadata import MetadataExtractor


def fake_tinytag(**values):
    """TinyTag-like object with every attribute defaulting to None."""
    attrs = {
        name: None
        for name in (
            "title", "artist", "album", "albumartist", "track", "disc", "year",
            "genre", "duration", "bitrate", "samplerate", "channels",
        )
    }
    attrs.update(values)
    return SimpleNamespace(**attrs)


class FakeVorbisTags(dict):
    """Vorbis comment mapping: every value is a list of strings."""


class TestMetadataExtractorRealFiles:
    """Extraction from WAV files written at test time."""

    def test_wav_stream_info(self, make_wav):
        path = make_wav("01 Intro.wav", seconds=2.0)
        metadata = MetadataExtractor().extract(path)

        assert metadata.duration == pytest.approx(2.0, abs=0.05)
        assert metadata.format == "wav"
        assert metadata.file_size == path.stat().st_size
        assert metadata.sample_rate == 8000
        assert metadata.channels == 1

    def test_title_and_track_fall_back_to_file_name(self, make_wav):
        """Untagged files take title from the stem and track from a leading number."""
        metadata = MetadataExtractor().extract(make_wav("01 Intro.wav"))
        assert metadata.title == "01 Intro"
        assert metadata.track_number == 1
        assert metadata.artist is None
        assert metadata.album_title is None

    def test_corrupt_file_fails(self, make_file):
        path = make_file("broken.wav", b"\x00garbage" * 64)
        with pytest.raises(MetadataExtractionError) as exc_info:
            MetadataExtractor().extract(path)
        assert exc_info.value.path == path

    def test_missing_file_fails(self, tmp_path):
        with pytest.raises(MetadataExtractionError):
            MetadataExtractor().extract(tmp_path / "gone.mp3")


class TestMetadataPrecedence:
    """The generic pass wins; the format-specific pass only fills gaps."""

    @pytest.fixture
    def audio_file(self, make_file):
        return make_file("song.flac")

    def test_format_specific_fills_missing_fields(self, monkeypatch, audio_file):
        monkeypatch.setattr(
            metadata_module.TinyTag,
            "get",
            staticmethod(lambda path: fake_tinytag(title="Generic Title", duration=200.0)),
        )
        tags = FakeVorbisTags(
            title=["Vorbis Title"],
            artist=["Vorbis Artist"],
            album=["Vorbis Album"],
            tracknumber=["4/10"],
            discnumber=["2"],
            date=["2019-05-01"],
        )
        monkeypatch.setattr(
            metadata_module,
            "MutagenFile",
            lambda path: SimpleNamespace(info=SimpleNamespace(length=100.0), tags=tags),
        )

        metadata = MetadataExtractor().extract(audio_file)

        assert metadata.title == "Generic Title"
        assert metadata.duration == 200.0
        assert metadata.artist == "Vorbis Artist"
        assert metadata.album_title == "Vorbis Album"
        assert metadata.track_number == 4
        assert metadata.disc_number == 2
        assert metadata.year == 2019

    def test_blank_generic_values_do_not_block(self, monkeypatch, audio_file):
        """Whitespace-only tags count as empty."""
        monkeypatch.setattr(
            metadata_module.TinyTag,
            "get",
            staticmethod(lambda path: fake_tinytag(artist="   ", duration=10.0)),
        )
        monkeypatch.setattr(
            metadata_module,
            "MutagenFile",
            lambda path: SimpleNamespace(info=None, tags=FakeVorbisTags(artist=["Real Artist"])),
        )

        assert MetadataExtractor().extract(audio_file).artist == "Real Artist"

    def test_duration_from_format_specific_pass(self, monkeypatch, audio_file):
        monkeypatch.setattr(
            metadata_module.TinyTag, "get", staticmethod(lambda path: fake_tinytag())
        )
        monkeypatch.setattr(
            metadata_module,
            "MutagenFile",
            lambda path: SimpleNamespace(
                info=SimpleNamespace(length=42.5, bitrate=320000, sample_rate=44100, channels=2),
                tags=None,
            ),
        )

        metadata = MetadataExtractor().extract(audio_file)
        assert metadata.duration == 42.5
        assert metadata.bitrate == 320
        assert metadata.sample_rate == 44100
        assert metadata.channels == 2

    def test_zero_duration_is_a_failure(self, monkeypatch, audio_file):
        monkeypatch.setattr(
            metadata_module.TinyTag,
            "get",
            staticmethod(lambda path: fake_tinytag(title="Silent", duration=0.0)),
        )
        monkeypatch.setattr(metadata_module, "MutagenFile", lambda path: None)

        with pytest.raises(MetadataExtractionError, match="duration"):
            MetadataExtractor().extract(audio_file)

    def test_reader_errors_are_not_fatal(self, monkeypatch, audio_file):
        """One reader failing still lets the other supply the metadata."""

        def broken(path):
            raise RuntimeError("unreadable")

        monkeypatch.setattr(metadata_module.TinyTag, "get", staticmethod(broken))
        monkeypatch.setattr(
            metadata_module,
            "MutagenFile",
            lambda path: SimpleNamespace(info=SimpleNamespace(length=30.0), tags=None),
        )

        metadata = MetadataExtractor().extract(audio_file)
        assert metadata.duration == 30.0
        assert metadata.title == "song"


class TestArtworkExtractor:
    """Tests for ArtworkExtractor.extract()."""

    def test_flac_picture(self, monkeypatch, make_file):
        picture = SimpleNamespace(data=b"\x89PNG", mime="image/png")
        monkeypatch.setattr(
            artwork_module,
            "MutagenFile",
            lambda path: SimpleNamespace(pictures=[picture], tags=None),
        )

        cover = ArtworkExtractor().extract(make_file("song.flac"))
        assert cover == CoverArt(data=b"\x89PNG", mime_type="image/png")
        assert cover.file_extension == ".png"

    def test_no_artwork(self, make_wav):
        assert ArtworkExtractor().extract(make_wav("plain.wav")) is None

    def test_unreadable_file(self, make_file):
        assert ArtworkExtractor().extract(make_file("broken.mp3", b"junk")) is None

    def test_jpeg_extension_default(self):
        assert CoverArt(data=b"").file_extension == ".jpg"
