"""Tests for relocation source resolution."""

from conftest import make_corrupt_deflate_zip, make_encrypted_zip, make_zip

from packsmith.archive.resolver import AssetResolver
from packsmith.types import UploadedInput, WarningKind


def _input(name: str, data: bytes = b"") -> UploadedInput:
    return UploadedInput(data=data or name.encode(), name=name)


class TestSuffixMatching:
    def test_exact_match(self):
        resolver = AssetResolver([_input("ruby.png", b"ruby")])
        resolution = resolver.resolve("ruby.png", "RP/textures/ruby.png")
        assert resolution.found
        assert resolution.data == b"ruby"
        assert resolution.warnings == []

    def test_suffix_match(self):
        resolver = AssetResolver([_input("assets/textures/ruby.png", b"ruby")])
        resolution = resolver.resolve("ruby.png")
        assert resolution.data == b"ruby"
        assert resolution.source == "assets/textures/ruby.png"

    def test_exact_beats_earlier_suffix_match(self):
        resolver = AssetResolver([
            _input("old/ruby.png", b"old"),
            _input("ruby.png", b"exact"),
        ])
        resolution = resolver.resolve("ruby.png")
        assert resolution.data == b"exact"
        assert resolution.warnings == []

    def test_ambiguous_uses_first_and_warns(self):
        resolver = AssetResolver([
            _input("a/ruby.png", b"first"),
            _input("b/ruby.png", b"second"),
        ])
        resolution = resolver.resolve("ruby.png", "RP/ruby.png")
        assert resolution.data == b"first"
        assert len(resolution.warnings) == 1
        warning = resolution.warnings[0]
        assert warning.kind == WarningKind.AMBIGUOUS
        assert warning.candidates == ["a/ruby.png", "b/ruby.png"]
        assert "Using the first one found: 'a/ruby.png'" in warning.message

    def test_not_found_warns(self):
        resolver = AssetResolver([_input("emerald.png")])
        resolution = resolver.resolve("ruby.png", "RP/ruby.png")
        assert not resolution.found
        assert resolution.warnings[0].kind == WarningKind.NOT_FOUND
        assert resolution.warnings[0].message == (
            "Asset for mapping 'ruby.png' -> 'RP/ruby.png' not found "
            "in any uploaded files or zips."
        )

    def test_blank_source_is_not_found(self):
        resolver = AssetResolver([_input("ruby.png", b"ruby"), _input("emerald.png")])
        for blank in ("", "   "):
            resolution = resolver.resolve(blank, "RP/textures/ruby.png")
            assert not resolution.found
            assert [w.kind for w in resolution.warnings] == [WarningKind.NOT_FOUND]


class TestContainerSearch:
    def test_found_inside_container(self):
        container = UploadedInput(
            data=make_zip({"RP/textures/ruby.png": b"zipped"}), name="rp.mcpack"
        )
        resolution = AssetResolver([container]).resolve("textures/ruby.png")
        assert resolution.data == b"zipped"
        assert resolution.source == "rp.mcpack:RP/textures/ruby.png"

    def test_loose_file_beats_container(self):
        container = UploadedInput(data=make_zip({"ruby.png": b"zipped"}), name="rp.zip")
        resolver = AssetResolver([container, _input("ruby.png", b"loose")])
        assert resolver.resolve("ruby.png").data == b"loose"

    def test_bad_container_warns_and_continues(self):
        broken = UploadedInput(data=b"garbage", name="broken.zip")
        good = UploadedInput(data=make_zip({"ruby.png": b"zipped"}), name="good.zip")
        resolution = AssetResolver([broken, good]).resolve("ruby.png")
        assert resolution.data == b"zipped"
        assert resolution.warnings[0].kind == WarningKind.CONTAINER_ERROR
        assert resolution.warnings[0].candidates == ["broken.zip"]

    def test_container_itself_matches_by_suffix(self):
        container = UploadedInput(data=make_zip({"a": b"1"}), name="packs/rp.mcpack")
        resolution = AssetResolver([container]).resolve("rp.mcpack")
        assert resolution.data == container.data

    def test_corrupt_deflate_container_warns_and_continues(self):
        broken = UploadedInput(
            data=make_corrupt_deflate_zip("RP/textures/ore.png"), name="rp.zip"
        )
        good = UploadedInput(data=make_zip({"ruby.png": b"zipped"}), name="good.zip")
        resolution = AssetResolver([broken, good]).resolve("ruby.png")
        assert resolution.data == b"zipped"
        assert resolution.warnings[0].kind == WarningKind.CONTAINER_ERROR
        assert resolution.warnings[0].candidates == ["rp.zip"]

    def test_encrypted_container_warns(self):
        locked = UploadedInput(
            data=make_encrypted_zip({"RP/textures/ruby.png": b"secret"}), name="rp.mcpack"
        )
        resolution = AssetResolver([locked]).resolve("ruby.png", "RP/ruby.png")
        assert not resolution.found
        assert [w.kind for w in resolution.warnings] == [
            WarningKind.CONTAINER_ERROR,
            WarningKind.NOT_FOUND,
        ]
