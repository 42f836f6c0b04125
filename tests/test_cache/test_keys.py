"""Tests for cache key derivation."""

from packsmith.cache.keys import (
    derive_key,
    fingerprint_inputs,
    generation_cache_key,
    guess_mime_type,
    is_text_name,
    read_text,
    summary_cache_key,
)
from packsmith.types import UploadedInput


class TestDeriveKey:
    def test_deterministic(self):
        parts = ["Be a helpful addon generator", "Make a ruby sword", ""]
        assert derive_key(parts) == derive_key(list(parts))

    def test_hex_sha256_length(self):
        key = derive_key(["a"])
        assert len(key) == 64
        assert all(c in "0123456789abcdef" for c in key)

    def test_known_digest(self):
        # sha256("abc")
        assert derive_key(["a", "b", "c"]) == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_accepts_bytes(self):
        assert derive_key([b"ab", "c"]) == derive_key(["abc"])

    def test_part_boundaries_not_encoded(self):
        assert derive_key(["ab", "c"]) == derive_key(["a", "bc"])

    def test_order_sensitive(self):
        assert derive_key(["x", "y"]) != derive_key(["y", "x"])

    def test_near_duplicates_distinct(self):
        prompts = [f"Make a sword with damage {i}" for i in range(200)]
        prompts += [p + " " for p in prompts]
        keys = {derive_key(["sys", p, ""]) for p in prompts}
        assert len(keys) == len(prompts)

    def test_empty_parts(self):
        assert derive_key([]) == derive_key([""])


class TestFingerprintInputs:
    def test_empty(self):
        assert fingerprint_inputs([]) == ""

    def test_text_file_includes_content(self):
        item = UploadedInput(data=b"say hi", name="functions/hi.mcfunction")
        assert fingerprint_inputs([item]) == (
            "File path: functions/hi.mcfunction\n\n---\n\nsay hi"
        )

    def test_binary_file_uses_name_and_mime(self, sample_png_bytes):
        item = UploadedInput(data=sample_png_bytes, name="ruby.png")
        assert fingerprint_inputs([item]) == "ruby.png:image/png"

    def test_joined_in_order(self, sample_inputs):
        fp = fingerprint_inputs(sample_inputs)
        first, second = fp.split("|")
        assert first.startswith("File path: manifest.json")
        assert second == "assets/textures/ruby.png:image/png"

    def test_binary_content_change_not_reflected(self):
        a = UploadedInput(data=b"\x00\x01", name="sound.ogg")
        b = UploadedInput(data=b"\x02\x03", name="sound.ogg")
        assert fingerprint_inputs([a]) == fingerprint_inputs([b])

    def test_text_content_change_reflected(self):
        a = UploadedInput(data=b"one", name="en_US.lang")
        b = UploadedInput(data=b"two", name="en_US.lang")
        assert fingerprint_inputs([a]) != fingerprint_inputs([b])


class TestCompositeKeys:
    def test_generation_key_varies_by_component(self):
        base = generation_cache_key("sys", "prompt", "fp")
        assert base != generation_cache_key("sys2", "prompt", "fp")
        assert base != generation_cache_key("sys", "prompt2", "fp")
        assert base != generation_cache_key("sys", "prompt", "fp2")

    def test_summary_key_uses_raw_bytes(self):
        a = UploadedInput(data=b"\x00\x01", name="sound.ogg")
        b = UploadedInput(data=b"\x02\x03", name="sound.ogg")
        assert summary_cache_key("sys", [a]) != summary_cache_key("sys", [b])

    def test_summary_key_differs_from_generation_key(self):
        item = UploadedInput(data=b"x", name="a.txt")
        assert summary_cache_key("sys", [item]) != generation_cache_key(
            "sys", "", fingerprint_inputs([item])
        )


class TestTextHelpers:
    def test_is_text_name(self):
        assert is_text_name("a/b/entity.JSON")
        assert is_text_name("main.js")
        assert not is_text_name("ruby.png")

    def test_read_text_binary_name(self):
        assert read_text(UploadedInput(data=b"abc", name="x.png")) is None

    def test_read_text_undecodable(self):
        assert read_text(UploadedInput(data=b"\xff\xfe\xfa", name="x.json")) is None

    def test_guess_mime_type_default(self):
        assert guess_mime_type("blob.unknownext") == "application/octet-stream"
