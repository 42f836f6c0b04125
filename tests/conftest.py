import io
import json
import zipfile

import pytest

from packsmith.types import OriginKind, UploadedInput


def make_zip(entries: dict[str, bytes | str]) -> bytes:
    """Build an in-memory ZIP from a path -> content mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for path, data in entries.items():
            zf.writestr(path, data)
    return buffer.getvalue()


def make_corrupt_deflate_zip(path: str) -> bytes:
    """A ZIP whose directory is intact but whose deflate stream is garbage."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(path, b"ore texture " * 64)
    data = bytearray(buffer.getvalue())
    # Local header is 30 bytes plus the name; a 0xFF byte opens a reserved block type
    start = 30 + len(path.encode())
    data[start:start + 4] = b"\xff\xff\xff\xff"
    return bytes(data)


def make_encrypted_zip(entries: dict[str, bytes | str]) -> bytes:
    """A ZIP whose entries are flagged as password protected."""
    data = bytearray(make_zip(entries))
    for signature, flag_offset in ((b"PK\x03\x04", 6), (b"PK\x01\x02", 8)):
        pos = data.find(signature)
        while pos != -1:
            data[pos + flag_offset] |= 0x01
            pos = data.find(signature, pos + 4)
    return bytes(data)


def generation_json(files=None, mappings=None, summary=None, plan=None) -> str:
    """Serialize a model reply in the shape the generation schema asks for."""
    data: dict = {}
    if files is not None:
        data["files"] = [{"path": p, "content": c} for p, c in files]
    if mappings is not None:
        data["assetMappings"] = [{"originalPath": o, "newPath": n} for o, n in mappings]
    if summary is not None:
        data["summaryReport"] = summary
    if plan is not None:
        data["plan"] = plan
    return json.dumps(data)


@pytest.fixture
def sample_png_bytes():
    """Minimal valid PNG for testing (1x1 white pixel)."""
    import base64
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR4"
        "nGP4z8BQDwAEgAF/pooBPQAAAABJRU5ErkJggg=="
    )


@pytest.fixture
def sample_inputs(sample_png_bytes):
    """One text file and one binary texture."""
    return [
        UploadedInput(data=b'{"format_version": "1.20.0"}', name="manifest.json"),
        UploadedInput(data=sample_png_bytes, name="assets/textures/ruby.png"),
    ]


@pytest.fixture
def sample_container():
    """A behavior pack container with two entries."""
    data = make_zip({
        "BP/manifest.json": '{"header": {"name": "BP"}}',
        "BP/textures/blocks/ore.png": b"\x89PNGore",
    })
    return UploadedInput(data=data, name="pack.mcpack", origin=OriginKind.ADDON_FILE)


@pytest.fixture
def sample_prompt_yaml(tmp_path):
    """Write a minimal tool prompt YAML and return its path."""
    content = """
tool:
  name: test_tool
  description: "Test tool"
  temperature: 0.4
  system: "You write addons for {{ edition }}."
  user: "Request: {{ request }}"
"""
    path = tmp_path / "test_tool.yaml"
    path.write_text(content)
    return path
