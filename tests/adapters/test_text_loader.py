from postkit.adapters.loading.text_loader import BINARY, OS_ERROR, TOO_LARGE, TextLoader


def test_loads_utf8(tmp_path):
    p = tmp_path / "a.md"
    p.write_text("héllo", encoding="utf-8")
    assert TextLoader().load(p) == "héllo"


def test_falls_back_to_latin1(tmp_path):
    p = tmp_path / "a.md"
    p.write_bytes("café".encode("latin-1"))
    assert TextLoader().load(p) == "café"


def test_skips_binary_and_large_files(tmp_path):
    binary = tmp_path / "b.md"
    binary.write_bytes(b"\x00\x01\x02abc")
    big = tmp_path / "c.md"
    big.write_text("x" * 100, encoding="utf-8")
    loader = TextLoader(max_bytes=50)
    assert loader.load(binary) is None
    assert loader.load(big) is None


def test_missing_file(tmp_path):
    assert TextLoader().load(tmp_path / "missing.md") is None


def test_read_reports_skip_reason(tmp_path):
    binary = tmp_path / "b.md"
    binary.write_bytes(b"\x00\x01\x02abc")
    big = tmp_path / "c.md"
    big.write_text("x" * 100, encoding="utf-8")
    loader = TextLoader(max_bytes=50)
    assert loader.read(binary).skip_reason == BINARY
    assert loader.read(big).skip_reason == TOO_LARGE
    assert loader.read(tmp_path / "missing.md").skip_reason == OS_ERROR


def test_ansi_escapes_are_text(tmp_path):
    p = tmp_path / "colours.md"
    p.write_bytes(b"echo -e '\x1b[31mred\x1b[0m'\n")
    loaded = TextLoader().read(p)
    assert loaded.skip_reason is None
    assert loaded.text.startswith("echo -e")


def test_utf8_bom_is_dropped(tmp_path):
    p = tmp_path / "a.md"
    p.write_bytes(b"\xef\xbb\xbf---\ntitle: A\n---\n")
    loaded = TextLoader().read(p)
    assert loaded.text == "---\ntitle: A\n---\n"
    assert loaded.encoding == "utf-8-sig"
