import os
from urllib.parse import quote, urlunsplit

import pytest

from stowage.local.item import LocalItem
from stowage.local.location import LocalLocation


@pytest.fixture
def sample_dir(tmp_path):
    root = tmp_path
    for name in ("one", "two", "three"):
        (root / name).mkdir()
    (root / "three" / "item1").write_bytes(b"3.1")
    (root / "three" / "item2").write_bytes(b"3.2")
    (root / "three" / "item3").write_bytes(b"3.3")
    links = root / "z-links"
    links.mkdir()
    (links / "symtarget").write_bytes(b"symlink target")
    (links / "hardtarget").write_bytes(b"hardlink target")
    os.symlink(str(links / "symtarget"), str(links / "symlink"))
    os.link(str(links / "hardtarget"), str(links / "hardlink"))
    (root / "rootitem").write_bytes(b"root target")
    return os.path.abspath(str(root))


def _links_items(sample_dir):
    location = LocalLocation({"path": sample_dir})
    containers, cursor = location.containers("z", "", 10)
    assert cursor == ""
    links = location.container(containers[0].id)
    items, cursor = links.items("", "", 10)
    assert cursor == ""
    return {item.name: item for item in items}


def test_item_reader(sample_dir):
    location = LocalLocation({"path": sample_dir})
    containers, cursor = location.containers("t", "", 10)
    assert cursor == ""
    three = location.container(containers[0].id)
    items, cursor = three.items("", "", 10)
    assert cursor == ""
    with items[0].open() as stream:
        assert stream.read() == b"3.1"


def test_hardlink(sample_dir):
    items = _links_items(sample_dir)
    meta = items["hardlink"].metadata()
    assert meta["is_dir"] is False
    assert meta["is_hardlink"] is True
    assert meta["is_symlink"] is False


def test_symlink(sample_dir):
    items = _links_items(sample_dir)
    meta = items["symlink"].metadata()
    assert meta["is_dir"] is False
    assert meta["is_hardlink"] is False
    assert meta["is_symlink"] is True
    assert isinstance(meta["link"], str)
    assert "symtarget" in meta["link"]


def test_item_from_url(sample_dir):
    os.makedirs(os.path.join(sample_dir, "a", "b"))
    with open(os.path.join(sample_dir, "a", "f2"), "wb") as f:
        f.write(b"abc")
    with open(os.path.join(sample_dir, "a", "b", "f3"), "wb") as f:
        f.write(b"abc")
    location = LocalLocation({"path": sample_dir})

    url2 = urlunsplit(("file", "", quote(os.path.join(sample_dir, "a", "f2")), "", ""))
    assert location.item_by_url(url2).name == "f2"

    url3 = urlunsplit(
        ("file", "", quote(os.path.join(sample_dir, "a", "b", "f3")), "", "")
    )
    assert location.item_by_url(url3).name == "f3"


def test_name_is_relative_to_prefix(tmp_path):
    (tmp_path / "sub").mkdir()
    path = tmp_path / "sub" / "f.txt"
    path.write_bytes(b"hello")
    item = LocalItem(str(path), len(str(tmp_path)) + 1)
    assert item.name == "sub/f.txt"
    assert item.id == str(path)


def test_size_and_etag(tmp_path):
    path = tmp_path / "f.txt"
    path.write_bytes(b"hello")
    item = LocalItem(str(path), len(str(tmp_path)) + 1)
    assert item.size() == 5
    modified = item.last_mod()
    assert modified.timestamp() == pytest.approx(os.stat(path).st_mtime, abs=1e-3)
    assert item.etag().startswith(
        modified.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    )


def test_metadata_describes_file(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"12345678")
    item = LocalItem(str(path), len(str(tmp_path)) + 1)
    meta = item.metadata()
    assert meta["name"] == "data.bin"
    assert meta["size"] == 8
    assert meta["ext"] == ".bin"


def test_url(tmp_path):
    path = tmp_path / "f.txt"
    path.write_bytes(b"x")
    item = LocalItem(str(path), len(str(tmp_path)) + 1)
    assert item.url == "file://" + os.path.normpath(str(path))


def test_missing_file(tmp_path):
    path = tmp_path / "missing"
    item = LocalItem(str(path), len(str(tmp_path)) + 1)
    with pytest.raises(FileNotFoundError):
        item.size()
    with pytest.raises(FileNotFoundError):
        item.metadata()
    assert item.etag() == ""
    assert item.last_mod() is None


def test_open_missing_file_raises(tmp_path):
    item = LocalItem(str(tmp_path / "nothing"), len(str(tmp_path)) + 1)
    with pytest.raises(FileNotFoundError):
        item.open()