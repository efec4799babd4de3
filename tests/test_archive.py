import stat
import zipfile
from pathlib import Path

import pytest

from epubmanga.epub.archive import ArchiveAssembler, MIMETYPE
from epubmanga.epub.image import PageImage
from epubmanga.error import ArchiveError

GENERATED = ["style.css", "nav.xhtml", "toc.ncx", "content.opf", "META-INF/container.xml", "cover.jpg"]


def populate(workspace: Path, skip=()):
    (workspace / "images").mkdir(parents=True)
    (workspace / "META-INF").mkdir()
    images = []
    for name in ("a.png", "b.png"):
        path = workspace / "images" / name
        path.write_bytes(b"image " + name.encode())
        images.append(PageImage(Path(name), path, 1, 1, 1, 1))
    pages = []
    for name in ("00001.xhtml", "00002.xhtml"):
        path = workspace / name
        path.write_text(f"<html>{name}</html>")
        pages.append(path)
    for name in GENERATED:
        if name not in skip:
            (workspace / name).write_text(name)
    return images, pages


def test_archive_layout(tmp_path):
    workspace = tmp_path / "ws"
    images, pages = populate(workspace)
    output = tmp_path / "out" / "book.epub"

    result = ArchiveAssembler(workspace).assemble(output, images, pages)

    assert result == output
    with zipfile.ZipFile(output) as archive:
        infos = archive.infolist()
        assert infos[0].filename == "mimetype"
        assert infos[0].compress_type == zipfile.ZIP_STORED
        assert archive.read("mimetype") == MIMETYPE.encode("ascii")

        names = archive.namelist()
        assert names[1:] == ["images/a.png", "images/b.png", "00001.xhtml", "00002.xhtml"] + GENERATED
        assert archive.read("images/b.png") == b"image b.png"
        assert archive.read("META-INF/container.xml") == b"META-INF/container.xml"

    assert stat.S_IMODE(output.stat().st_mode) == 0o644
    assert [p.name for p in output.parent.iterdir()] == ["book.epub"]


def test_failed_write_leaves_no_partial_file(tmp_path):
    workspace = tmp_path / "ws"
    images, pages = populate(workspace, skip=("cover.jpg",))
    output = tmp_path / "out" / "book.epub"

    with pytest.raises(ArchiveError) as excinfo:
        ArchiveAssembler(workspace).assemble(output, images, pages)

    assert excinfo.value.stage == "archive"
    assert list(output.parent.iterdir()) == []


def test_failed_write_keeps_previous_output(tmp_path):
    workspace = tmp_path / "ws"
    images, pages = populate(workspace, skip=("toc.ncx",))
    output = tmp_path / "book.epub"
    output.write_bytes(b"previous build")

    with pytest.raises(ArchiveError):
        ArchiveAssembler(workspace).assemble(output, images, pages)

    assert output.read_bytes() == b"previous build"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["book.epub", "ws"]


def test_staged_archive_is_only_visible_after_commit(tmp_path):
    workspace = tmp_path / "ws"
    images, pages = populate(workspace)
    out_dir = tmp_path / "out"
    output = out_dir / "book.epub"

    assembler = ArchiveAssembler(workspace)
    staged = assembler.stage(output, images, pages)
    assert staged.parent == out_dir
    assert not output.exists()

    ArchiveAssembler.discard(staged)
    assert list(out_dir.iterdir()) == []

    staged = assembler.stage(output, images, pages)
    assert ArchiveAssembler.commit(staged, output) == output
    assert [p.name for p in out_dir.iterdir()] == ["book.epub"]
