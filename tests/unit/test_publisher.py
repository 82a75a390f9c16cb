"""Unit tests for publishing build products and recovering partial output."""

import pytest

from latexflow.contexts.staging.publisher import (
    publish,
    publishable_entries,
    recover_partial_output,
)


@pytest.fixture
def staged(tmp_path):
    """Staging directory after a build: products, a copied .tex, a mirrored link."""
    source = tmp_path / "src"
    source.mkdir()
    (source / "refs.bib").write_text("bib")

    staging_dir = tmp_path / "stage"
    staging_dir.mkdir()
    (staging_dir / "thesis.tex").write_text("tex")
    (staging_dir / "thesis.pdf").write_text("pdf")
    (staging_dir / "thesis.synctex.gz").write_text("synctex")
    (staging_dir / "refs.bib").symlink_to(source / "refs.bib")
    cache = staging_dir / "pythontex-files-thesis"
    cache.mkdir()
    (cache / "out.stdout").write_text("42")
    return staging_dir


@pytest.mark.unit
def test_publishable_entries_exclude_documents_and_links(staged):
    names = [entry.name for entry in publishable_entries(staged)]

    assert names == ["pythontex-files-thesis", "thesis.pdf", "thesis.synctex.gz"]


@pytest.mark.unit
def test_publish_copies_products_recursively(staged, tmp_path):
    output_dir = tmp_path / "out"

    published = publish(staged, output_dir)

    assert published == ["pythontex-files-thesis", "thesis.pdf", "thesis.synctex.gz"]
    assert (output_dir / "thesis.pdf").read_text() == "pdf"
    assert (output_dir / "pythontex-files-thesis" / "out.stdout").read_text() == "42"
    assert not (output_dir / "thesis.tex").exists()
    assert not (output_dir / "refs.bib").exists()


@pytest.mark.unit
def test_publish_overwrite_clears_stale_output(staged, tmp_path):
    output_dir = tmp_path / "out"
    output_dir.mkdir()
    (output_dir / "old.pdf").write_text("old")
    (output_dir / "thesis.pdf").write_text("previous build")
    old_dir = output_dir / "old-cache"
    old_dir.mkdir()
    (old_dir / "x").write_text("x")

    publish(staged, output_dir, overwrite=True)

    assert sorted(p.name for p in output_dir.iterdir()) == [
        "pythontex-files-thesis",
        "thesis.pdf",
        "thesis.synctex.gz",
    ]
    assert (output_dir / "thesis.pdf").read_text() == "pdf"


@pytest.mark.unit
def test_publish_without_overwrite_keeps_existing_entries(staged, tmp_path):
    output_dir = tmp_path / "out"
    output_dir.mkdir()
    (output_dir / "thesis.pdf").write_text("last good build")
    (output_dir / "notes.txt").write_text("keep me")

    published = publish(staged, output_dir, overwrite=False)

    assert "thesis.pdf" not in published
    assert (output_dir / "thesis.pdf").read_text() == "last good build"
    assert (output_dir / "notes.txt").exists()
    assert (output_dir / "thesis.synctex.gz").exists()


@pytest.mark.unit
def test_recover_partial_output_adds_only_missing(staged, tmp_path):
    output_dir = tmp_path / "out"
    output_dir.mkdir()
    (output_dir / "thesis.pdf").write_text("last good build")

    recovered = recover_partial_output(staged, output_dir)

    assert recovered == ["pythontex-files-thesis", "thesis.synctex.gz"]
    assert (output_dir / "thesis.pdf").read_text() == "last good build"


@pytest.mark.unit
def test_recover_partial_output_swallows_copy_failures(staged, tmp_path):
    # A regular file where the output directory should be
    output_dir = tmp_path / "out"
    output_dir.write_text("not a directory")

    assert recover_partial_output(staged, output_dir) == []
    assert output_dir.read_text() == "not a directory"
