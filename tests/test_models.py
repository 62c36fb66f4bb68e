"""Tests for pipeline records."""

from __future__ import annotations

from sourcelink.models import Project, Reflection, SourceFile, SourceReference


def test_file_for_matches_normalized_paths() -> None:
    source = SourceFile(full_path="/work/bar/src/index.ts")
    project = Project(files=[source])

    assert project.file_for("/work/bar/src/../src//index.ts") is source
    assert project.file_for("/work/bar/src/other.ts") is None


def test_iter_references_flattens_reflections() -> None:
    source = SourceFile(full_path="/a.ts")
    first = SourceReference(file=source, line=1)
    second = SourceReference(file=source, line=2)
    project = Project(
        files=[source],
        reflections=[Reflection(name="a", sources=[first]), Reflection(name="b", sources=[second])],
    )

    assert list(project.iter_references()) == [first, second]
