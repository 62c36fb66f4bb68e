"""End-to-end linking against a real git checkout."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from sourcelink.git.query import GitQuery
from sourcelink.linker import SourceLinker
from sourcelink.models import Project, Reflection, SourceFile, SourceReference
from sourcelink.repository import RepositoryFactory
from sourcelink.resolver import PathResolver

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(repo: Path, *args: str) -> str:
    env = os.environ.copy()
    env.setdefault("GIT_AUTHOR_NAME", "sourcelink")
    env.setdefault("GIT_AUTHOR_EMAIL", "sourcelink@example.com")
    env.setdefault("GIT_COMMITTER_NAME", env["GIT_AUTHOR_NAME"])
    env.setdefault("GIT_COMMITTER_EMAIL", env["GIT_AUTHOR_EMAIL"])
    completed = subprocess.run(
        ["git", "-c", "init.defaultBranch=main", "-c", "commit.gpgsign=false", *args],
        cwd=str(repo),
        env=env,
        check=True,
        text=True,
        capture_output=True,
    )
    return completed.stdout


def _init_repo(root: Path, files: dict[str, str]) -> str:
    root.mkdir(parents=True, exist_ok=True)
    _git(root, "init", "-q")
    _git(root, "remote", "add", "origin", "git@github.com:foo/bar.git")
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    _git(root, "add", "-A")
    _git(root, "commit", "-q", "-m", "initial")
    return _git(root, "rev-parse", "--short", "HEAD").strip()


def test_link_against_real_checkout(workspace: Path) -> None:
    repo = workspace / "bar"
    revision = _init_repo(repo, {"src/index.ts": "export {}\n", "README.md": "# bar\n"})
    (repo / "src" / "scratch.ts").write_text("\n", encoding="utf-8")
    (workspace / "build").mkdir()
    index = SourceFile(full_path=f"{repo}/src/index.ts")
    scratch = SourceFile(full_path=f"{repo}/src/scratch.ts")
    output = SourceFile(full_path=f"{workspace}/build/out.js")
    reference = SourceReference(file=index, line=3)
    project = Project(
        files=[index, scratch, output],
        reflections=[Reflection(name="main", sources=[reference])],
    )

    summary = SourceLinker().link(project)

    base = f"https://github.com/foo/bar/blob/{revision}"
    assert index.url == f"{base}/src/index.ts"
    assert reference.url == f"{base}/src/index.ts#L3"
    assert scratch.url is None
    assert output.url is None
    assert summary.repositories == [str(repo)]


def test_discovery_from_subdirectory_normalizes_tracked_files(workspace: Path) -> None:
    repo = workspace / "bar"
    revision = _init_repo(repo, {"src/lib/util.ts": "\n", "top.ts": "\n"})

    repository = RepositoryFactory(GitQuery()).try_discover(repo / "src" / "lib")

    assert repository is not None
    assert repository.root == str(repo)
    assert repository.revision == revision
    assert (repository.host_user, repository.host_project) == ("foo", "bar")
    assert repository.tracked_files == frozenset({f"{repo}/src/lib/util.ts", f"{repo}/top.ts"})


@pytest.mark.skipif(
    not sys.platform.startswith("linux") or sys.getfilesystemencoding().lower() != "utf-8",
    reason="needs a filesystem that accepts arbitrary bytes in names",
)
def test_non_utf8_file_name_does_not_break_linking(workspace: Path) -> None:
    repo = workspace / "bar"
    repo.mkdir()
    odd_name = os.fsdecode(b"caf\xe9.ts")
    with open(os.fsencode(repo) + b"/caf\xe9.ts", "wb") as handle:
        handle.write(b"\n")
    revision = _init_repo(repo, {"a.ts": "\n"})
    plain = SourceFile(full_path=f"{repo}/a.ts")
    odd = SourceFile(full_path=f"{repo}/{odd_name}")

    SourceLinker().link(Project(files=[plain, odd]))

    base = f"https://github.com/foo/bar/blob/{revision}"
    assert plain.url == f"{base}/a.ts"
    assert odd.url == f"{base}/{odd_name}"


@pytest.mark.skipif(sys.platform.startswith("win"), reason="symlinks need extra privileges")
def test_checkout_reached_through_symlink_is_discovered_once(workspace: Path) -> None:
    repo = workspace / "bar"
    _init_repo(repo, {"src/a.ts": "\n", "src/b.ts": "\n"})
    link = workspace / "link"
    link.symlink_to(repo, target_is_directory=True)
    calls: list[list[str]] = []

    def counting_runner(args, *, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        calls.append(list(args))
        return GitQuery._default_runner(args, cwd=cwd, capture_output=capture_output)

    resolver = PathResolver(RepositoryFactory(GitQuery(counting_runner)))

    first = resolver.resolve(f"{link}/src/a.ts")
    second = resolver.resolve(f"{link}/src/b.ts")

    assert first is not None
    assert first is second
    assert first.root == str(repo)
    assert sum("--show-toplevel" in args for args in calls) == 1
    assert list(resolver.aliased_directories) == [f"{link}/src"]
