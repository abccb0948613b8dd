"""Tests for RepositoryEngine commit, branch and merge operations."""

import threading

import pytest

from codebird.core.engine import RepositoryEngine
from codebird.core.errors import (
    BranchAlreadyExists,
    BranchNotFound,
    MergeConflict,
    NoFilesModified,
)
from codebird.models import RepositoryState


@pytest.fixture
def engine():
    """Create an engine over a fresh repository state."""
    return RepositoryEngine(RepositoryState.new())


def branch_len(engine, name):
    return len(engine.state.store.commits_of(name))


class TestCommit:
    def test_commit_single_file(self, engine):
        commit = engine.commit(["a.txt"])

        assert branch_len(engine, "main") == 1
        assert engine.history() == (commit,)
        assert "a.txt" in commit.change_description
        assert commit.branch_name == "main"

    def test_commit_message_and_description(self, engine):
        commit = engine.commit(["a.txt", "b.txt", "c.txt"])

        assert commit.message == "Modified files: a.txt b.txt c.txt"
        assert commit.change_description == "Modified a.txt, b.txt, c.txt"

    def test_commit_empty_fails(self, engine):
        engine.commit(["a.txt"])

        with pytest.raises(NoFilesModified):
            engine.commit([])

        assert branch_len(engine, "main") == 1

    def test_commit_binds_active_branch(self, engine):
        engine.create_branch("feature")
        engine.switch_branch("feature")
        commit = engine.commit(["f.txt"])

        assert commit.branch_name == "feature"
        assert branch_len(engine, "feature") == 1
        assert branch_len(engine, "main") == 0

    def test_commit_does_not_track_files(self, engine):
        engine.commit(["a.txt"])
        assert engine.tracked_files() == []


class TestBranches:
    def test_create_and_list(self, engine):
        engine.create_branch("feature")
        engine.create_branch("bugfix")

        assert engine.branches() == ["main", "feature", "bugfix"]
        assert engine.status() == "main"

    def test_create_duplicate(self, engine):
        engine.create_branch("feature")
        with pytest.raises(BranchAlreadyExists):
            engine.create_branch("feature")
        assert engine.branches() == ["main", "feature"]

    def test_switch(self, engine):
        engine.create_branch("feature")
        engine.switch_branch("feature")
        assert engine.status() == "feature"
        assert engine.current_branch == "feature"

    def test_switch_missing(self, engine):
        with pytest.raises(BranchNotFound):
            engine.switch_branch("nope")
        assert engine.status() == "main"

    def test_new_branch_starts_empty(self, engine):
        engine.commit(["a.txt"])
        engine.create_branch("feature")
        engine.switch_branch("feature")
        assert engine.history() == ()


def test_add_file_idempotent(engine):
    assert engine.add_file("a.txt") is True
    assert engine.add_file("b.txt") is True
    assert engine.add_file("a.txt") is False
    assert engine.tracked_files() == ["a.txt", "b.txt"]


class TestMerge:
    def test_merge_missing_branch(self, engine):
        engine.commit(["a.txt"])
        with pytest.raises(BranchNotFound):
            engine.merge("nope")
        assert branch_len(engine, "main") == 1

    def test_merge_append_law(self, engine):
        """Merging n commits into m commits yields m+n, source untouched."""
        engine.create_branch("feature")
        engine.switch_branch("feature")
        feature_commits = [engine.commit([f"f{i}.txt"]) for i in range(2)]

        engine.switch_branch("main")
        main_commits = [engine.commit([f"m{i}.txt"]) for i in range(3)]

        merged = engine.merge("feature")

        assert merged == feature_commits
        main_after = list(engine.state.store.commits_of("main"))
        assert len(main_after) == 5
        assert main_after[:3] == main_commits
        assert main_after[3:] == feature_commits
        assert list(engine.state.store.commits_of("feature")) == feature_commits

    def test_merged_commits_keep_branch_name(self, engine):
        engine.create_branch("feature")
        engine.switch_branch("feature")
        engine.commit(["f.txt"])
        engine.switch_branch("main")
        engine.merge("feature")

        assert engine.history()[-1].branch_name == "feature"

    def test_conflict_leaves_both_branches_unchanged(self, engine):
        engine.add_file("a.txt")
        engine.add_file("notes.md")
        engine.commit(["a.txt"])
        engine.create_branch("feature")
        engine.switch_branch("feature")
        engine.commit(["a.txt"])
        engine.commit(["b.txt"])

        for current, other in [("feature", "main"), ("main", "feature")]:
            engine.switch_branch(current)
            with pytest.raises(MergeConflict) as exc_info:
                engine.merge(other)

            assert exc_info.value.current_branch == current
            assert exc_info.value.target_branch == other
            assert exc_info.value.files == ["a.txt", "notes.md"]
            assert branch_len(engine, "main") == 1
            assert branch_len(engine, "feature") == 2

    def test_conflict_reports_all_tracked_files(self, engine):
        engine.add_file("unrelated.txt")
        engine.commit(["x.txt"])
        engine.create_branch("feature")
        engine.switch_branch("feature")
        engine.commit(["x.txt"])

        with pytest.raises(MergeConflict) as exc_info:
            engine.merge("main")

        assert exc_info.value.files == ["unrelated.txt"]

    def test_merge_is_not_symmetric(self, engine):
        engine.create_branch("feature")
        engine.switch_branch("feature")
        engine.commit(["f.txt"])
        engine.switch_branch("main")
        engine.commit(["m.txt"])

        engine.merge("feature")

        assert branch_len(engine, "main") == 2
        assert branch_len(engine, "feature") == 1

    def test_merge_empty_branch(self, engine):
        engine.commit(["a.txt"])
        engine.create_branch("empty")

        assert engine.merge("empty") == []
        assert branch_len(engine, "main") == 1

    def test_merge_into_self(self, engine):
        assert engine.merge("main") == []

        engine.commit(["a.txt"])
        with pytest.raises(MergeConflict):
            engine.merge("main")
        assert branch_len(engine, "main") == 1

    def test_merge_twice_conflicts(self, engine):
        engine.create_branch("feature")
        engine.switch_branch("feature")
        engine.commit(["f.txt"])
        engine.switch_branch("main")

        engine.merge("feature")
        with pytest.raises(MergeConflict):
            engine.merge("feature")
        assert branch_len(engine, "main") == 1


def test_end_to_end_feature_merge(engine):
    """Test the feature branch workflow from branch creation to merge."""
    engine.create_branch("feature")
    engine.switch_branch("feature")
    f_commit = engine.commit(["f.txt"])
    engine.switch_branch("main")
    m_commit = engine.commit(["m.txt"])

    engine.merge("feature")

    assert list(engine.history()) == [m_commit, f_commit]


def test_concurrent_commits_are_serialized(engine):
    """Test that commits from several threads all land on the branch."""

    def worker(n):
        for i in range(20):
            engine.commit([f"t{n}-{i}.txt"])

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert branch_len(engine, "main") == 80


def test_commit_rejects_bare_string(engine):
    with pytest.raises(TypeError):
        engine.commit("a.txt")
    assert branch_len(engine, "main") == 0


def test_commit_accepts_tuple(engine):
    commit = engine.commit(("a.txt", "b.txt"))
    assert commit.change_description == "Modified a.txt, b.txt"


def test_branch_counts(engine):
    engine.commit(["a.txt"])
    engine.create_branch("feature")

    assert engine.branch_counts() == [("main", 1), ("feature", 0)]


def test_status_tracks_switches(engine):
    engine.create_branch("feature")
    engine.switch_branch("feature")
    assert engine.status() == "feature"
