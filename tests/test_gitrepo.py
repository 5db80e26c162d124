import pytest

from appimage_helpers.gitrepo import NotAGitRepositoryError, find_git_repository


def test_finds_repository_root_from_subdirectory(tmp_path):
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    sub = repo / "a" / "b"
    sub.mkdir(parents=True)
    assert find_git_repository(sub) == repo


def test_finds_repository_at_root(tmp_path):
    (tmp_path / ".git").mkdir()
    assert find_git_repository(tmp_path) == tmp_path


def test_git_file_counts(tmp_path):
    (tmp_path / ".git").write_text("gitdir: elsewhere\n")
    sub = tmp_path / "x"
    sub.mkdir()
    assert find_git_repository(sub) == tmp_path


def test_defaults_to_cwd(tmp_path, monkeypatch):
    (tmp_path / ".git").mkdir()
    sub = tmp_path / "inner"
    sub.mkdir()
    monkeypatch.chdir(sub)
    assert find_git_repository() == tmp_path


def test_nearest_repository_wins(tmp_path):
    (tmp_path / ".git").mkdir()
    inner = tmp_path / "nested"
    (inner / ".git").mkdir(parents=True)
    assert find_git_repository(inner / ".git" / "..") == inner or find_git_repository(inner) == inner
    assert find_git_repository(inner) == inner


def test_not_a_repository(tmp_path, monkeypatch):
    import os

    real_lexists = os.path.lexists

    def no_git_outside(path):
        if path.endswith(".git"):
            return False
        return real_lexists(path)

    monkeypatch.setattr(os.path, "lexists", no_git_outside)
    with pytest.raises(NotAGitRepositoryError, match="Could not open repository"):
        find_git_repository(tmp_path)