"""
Tests for the workspace guard and cleanup manager.

The guard must refuse a run before anything is written if any target
file exists, and must never touch that file. Cleanup removes exactly the
run's file set.
"""

import os
from pathlib import Path

import pytest

from cliquetop.errors import CleanupError, FileCollisionError, Stage
from cliquetop.workspace import Workspace, WorkspaceFiles


@pytest.fixture
def files(make_config):
    return WorkspaceFiles.from_config(make_config(max_betti_number=2, file_prefix='run1'))


def _touch_all(files):
    for path in files.all_files():
        path.write_text('x')


# ─────────────────────────────────────────────────────────────────────
# Tests: file set
# ─────────────────────────────────────────────────────────────────────

class TestWorkspaceFiles:

    def test_names(self, files, work_dir):
        names = [p.name for p in files.all_files()]
        assert names == [
            'run1_max_simplices.txt',
            'run1_simplices.txt',
            'run1_homology_betti.txt',
            'run1_homology_0.txt',
            'run1_homology_1.txt',
            'run1_homology_2.txt',
            'run1_homology_3.txt',
        ]
        assert all(p.parent == work_dir.resolve() for p in files.all_files())

    def test_interval_files_cover_max_betti_plus_one(self, make_config):
        files = WorkspaceFiles.from_config(make_config(max_betti_number=4))
        assert files.max_dimension == 5
        assert files.all_files()[-1].name == 'matrix_homology_5.txt'

    def test_paths_absolute(self, files):
        assert all(p.is_absolute() for p in files.all_files())
        assert files.lock.name == 'run1.lock'
        assert files.lock not in files.all_files()

    def test_homology_prefix(self, files):
        assert files.homology_prefix == 'run1_homology'
        assert files.betti.name == f'{files.homology_prefix}_betti.txt'


# ─────────────────────────────────────────────────────────────────────
# Tests: guard
# ─────────────────────────────────────────────────────────────────────

class TestClaim:

    def test_clean_directory(self, files):
        workspace = Workspace(files)
        with workspace.claim() as claimed:
            assert claimed is workspace
            assert workspace.claimed
            assert files.lock.exists()
        assert not workspace.claimed
        assert not files.lock.exists()

    def test_does_not_change_cwd(self, files):
        before = os.getcwd()
        with Workspace(files).claim():
            assert os.getcwd() == before

    @pytest.mark.parametrize("index", range(7))
    def test_any_existing_target_rejected(self, files, index):
        target = files.all_files()[index]
        target.write_text('previous run, do not touch')

        with pytest.raises(FileCollisionError) as exc:
            with Workspace(files).claim():
                pytest.fail("claim should have been refused")

        assert exc.value.path == target
        assert exc.value.stage == Stage.GUARD
        assert target.read_text() == 'previous run, do not touch'
        assert not files.lock.exists()

    def test_first_collision_named(self, files):
        files.betti.write_text('')
        files.intervals(3).write_text('')
        with pytest.raises(FileCollisionError) as exc:
            with Workspace(files).claim():
                pass
        assert exc.value.path == files.betti
        assert 'run1_homology_betti.txt' in str(exc.value)

    def test_empty_file_still_collides(self, files):
        files.simplices.touch()
        with pytest.raises(FileCollisionError):
            with Workspace(files).claim():
                pass

    def test_concurrent_claim_refused(self, files):
        with Workspace(files).claim():
            with pytest.raises(FileCollisionError) as exc:
                with Workspace(files).claim():
                    pass
            assert exc.value.path == files.lock
        assert not files.lock.exists()

    def test_other_prefix_independent(self, files, make_config):
        other = WorkspaceFiles.from_config(make_config(max_betti_number=2, file_prefix='run2'))
        with Workspace(files).claim():
            with Workspace(other).claim():
                pass

    def test_lock_released_on_failure(self, files):
        with pytest.raises(RuntimeError):
            with Workspace(files).claim():
                raise RuntimeError("stage failed")
        assert not files.lock.exists()

    def test_collision_is_file_exists_error(self, files):
        files.simplices.touch()
        with pytest.raises(FileExistsError):
            Workspace(files).check_collisions()


# ─────────────────────────────────────────────────────────────────────
# Tests: cleanup
# ─────────────────────────────────────────────────────────────────────

class TestRemoveFiles:

    def test_removes_exactly_the_file_set(self, files, work_dir):
        _touch_all(files)
        unrelated = [work_dir / 'notes.txt', work_dir / 'run2_simplices.txt',
                     work_dir / 'run1_homology_9.txt']
        for path in unrelated:
            path.write_text('keep')

        removed = Workspace(files).remove_files()

        assert sorted(removed) == sorted(files.all_files())
        assert sorted(work_dir.iterdir()) == sorted(unrelated)

    def test_tolerates_partial_production(self, files):
        files.simplices.write_text('x')
        files.intervals(0).write_text('x')
        removed = Workspace(files).remove_files()
        assert removed == [files.simplices, files.intervals(0)]
        assert files.existing_files() == []

    def test_nothing_to_remove(self, files):
        assert Workspace(files).remove_files() == []

    def test_failure_reported_after_all_attempts(self, files, monkeypatch):
        _touch_all(files)
        original_unlink = Path.unlink

        def flaky_unlink(self, *args, **kwargs):
            if self.name == 'run1_homology_betti.txt':
                raise PermissionError(13, 'Permission denied', str(self))
            return original_unlink(self, *args, **kwargs)

        monkeypatch.setattr(Path, 'unlink', flaky_unlink)

        with pytest.raises(CleanupError) as exc:
            Workspace(files).remove_files()

        assert exc.value.stage == Stage.CLEANUP
        assert [p for p, _ in exc.value.failures] == [files.betti]
        assert isinstance(exc.value.__cause__, PermissionError)
        assert files.existing_files() == [files.betti]
