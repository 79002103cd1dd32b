"""Unit tests for BuildRootLock."""

import json
import os
import subprocess
import sys
import threading

import pytest

from ybuild.build import BuildRootLock, LockOwner
from ybuild.errors import BuildLockError


@pytest.fixture
def lock_path(tmp_path):
    return tmp_path / "build" / ".debug-gcc-dynamic.lock"


class TestBuildRootLock:
    """Test cases for BuildRootLock."""

    def test_for_build_root_lives_beside_build_root(self, tmp_path):
        lock = BuildRootLock.for_build_root(tmp_path / "build" / "release-gcc-dynamic")
        assert lock.lock_path == tmp_path / "build" / ".release-gcc-dynamic.lock"
        assert lock.owner_path == tmp_path / "build" / ".release-gcc-dynamic.lock.owner"

    def test_acquire_and_release(self, lock_path):
        """Test that the owner is recorded while held and removed on release."""
        lock = BuildRootLock(lock_path, argv=["release"])
        lock.acquire()

        assert lock.held
        owner = lock.read_owner()
        assert owner.pid == os.getpid()
        assert owner.argv == ["release"]

        lock.release()
        assert not lock.held
        assert not lock.owner_path.exists()

    def test_context_manager(self, lock_path):
        with BuildRootLock(lock_path) as lock:
            assert lock.held
        assert not lock.held
        assert lock.read_owner() is None

    def test_second_acquirer_is_rejected(self, lock_path):
        """Test that a held lock fails another acquirer immediately."""
        holder = BuildRootLock(lock_path, argv=["release"])
        holder.acquire()
        try:
            with pytest.raises(BuildLockError, match=f"pid {os.getpid()}"):
                BuildRootLock(lock_path).acquire()
        finally:
            holder.release()

    def test_lock_freed_after_release(self, lock_path):
        first = BuildRootLock(lock_path)
        first.acquire()
        first.release()

        second = BuildRootLock(lock_path)
        second.acquire()
        assert second.held
        second.release()

    def test_missing_owner_file_still_blocks(self, lock_path):
        """Test that a holder which has not written its owner file yet is still respected."""
        holder = BuildRootLock(lock_path)
        holder.acquire()
        holder.owner_path.unlink()
        try:
            with pytest.raises(BuildLockError, match="another ybuild invocation"):
                BuildRootLock(lock_path).acquire()
        finally:
            holder.release()

    def test_unreadable_owner_file_still_blocks(self, lock_path):
        holder = BuildRootLock(lock_path)
        holder.acquire()
        holder.owner_path.write_text("")
        try:
            with pytest.raises(BuildLockError):
                BuildRootLock(lock_path).acquire()
        finally:
            holder.release()

    def test_concurrent_acquirers_exactly_one_wins(self, lock_path):
        """Test that acquirers racing on the same path never both hold the lock."""
        lock_path.parent.mkdir(parents=True)
        locks = [BuildRootLock(lock_path) for _ in range(8)]
        barrier = threading.Barrier(len(locks))
        failures = []

        def contend(lock):
            barrier.wait()
            try:
                lock.acquire()
            except BuildLockError:
                failures.append(lock)

        threads = [threading.Thread(target=contend, args=(lock,)) for lock in locks]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        winners = [lock for lock in locks if lock.held]
        assert len(winners) == 1
        assert len(failures) == len(locks) - 1
        winners[0].release()

    def test_lock_held_by_other_process(self, lock_path):
        """Test that a lock held by another process blocks, and is freed when it exits."""
        lock_path.parent.mkdir(parents=True)
        code = (
            "import sys, filelock\n"
            "lock = filelock.FileLock(sys.argv[1])\n"
            "lock.acquire()\n"
            "print('locked', flush=True)\n"
            "sys.stdin.read()\n"
        )
        child = subprocess.Popen(
            [sys.executable, "-c", code, str(lock_path)],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            text=True,
        )
        try:
            assert child.stdout.readline().strip() == "locked"
            with pytest.raises(BuildLockError):
                BuildRootLock(lock_path).acquire()
        finally:
            child.stdin.close()
            child.wait(timeout=10)
            child.stdout.close()

        lock = BuildRootLock(lock_path)
        lock.acquire()
        assert lock.held
        lock.release()


class TestLockOwner:
    """Test cases for LockOwner serialization."""

    def test_from_dict_defaults_argv(self):
        owner = LockOwner.from_dict({"pid": "12", "hostname": "devbox", "started_at": 1.5})
        assert owner == LockOwner(pid=12, hostname="devbox", started_at=1.5, argv=[])

    def test_round_trip_through_owner_file(self, lock_path):
        with BuildRootLock(lock_path, argv=["--clean"]) as lock:
            data = json.loads(lock.owner_path.read_text())
        assert data["argv"] == ["--clean"]
