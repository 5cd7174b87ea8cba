"""Row lock ordering and timeouts."""

import threading

import pytest
from relief.errors import Busy
from relief.locking import get_registry, hold, lock_timeout


class TestHold:
    def test_keys_are_sorted_and_deduplicated(self):
        with hold(["shelter:s1:Rice", "provincial:provincial:Rice", "shelter:s1:Rice"]) as keys:
            assert keys == ["provincial:provincial:Rice", "shelter:s1:Rice"]
            assert get_registry().is_locked("shelter:s1:Rice")
        assert not get_registry().is_locked("shelter:s1:Rice")

    def test_times_out_with_busy(self):
        with hold(["row-a"]):
            with pytest.raises(Busy) as exc:
                with hold(["row-a"], timeout=0.05):
                    pass
        assert exc.value.keys == ["row-a"]
        assert not get_registry().is_locked("row-a")

    def test_partial_acquisition_is_released_on_timeout(self):
        with hold(["row-b"]):
            with pytest.raises(Busy):
                with hold(["row-a", "row-b"], timeout=0.05):
                    pass
            assert not get_registry().is_locked("row-a")

    def test_released_on_exception(self):
        with pytest.raises(RuntimeError):
            with hold(["row-c"]):
                raise RuntimeError("boom")
        assert not get_registry().is_locked("row-c")

    def test_waiter_proceeds_after_release(self):
        entered = threading.Event()
        release = threading.Event()
        order = []

        def holder():
            with hold(["row-d"]):
                entered.set()
                release.wait(1)
                order.append("holder")

        thread = threading.Thread(target=holder)
        thread.start()
        entered.wait(1)
        release.set()
        with hold(["row-d"], timeout=1):
            order.append("waiter")
        thread.join()
        assert order == ["holder", "waiter"]


class TestLockTimeout:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("RELIEF_LOCK_TIMEOUT", raising=False)
        assert lock_timeout() == 5.0

    def test_override(self, monkeypatch):
        monkeypatch.setenv("RELIEF_LOCK_TIMEOUT", "0.25")
        assert lock_timeout() == 0.25
