import pytest
from storefront.cart.cart import CartStore
from storefront.cart.storage import MemoryStorage
from storefront.errors import PersistenceFailure
from storefront.notifications import RecordingNotifier


class FailingStorage(MemoryStorage):
    """Storage whose writes (and optionally reads) always fail."""

    def __init__(self, initial=None, fail_reads=False):
        super().__init__(initial)
        self.fail_reads = fail_reads
        self.write_attempts = 0

    def get(self, key):
        if self.fail_reads:
            raise PersistenceFailure("disk unavailable")
        return super().get(key)

    def set(self, key, value):
        self.write_attempts += 1
        raise PersistenceFailure("disk full")


@pytest.fixture()
def storage():
    return MemoryStorage()


@pytest.fixture()
def failing_storage():
    return FailingStorage()


@pytest.fixture()
def unreadable_storage():
    return FailingStorage(fail_reads=True)


@pytest.fixture()
def cart_store(storage):
    store = CartStore(storage)
    store.load()
    yield store
    store.dispose()


@pytest.fixture()
def notifier():
    return RecordingNotifier()
