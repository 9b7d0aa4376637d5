import random

import pytest

from nethermind.contractkit import Contract
from tests.utils import (
    ADDRESS_STORAGE_ABI,
    ADDRESS_STORAGE_BYTECODE,
    NUMBER_STORAGE_ABI,
    NUMBER_STORAGE_BYTECODE,
    AddressStorage,
    FakeLedger,
    NumberStorage,
)


@pytest.fixture(name="random_address")
def fixture_random_address():
    def _generate_random_address():
        return random.randbytes(20).hex().upper()

    return _generate_random_address


@pytest.fixture(name="ledger")
def fixture_ledger() -> FakeLedger:
    ledger = FakeLedger()
    ledger.register(ADDRESS_STORAGE_BYTECODE, AddressStorage)
    ledger.register(NUMBER_STORAGE_BYTECODE, NumberStorage)
    return ledger


@pytest.fixture(name="address_storage")
def fixture_address_storage(ledger) -> Contract:
    return Contract(ADDRESS_STORAGE_ABI, ledger, bytecode=ADDRESS_STORAGE_BYTECODE)


@pytest.fixture(name="number_storage")
def fixture_number_storage(ledger) -> Contract:
    return Contract(NUMBER_STORAGE_ABI, ledger, bytecode=NUMBER_STORAGE_BYTECODE)
