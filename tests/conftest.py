from datetime import datetime

import pytest

from tablepos.database import PosDatabase
from tablepos.models import MenuItem
from tablepos.order_ids import OrderIdGenerator
from tablepos.persistence import MemoryKeyValueStore
from tablepos.tables import TableStateMachine

FIXED_NOW = datetime(2024, 12, 15, 14, 30, 25)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def database(store):
    db = PosDatabase(store)
    db.update_settings({"taxRate": 8.5, "serviceCharge": 10, "serviceChargeEnabled": False})
    return db


@pytest.fixture
def order_ids(clock):
    return OrderIdGenerator(clock=clock)


@pytest.fixture
def machine(database, order_ids, clock):
    return TableStateMachine(database, order_ids=order_ids, clock=clock)


@pytest.fixture
def mohinga():
    return MenuItem(id="1", name="Mohinga", price=2500, category="Appetizers")


@pytest.fixture
def beer():
    return MenuItem(id="6", name="Myanmar Beer", price=1200, category="Beverage")
