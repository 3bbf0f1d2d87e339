import os

import pytest

from data_store import BUSES, STUDENTS, TICKETS, FileRosterStore, MemoryRosterStore
from tests.conftest import make_bus, make_ticket


@pytest.fixture
def file_store(tmp_path):
    return FileRosterStore(str(tmp_path / 'data'))


def test_files_are_created_empty(file_store):
    for name in ('buses.json', 'students.json', 'temp_tickets.json'):
        path = os.path.join(file_store.data_dir, name)
        with open(path) as f:
            assert f.read() == '[]'
    assert file_store.get(BUSES) == []


def test_put_then_get(file_store):
    buses = [make_bus(2, 'South'), make_bus(1, 'North')]
    file_store.put(BUSES, buses)
    assert file_store.get(BUSES) == buses

    file_store.put(TICKETS, [make_ticket('T1', 1, 1)])
    with open(file_store.path_for(TICKETS)) as f:
        assert '"T1"' in f.read()


def test_unreadable_files_read_as_empty(file_store):
    with open(file_store.path_for(STUDENTS), 'w') as f:
        f.write('{not json')
    assert file_store.get(STUDENTS) == []

    with open(file_store.path_for(STUDENTS), 'w') as f:
        f.write('   ')
    assert file_store.get(STUDENTS) == []

    with open(file_store.path_for(STUDENTS), 'w') as f:
        f.write('{"a": 1}')
    assert file_store.get(STUDENTS) == []

    os.remove(file_store.path_for(BUSES))
    assert file_store.get(BUSES) == []


def test_no_temp_files_left_behind(file_store):
    file_store.put(BUSES, [make_bus(1, 'North')])
    assert not [n for n in os.listdir(file_store.data_dir) if n.endswith('.tmp')]


def test_unknown_collection(file_store):
    with pytest.raises(KeyError):
        file_store.get('drivers')
    with pytest.raises(KeyError):
        MemoryRosterStore().put('drivers', [])


def test_memory_store_hands_out_copies():
    store = MemoryRosterStore(buses=[make_bus(1, 'North')])
    buses = store.get(BUSES)
    buses[0]['route'] = 'Changed'
    assert store.get(BUSES)[0]['route'] == 'North'
    assert store.writes == 0
