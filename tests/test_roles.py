import pytest

from models import Actor
from roles import ROLE_CONDUCTOR, ROLE_FACULTY, ROLE_INCHARGE, ROLE_MTO, ROLE_STUDENT, ROLE_UNKNOWN, role_for_id


@pytest.mark.parametrize('raw_id, role', [
    ('S101', ROLE_STUDENT),
    ('f123', ROLE_FACULTY),
    (' C001 ', ROLE_CONDUCTOR),
    ('mto-1', ROLE_MTO),
    ('INC-1', ROLE_INCHARGE),
    ('X1', ROLE_UNKNOWN),
    ('', ROLE_UNKNOWN),
    (None, ROLE_UNKNOWN),
])
def test_role_for_id(raw_id, role):
    assert role_for_id(raw_id) == role


def test_actor_from_id():
    actor = Actor.from_id(' C001 ')
    assert actor.id == 'C001'
    assert actor.role == ROLE_CONDUCTOR
    assert actor.get_id() == 'C001'
    assert Actor.from_id('42') is None
