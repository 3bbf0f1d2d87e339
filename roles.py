"""
Role derivation from a university ID.
"""

ROLE_STUDENT = 'student'
ROLE_FACULTY = 'faculty'
ROLE_CONDUCTOR = 'conductor'
ROLE_MTO = 'mto'
ROLE_INCHARGE = 'incharge'
ROLE_UNKNOWN = 'unknown'

ROLES = (ROLE_STUDENT, ROLE_FACULTY, ROLE_CONDUCTOR, ROLE_MTO, ROLE_INCHARGE)

# First letter of the ID -> role (S101, F123, C001, mto-1, inc-1)
PREFIX_ROLES = {
    's': ROLE_STUDENT,
    'f': ROLE_FACULTY,
    'c': ROLE_CONDUCTOR,
    'm': ROLE_MTO,
    'i': ROLE_INCHARGE,
}


def role_for_id(raw_id):
    """Role for an ID string; anything unrecognised maps to ROLE_UNKNOWN"""
    value = str(raw_id or '').strip().lower()
    if not value:
        return ROLE_UNKNOWN
    return PREFIX_ROLES.get(value[0], ROLE_UNKNOWN)
