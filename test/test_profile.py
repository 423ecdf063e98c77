# Copyright 2019 Joan Puig
# See LICENSE for details


import pytest

from FITInspector import duplicates
from FITInspector.profile import DEFAULT_PROFILE, PROFILE_TABLE, Profile, ProfileContentError, ProfileContentWarning


def test_duplicates():
    assert not duplicates(())
    assert not duplicates([0, 1, 2])
    assert duplicates([1, 1, 2]) == {1}
    assert duplicates([1, 1, 2, 3, 3]) == {1, 3}


def test_non_fatal_error():
    with pytest.warns(ProfileContentWarning):
        Profile._non_fatal_error('err', False)

    with pytest.raises(ProfileContentError):
        Profile._non_fatal_error('err', True)


def test_parse_field():
    with pytest.raises(ProfileContentError):
        Profile._parse_field(['', '', 1, 'name', 'uint8'], 'msg')

    with pytest.raises(ProfileContentError):
        Profile._parse_field(['', '', 'x', 'name', 'uint8', '', '', ''], 'msg')

    with pytest.raises(ProfileContentError):
        Profile._parse_field(['', '', 1, '', 'uint8', '', '', ''], 'msg')

    with pytest.raises(ProfileContentError):
        Profile._parse_field(['', '', 1, 'name', '', '', '', ''], 'msg')

    field = Profile._parse_field(['', '', 2, 'altitude', 'uint16', 5, 500, 'm'], 'record')
    assert field.number == 2
    assert field.name == 'altitude'
    assert field.type == 'uint16'
    assert field.scale == 5
    assert field.offset == 500
    assert field.units == 'm'

    field = Profile._parse_field(['', '', 3, 'heart_rate', 'uint8', '', '', 'bpm'], 'record')
    assert field.scale is None
    assert field.offset is None


def test_from_table():
    tt = [
        ['MSG_1', 1, '', '', '', '', '', ''],
        ['', '', 0, 'FIELD_1', 'uint8', '', '', ''],
        ['', '', 1, 'FIELD_2', 'uint16', 10, '', 'm'],
        ['', '', '', '', '', '', '', ''],
        ['MSG_2', 2, '', '', '', '', '', ''],
    ]

    profile = Profile.from_table(tt)
    assert len(profile.messages) == 2
    assert profile.message_name(1) == 'MSG_1'
    assert profile.message_name(3) == 'unknown_3'
    assert profile.message_number('MSG_2') == 2
    assert profile.message_number('MSG_3') is None
    assert profile.field(1, 1).name == 'FIELD_2'
    assert profile.field(1, 5) is None
    assert profile.field(3, 0) is None
    assert profile.message(2).fields == ()

    with pytest.raises(ProfileContentError):
        Profile.from_table([['', '', 0, 'ORPHAN', 'uint8', '', '', '']])

    with pytest.raises(ProfileContentError):
        Profile.from_table(tt + [['MSG_1', 3, '', '', '', '', '', '']])

    with pytest.raises(ProfileContentError):
        Profile.from_table(tt + [['MSG_3', 1, '', '', '', '', '', '']])

    with pytest.raises(ProfileContentError):
        Profile.from_table(tt + [['MSG_3', 'x', '', '', '', '', '', '']])


def test_from_table_non_fatal():
    tt = [
        ['MSG_1', 1, '', '', '', '', '', ''],
        ['', '', 0, 'FIELD_1', 'uint8', '', '', ''],
        ['', '', 0, 'FIELD_1', 'NOT_A_TYPE', '', '', ''],
    ]

    with pytest.raises(ProfileContentError):
        Profile.from_table(tt)

    with pytest.warns(ProfileContentWarning):
        profile = Profile.from_table(tt, strict=False)

    assert len(profile.message(1).fields) == 2


def test_default_profile():
    assert len(DEFAULT_PROFILE.messages) == len([row for row in PROFILE_TABLE if row[0] != ''])
    assert DEFAULT_PROFILE.message_name(0) == 'file_id'
    assert DEFAULT_PROFILE.message_name(20) == 'record'
    assert DEFAULT_PROFILE.message_number('session') == 18

    speed = DEFAULT_PROFILE.field(20, 6)
    assert speed.name == 'speed'
    assert speed.scale == 1000
    assert speed.units == 'm/s'


def test_lookup_maps_are_built_with_the_profile():
    record = DEFAULT_PROFILE.message(20)
    session = DEFAULT_PROFILE.message(18)

    assert DEFAULT_PROFILE.messages_by_number[20] is record
    assert record.fields_by_number[6] is DEFAULT_PROFILE.field(20, 6)

    # alternating between messages keeps returning the same entries
    for _ in range(3):
        assert DEFAULT_PROFILE.field(20, 3).name == 'heart_rate'
        assert DEFAULT_PROFILE.field(18, 7) is session.field(7)
        assert DEFAULT_PROFILE.field(18, 7).name == 'total_elapsed_time'
        assert DEFAULT_PROFILE.field(20, 6) is record.fields_by_number[6]

    assert hash(record) == hash(Profile.from_table(PROFILE_TABLE).message(20))
    assert Profile.from_table(PROFILE_TABLE) == DEFAULT_PROFILE
