import pytest

import pelicanctl.utils
from pelicanctl.exceptions import PelicanError


def test_deep_update():
    d = {'api': {'base_url': 'a', 'timeout': '5'}, 'client': {}}
    pelicanctl.utils.deep_update(d, {'api': {'base_url': 'b'}, 'admin': {'token': 't'}})
    assert d == {'api': {'base_url': 'b', 'timeout': '5'}, 'client': {},
                 'admin': {'token': 't'}}


@pytest.mark.parametrize('body,expected', [
    ({'object': 'list', 'data': [1, 2]}, [1, 2]),
    ({'servers': [{'a': 1}]}, [{'a': 1}]),
    ({'files': []}, []),
    ({'attributes': {'uuid': 'x'}}, {'attributes': {'uuid': 'x'}}),
    ([1], [1]),
    (None, None),
])
def test_unwrap_response(body, expected):
    assert pelicanctl.utils.unwrap_response(body) == expected


def test_as_list():
    assert pelicanctl.utils.as_list(None) == []
    assert pelicanctl.utils.as_list({'data': [{'a': 1}]}) == [{'a': 1}]
    assert pelicanctl.utils.as_list({'a': 1}) == [{'a': 1}]


def test_as_object():
    assert pelicanctl.utils.as_object({'data': [{'a': 1}]}) == {'a': 1}
    assert pelicanctl.utils.as_object({'a': 1}) == {'a': 1}
    assert pelicanctl.utils.as_object(None) == {}
    with pytest.raises(PelicanError, match='list of 2'):
        pelicanctl.utils.as_object([{'a': 1}, {'b': 2}])
    with pytest.raises(PelicanError):
        pelicanctl.utils.as_object('text')


def test_get_attr_and_server_uuid():
    item = {'object': 'server', 'attributes': {'uuid': 'u-1', 'id': 7}}
    assert pelicanctl.utils.get_attr(item, 'uuid') == 'u-1'
    assert pelicanctl.utils.get_attr({'uuid': 'top', 'attributes': {'uuid': 'x'}},
                                     'uuid') == 'top'
    assert pelicanctl.utils.get_attr('not a dict', 'uuid') is None
    assert pelicanctl.utils.server_uuid(item) == 'u-1'
    assert pelicanctl.utils.server_uuid({'attributes': {'id': 7}}) == '7'
    assert pelicanctl.utils.server_uuid({}) is None


def test_is_int_identifier():
    assert pelicanctl.utils.is_int_identifier('42')
    assert not pelicanctl.utils.is_int_identifier('a1b2')
    assert not pelicanctl.utils.is_int_identifier('')


def test_read_identifier_file(tmp_path):
    path = tmp_path / 'ids.txt'
    path.write_text('# comment\n\nabc\n  def  \n#ghi\n')
    assert pelicanctl.utils.read_identifier_file(str(path)) == ['abc', 'def']


def test_parse_backup_pair():
    assert pelicanctl.utils.parse_backup_pair(' 7 , b-uuid ') == ('7', 'b-uuid')
    for bad in ('7', '7,', ',b', '7,b,c'):
        with pytest.raises(PelicanError):
            pelicanctl.utils.parse_backup_pair(bad)


def test_read_backup_pairs(tmp_path):
    path = tmp_path / 'pairs.txt'
    path.write_text('# saved pairs\n1,b-1\n\n2,b-2\n')
    assert pelicanctl.utils.read_backup_pairs(str(path)) == [('1', 'b-1'), ('2', 'b-2')]


def test_read_backup_pairs_names_bad_line(tmp_path):
    path = tmp_path / 'pairs.txt'
    path.write_text('1,b-1\n\nnot-a-pair\n')
    with pytest.raises(PelicanError, match=r'pairs.txt:3: invalid backup pair'):
        pelicanctl.utils.read_backup_pairs(str(path))
