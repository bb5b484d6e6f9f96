import os
import sys
from pydantic import BaseModel

root_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(root_path)

from DictTools import *


def test_deep_merge():
    target = {'a': 1, 'b': {'x': 1, 'y': {'deep': True}}, 'tags': ['first']}
    result = deep_merge(target, {'b': {'y': {'more': 1}}, 'tags': ['second']}, None, {'c': 3})

    assert result is target
    assert result == {
        'a': 1,
        'b': {'x': 1, 'y': {'deep': True, 'more': 1}},
        'tags': ['second'],
        'c': 3,
    }

    # --------------------------------------------------------------------

    source = {'nested': {'list': [1, 2]}}
    merged = deep_merge({}, source)
    merged['nested']['list'].append(3)
    assert source == {'nested': {'list': [1, 2]}}

    # --------------------------------------------------------------------

    assert deep_merge({'a': {'x': 1}}, {'a': 'flat'}) == {'a': 'flat'}
    assert deep_merge({'a': 'flat'}, {'a': {'x': 1}}) == {'a': {'x': 1}}


def test_merged_copy():
    base = {'a': 1, 'b': 2, 'nested': {'k': 'v'}}
    result = merged_copy(base, {'b': 3, 'c': 4, 'nested': {'j': 'w'}})

    assert result == {'a': 1, 'b': 3, 'c': 4, 'nested': {'k': 'v', 'j': 'w'}}
    assert base == {'a': 1, 'b': 2, 'nested': {'k': 'v'}}


def test_is_structured():
    assert is_structured({})
    assert not is_structured([])
    assert not is_structured('text')
    assert not is_structured(None)


class ExampleData(BaseModel):
    id: int
    token: str
    args: list
    kwargs: dict | None = None


def test_check_sanitize_dict():
    dict1 = {
        'id': 36,
        'token': '2aa4bbfe-c1ed-43af-afcc-f11049e16fc5',
        'args': ['This', 'is', 'args'],
        'kwargs': {
            'key1': 'Value1',
            'key2': 2,
        },
        'extra_fields': 'This is an extra fields.'
    }
    validated_data, error_text = check_sanitize_dict(dict1, ExampleData)

    assert not error_text
    assert 'extra_fields' not in validated_data

    # --------------------------------------------------------------------

    dict2 = {
        'id': 36,
        'token': '2aa4bbfe-c1ed-43af-afcc-f11049e16fc5',
        'args': ['This', 'is', 'args']
    }
    validated_data, error_text = check_sanitize_dict(dict2, ExampleData)

    assert not error_text
    assert 'kwargs' not in validated_data

    # --------------------------------------------------------------------

    dict3 = {
        'id': [36],
        'token': '2aa4bbfe-c1ed-43af-afcc-f11049e16fc5',
        'args': ['This', 'is', 'args']
    }
    validated_data, error_text = check_sanitize_dict(dict3, ExampleData)

    assert 'id' in error_text
    assert 'int_type' in error_text
    assert not validated_data

    # --------------------------------------------------------------------

    dict4 = {
        'id': 36,
        'args': ['This', 'is', 'args']
    }
    validated_data, error_text = check_sanitize_dict(dict4, ExampleData)

    assert 'token' in error_text
    assert 'missing' in error_text
    assert not validated_data

    # --------------------------------------------------------------------

    validated_data, error_text = check_sanitize_dict(dict2, ExampleData, exclude_unset=False)

    assert not error_text
    assert 'kwargs' not in validated_data
    assert validated_data['id'] == 36


def main():
    test_deep_merge()
    test_merged_copy()
    test_check_sanitize_dict()


if __name__ == "__main__":
    main()
