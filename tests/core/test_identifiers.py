"""
식별자 검증 테스트
"""

import uuid

from storefront.core.identifiers import parse_id


def test_parse_valid_string():
    value = uuid.uuid4()

    assert parse_id(str(value)) == value
    assert parse_id(f"  {value}  ") == value


def test_parse_uuid_instance():
    value = uuid.uuid4()

    assert parse_id(value) is value


def test_parse_invalid_values():
    """형식이 맞지 않으면 None"""
    assert parse_id("not-an-id") is None
    assert parse_id("") is None
    assert parse_id(None) is None
    assert parse_id(123) is None
