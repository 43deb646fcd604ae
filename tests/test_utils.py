import pytest

from pyfaucet.core import format_address, to_int


def test_format_address_basic():
    assert format_address("0x80705Cc3B81A41c4e9AE785004d2F65445782a18") == "0x8070...2a18"
    assert format_address("0xabc") == "0xabc"


def test_to_int_basic():
    assert to_int("0x10") == 16
    assert to_int("16") == 16
    assert to_int(16) == 16
    assert to_int(None) is None


def test_to_int_rejects_garbage():
    with pytest.raises(ValueError):
        to_int(1.5)
