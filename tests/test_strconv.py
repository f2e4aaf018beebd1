import struct

import pytest

from minikern.strconv import (
    strtod,
    strtof,
    strtol,
    strtold,
    strtoll,
    strtoul,
    strtoull,
)


def _as_f32(value):
    return struct.unpack("f", struct.pack("f", value))[0]


@pytest.mark.parametrize("func", [strtoul, strtoull])
def test_unsigned_decimal_with_trailing_text(func):
    assert func("  42abc", 10) == (int("42"), len("  42"))


@pytest.mark.parametrize("func", [strtoul, strtoull])
def test_unsigned_base_detection(func):
    assert func("0x1F", 0) == (0x1F, len("0x1F"))
    assert func("017", 0) == (0o17, len("017"))
    assert func("95", 0) == (95, len("95"))
    assert func("0", 0) == (0, len("0"))


@pytest.mark.parametrize("func", [strtoul, strtoull])
def test_unsigned_octal_stops_at_eight(func):
    assert func("08", 0) == (0, len("0"))


@pytest.mark.parametrize("func", [strtoul, strtoull])
def test_unsigned_hex_prefix_optional_in_base_16(func):
    assert func("0xff", 16) == (0xFF, len("0xff"))
    assert func("ff", 16) == (0xFF, len("ff"))
    assert func("zz", 16) == (0, 0)


@pytest.mark.parametrize("func", [strtoul, strtoull])
def test_unsigned_sign_is_ignored(func):
    assert func("-5", 10) == (5, len("-5"))
    assert func("+5", 10) == func("5", 10)[0:1] + (len("+5"),)


def test_strtoul_saturates_on_overflow():
    text = "4294967296"
    assert strtoul(text, 10) == (2**32 - 1, len(text) - 1)
    assert strtoul("4294967295", 10) == (2**32 - 1, len("4294967295"))


def test_strtoull_saturates_on_overflow():
    text = str(2**64)
    value, end = strtoull(text, 10)
    assert value == 2**64 - 1
    assert end == len(text) - 1
    assert strtoull(str(2**64 - 1), 10) == (2**64 - 1, len(str(2**64 - 1)))


@pytest.mark.parametrize("func", [strtol, strtoll])
def test_signed_decimal(func):
    assert func("  -123xyz", 10) == (-123, len("  -123"))
    assert func("+77", 10) == (77, len("+77"))
    assert func("abc", 10) == (0, 0)


@pytest.mark.parametrize("func", [strtol, strtoll])
def test_signed_reads_only_decimal_digits(func):
    assert func("12", 16) == (int("12", 16), len("12"))
    assert func("ff", 16) == (0, 0)


def test_strtol_wraps_to_32_bits():
    assert strtol("2147483648", 10)[0] == -(2**31)
    assert strtol("2147483647", 10)[0] == 2**31 - 1


def test_strtoll_wraps_to_64_bits():
    assert strtoll(str(2**63), 10)[0] == -(2**63)
    assert strtoll(str(2**40), 10)[0] == 2**40


def test_strtod_with_exponent():
    text = "3.5e2"
    assert strtod(text + "xyz") == (350.0, len(text))
    assert strtod("25e-1") == (2.5, len("25e-1"))


def test_strtod_consumes_bare_exponent_marker():
    assert strtod("1e") == (1.0, len("1e"))


def test_strtod_sign_and_leading_space():
    assert strtod("-0.25") == (-0.25, len("-0.25"))
    assert strtod(" \t.5") == (0.5, len(" \t.5"))
    assert strtod("nope") == (0.0, 0)


@pytest.mark.parametrize("text", ["1.5", "0.125", "123.75", "-9.5"])
def test_strtod_and_strtold_exact_binary_fractions(text):
    assert strtod(text) == (float(text), len(text))
    assert strtold(text) == (float(text), len(text))


def test_strtold_reads_no_exponent():
    assert strtold("  -7.5q") == (-7.5, len("  -7.5"))
    assert strtold("2e5") == (2.0, len("2"))


def test_strtof_single_precision():
    value, end = strtof("1.1")
    assert value == _as_f32(1.1)
    assert end == len("1.1")


@pytest.mark.parametrize("text", ["3.14159", "-0.3", "1000.001", "42"])
def test_strtof_results_are_float32(text):
    value, end = strtof(text)
    assert _as_f32(value) == value
    assert abs(value - float(text)) <= abs(float(text)) * 1e-6
    assert end == len(text)


def test_strtof_reads_no_exponent():
    assert strtof("2e5") == (2.0, len("2"))