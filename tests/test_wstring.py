import pytest

from smcesim.wstring import String


@pytest.mark.parametrize("value", [1, 2, 5, 255, 1024, 123456789])
def test_from_binary_round_trip(value):
    digits = str(String.from_binary(value))
    assert int(digits, 2) == value
    assert digits[0] == "1"


@pytest.mark.parametrize("value", [1, 15, 16, 255, 4096, 0xDEADBEEF])
def test_from_hex_round_trip(value):
    digits = str(String.from_hex(value))
    assert int(digits, 16) == value
    assert digits == digits.upper()


def test_zero_conversions():
    assert String.from_binary(0) == "0"
    assert String.from_hex(0) == "0"


def test_char_at_and_bounds():
    text = String("hello")
    assert text.char_at(1) == "e"
    with pytest.raises(IndexError):
        text.char_at(5)


def test_set_char_at():
    text = String("hello")
    text.set_char_at(0, "j")
    assert text == "jello"
    with pytest.raises(IndexError):
        text.set_char_at(10, "x")


def test_compare_to():
    assert String("abc").compare_to("abd") < 0
    assert String("abd").compare_to("abc") > 0
    assert String("abc").compare_to("abcdef") == 0


def test_starts_and_ends_with():
    text = String("sketch.ino")
    assert text.starts_with("sketch")
    assert text.ends_with(".ino")
    assert not text.starts_with(".ino")


def test_get_bytes():
    assert String("abcdef").get_bytes(3) == b"abc"
    assert String("ab").get_bytes(10) == b"ab"


def test_index_of():
    text = String("one two one")
    assert text.index_of("one") == "one two one".find("one")
    assert text.index_of("one", 1) == "one two one".find("one", 1)
    assert text.index_of("zzz") == -1


def test_remove_to_end():
    text = String("abcdef")
    text.remove(2)
    assert text == "ab"


def test_remove_with_count():
    text = String("abcdef")
    text.remove(1, 2)
    assert text == "adef"


def test_remove_out_of_range():
    with pytest.raises(IndexError):
        String("abc").remove(4)


def test_replace_first_occurrence():
    text = String("one two one")
    text.replace("two", "2")
    assert text == "one 2"


def test_replace_missing_leaves_text():
    text = String("abc")
    text.replace("x", "y")
    assert text == "abc"


def test_substring():
    text = String("abcdef")
    assert text.substring(2) == "cdef"
    assert text.substring(1, 3) == "abcdef"[1:3]
    assert text.substring(3, 1) == "abcdef"[3:]
    with pytest.raises(IndexError):
        text.substring(7)


def test_to_int():
    assert String("42").to_int() == 42
    assert String(" -17abc").to_int() == -17
    assert String("abc").to_int() == 0
    assert String("99999999999").to_int() == 0


def test_to_double():
    assert String("3.5").to_double() == 3.5
    assert String("  -2.25e1x").to_double() == -2.25e1
    assert String("x").to_double() == 0.0


def test_to_float():
    assert String("0.5").to_float() == 0.5
    assert String("1e50").to_float() == 0.0
    assert String("1e50").to_double() == 1e50


def test_case_conversion():
    text = String("MiXeD 9")
    text.to_lower_case()
    assert text == "mixed 9"
    text.to_upper_case()
    assert text == "MIXED 9"


def test_trim():
    text = String("  hi there  ")
    text.trim()
    assert text == "hi there"
    spaces = String("   ")
    spaces.trim()
    assert spaces == "   "


def test_equality():
    assert String("Board").equals("Board")
    assert not String("Board").equals("board")
    assert String("Board").equals_ignore_case("bOARD")


def test_concat_and_operators():
    text = String("ab")
    text.concat("cd")
    text.concat(String("e"))
    assert text == "abcde"
    assert String("x") + "y" == "xy"
    assert "w" + String("x") == "wx"
    assert String("a") < String("b")
    assert String("b") >= "a"
    assert len(text) == len("abcde")