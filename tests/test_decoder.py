import struct
import dataclasses

import pytest

from pyterminfo.terminfo import (
    TermInfo,
    DecodeError,
    NumberFormat,
    decode,
    expand,
    msys_terminfo,
    BOOLEAN_NAMES,
    NUMBER_NAMES,
    STRING_NAMES,
)

from terminfo_data import (
    ABSENT,
    CANCELLED,
    build_entry,
    fixture_names,
    read_fixture,
)


# %% Real entries


def test_capability_tables():
    assert len(BOOLEAN_NAMES) == 44
    assert len(NUMBER_NAMES) == 39
    assert len(STRING_NAMES) == 414
    # Some well known positions
    assert NUMBER_NAMES.index("colors") == 13
    assert STRING_NAMES.index("cup") == 10
    assert STRING_NAMES.index("sgr0") == 39
    assert STRING_NAMES.index("setaf") == 359
    for table in (BOOLEAN_NAMES, NUMBER_NAMES, STRING_NAMES):
        assert len(set(table)) == len(table)


def test_decode_all_fixtures():
    names = fixture_names()
    assert len(names) >= 5
    for name in names:
        ti = decode(read_fixture(name))
        assert isinstance(ti, TermInfo)
        assert ti.names
        assert ti.name == name


def test_decode_dumb():
    ti = decode(read_fixture("dumb"))

    assert ti.names == ("dumb", "80-column dumb tty")
    assert dict(ti.booleans) == {"am": True}
    assert dict(ti.numbers) == {"cols": 80}
    assert dict(ti.strings) == {
        "bel": b"\x07",
        "cr": b"\r",
        "cud1": b"\n",
        "ind": b"\n",
    }


def test_decode_vt100():
    ti = decode(read_fixture("vt100"))

    assert ti.names == ("vt100", "vt100-am", "DEC VT100 (w/advanced video)")
    assert ti.get_flag("am")
    assert ti.get_flag("msgr")
    assert not ti.get_flag("bce")
    assert ti.get_number("cols") == 80
    assert ti.get_number("lines") == 24
    assert ti.get_number("colors") is None
    assert ti.get_string("setaf") is None
    assert ti.strings["cup"] == b"\x1b[%i%p1%d;%p2%dH$<5>"
    assert ti.strings["sgr0"] == b"\x1b[m\x0f$<2>"


def test_decode_linux():
    ti = decode(read_fixture("linux"))

    assert ti.names == ("linux", "Linux console")
    assert ti.numbers["colors"] == 8
    assert "cols" not in ti.numbers
    assert ti.strings["setaf"] == b"\x1b[3%p1%dm"
    assert ti.strings["sgr0"] == b"\x1b[m\x0f"
    for cap in ("am", "bce", "ccc", "eo", "mir", "msgr", "xenl", "xon"):
        assert ti.booleans[cap] is True


def test_decode_xterm_256color_extended_numbers():
    data = read_fixture("xterm-256color")
    assert struct.unpack("<H", data[:2])[0] == NumberFormat.EXTENDED.value

    ti = decode(data)

    assert ti.names[0] == "xterm-256color"
    assert ti.numbers["colors"] == 256
    assert ti.numbers["pairs"] == 0x10000
    assert ti.numbers["cols"] == 80
    assert ti.numbers["lines"] == 24
    assert ti.numbers["it"] == 8
    for cap in ("am", "bce", "xenl"):
        assert ti.booleans[cap]
    assert ti.strings["bold"] == b"\x1b[1m"
    assert ti.strings["sgr0"] == b"\x1b(B\x1b[m"
    assert ti.strings["op"] == b"\x1b[39;49m"
    assert ti.strings["setaf"] == (
        b"\x1b[%?%p1%{8}%<%t3%p1%d%e%p1%{16}%<%t9%p1%{8}%-%d%e38;5;%p1%d%;m"
    )


def test_decoded_templates_expand():
    ti = decode(read_fixture("xterm-256color"))

    assert expand(ti.strings["cup"], [4, 9]) == b"\x1b[5;10H"
    assert expand(ti.strings["setaf"], [1]) == b"\x1b[31m"
    assert expand(ti.strings["setaf"], [9]) == b"\x1b[91m"
    assert expand(ti.strings["setaf"], [196]) == b"\x1b[38;5;196m"
    assert expand(ti.strings["sgr"], [0, 0, 0, 0, 0, 1, 0, 0, 0]) == b"\x1b(B\x1b[0;1m"
    assert expand(ti.strings["sgr"], [1, 0, 0, 0, 0, 0, 0, 0, 1]) == b"\x1b(0\x1b[0;7m"


# %% Synthetic entries


def test_decode_synthetic_legacy():
    data = build_entry(
        names="foo|foo-bar|The Foo terminal",
        booleans={"am": True, "xenl": True},
        numbers={"cols": 132, "colors": 16},
        strings={"bold": b"\x1b[1m", "setaf": b"\x1b[3%p1%dm"},
    )

    ti = decode(data)

    assert ti.names == ("foo", "foo-bar", "The Foo terminal")
    assert dict(ti.booleans) == {"am": True, "xenl": True}
    assert dict(ti.numbers) == {"cols": 132, "colors": 16}
    assert dict(ti.strings) == {"bold": b"\x1b[1m", "setaf": b"\x1b[3%p1%dm"}


def test_decode_synthetic_extended():
    data = build_entry(numbers={"colors": 0x1000000, "pairs": 0x7FFFFFFF}, extended=True)
    ti = decode(data)
    assert ti.numbers["colors"] == 0x1000000
    assert ti.numbers["pairs"] == 0x7FFFFFFF


@pytest.mark.parametrize("extended", [False, True])
def test_number_sentinels_are_absent(extended):
    data = build_entry(
        numbers={"cols": ABSENT, "it": CANCELLED, "lines": 24, "colors": -3},
        extended=extended,
    )
    ti = decode(data)
    assert dict(ti.numbers) == {"lines": 24}
    assert ti.get_number("cols") is None
    assert ti.get_number("it") is None


def test_number_large_legacy_values():
    # The largest value that fits in the legacy format
    data = build_entry(numbers={"cols": 0x7FFF})
    assert decode(data).numbers["cols"] == 0x7FFF


def test_boolean_values():
    data = build_entry(booleans={"bw": 0, "am": 1, "xsb": 0xFE, "xhp": 2})
    ti = decode(data)
    assert dict(ti.booleans) == {"am": True, "xhp": True}
    assert ti.get_flag("bw") is False
    assert ti.get_flag("xsb") is False  # cancelled


def test_string_sentinels_are_absent():
    data = build_entry(strings={"cbt": ABSENT, "bel": CANCELLED, "cr": b"\r"})
    ti = decode(data)
    assert dict(ti.strings) == {"cr": b"\r"}
    assert ti.get_string("bel") is None


def test_empty_string_value():
    ti = decode(build_entry(strings={"bel": b""}))
    assert ti.strings["bel"] == b""


@pytest.mark.parametrize("names", ["ab", "abc"])
def test_padding_after_booleans(names):
    # Names section of even and odd length, with an odd number of booleans
    data = build_entry(names=names, booleans={"bw": 1}, numbers={"cols": 7})
    ti = decode(data)
    assert ti.names == (names,)
    assert ti.numbers == {"cols": 7}


def test_shared_string_table_entries():
    data = build_entry(strings={"cud1": b"\n", "ind": 0})
    ti = decode(data)
    assert ti.strings["cud1"] == ti.strings["ind"] == b"\n"


def test_trailing_data_is_ignored():
    data = build_entry(strings={"cr": b"\r"}, trailer=b"\x00\x01\x02 extended stuff")
    assert decode(data).strings == {"cr": b"\r"}


def test_bytearray_and_memoryview_input():
    data = build_entry(numbers={"cols": 80})
    assert decode(bytearray(data)).numbers["cols"] == 80
    assert decode(memoryview(data)).numbers["cols"] == 80


# %% Errors


def test_error_bad_magic():
    data = build_entry(magic=0o433)
    with pytest.raises(DecodeError) as err:
        decode(data)
    assert err.value.section == "header"
    assert "magic" in str(err.value)


def test_error_empty_input():
    with pytest.raises(DecodeError) as err:
        decode(b"")
    assert err.value.section == "header"


def test_error_truncated_everywhere():
    data = build_entry(
        booleans={"am": True},
        numbers={"cols": 80, "lines": 24},
        strings={"cr": b"\r", "bel": b"\x07"},
    )
    decode(data)  # the full thing is fine
    for n in range(len(data)):
        with pytest.raises(DecodeError):
            decode(data[:n])


def test_error_truncated_sections_are_named():
    data = build_entry(
        names="abc",
        booleans={"am": True},
        numbers={"cols": 80},
        strings={"cr": b"\r"},
    )
    # header(12) + names(4) + booleans(2) + padding(0) + numbers(2*1) + offsets(2*3) + table
    cases = [(5, "header"), (14, "names"), (17, "booleans"), (19, "numbers")]
    cases += [(22, "strings"), (len(data) - 1, "string table")]
    for n, section in cases:
        with pytest.raises(DecodeError) as err:
            decode(data[:n])
        assert err.value.section == section, n


def test_error_empty_names():
    data = struct.pack("<6H", 0o432, 0, 0, 0, 0, 0)
    with pytest.raises(DecodeError) as err:
        decode(data)
    assert "empty names" in str(err.value)

    data = struct.pack("<6H", 0o432, 1, 0, 0, 0, 0) + b"\x00\x00"
    with pytest.raises(DecodeError) as err:
        decode(data)
    assert err.value.section == "names"


def test_error_names_not_terminated():
    data = bytearray(build_entry(names="abc"))
    data[12 + 3] = ord("d")
    with pytest.raises(DecodeError) as err:
        decode(bytes(data))
    assert err.value.section == "names"


def test_error_names_not_utf8():
    data = build_entry(names="abc")
    data = data[:12] + b"\xff\xfe\xfd\x00" + data[16:]
    with pytest.raises(DecodeError):
        decode(data)


def test_error_too_many_capabilities():
    for counts in [(45, 0, 0), (0, 40, 0), (0, 0, 415)]:
        data = struct.pack("<6H", 0o432, 2, *counts, 0) + b"a\x00" + b"\x00" * 2000
        with pytest.raises(DecodeError) as err:
            decode(data)
        assert err.value.section == "header"


def test_error_string_offset_out_of_range():
    data = build_entry(strings={"cbt": 100, "bel": b"\x07"})
    with pytest.raises(DecodeError) as err:
        decode(data)
    assert err.value.section == "string table"
    assert "cbt" in str(err.value)

    data = build_entry(strings={"cbt": -3})
    with pytest.raises(DecodeError):
        decode(data)


def test_error_string_missing_nul():
    data = build_entry(strings={"bel": b"\x07"})
    data = data[:-1] + b"x"  # overwrite the terminating NUL
    with pytest.raises(DecodeError) as err:
        decode(data)
    assert "NUL" in str(err.value)


def test_decode_error_is_terminfo_error():
    from pyterminfo.terminfo import TerminfoError

    with pytest.raises(TerminfoError):
        decode(b"\x00\x00")


# %% The record and the msys fallback


def test_record_is_immutable():
    ti = decode(build_entry(numbers={"cols": 80}, strings={"cr": b"\r"}))

    with pytest.raises(dataclasses.FrozenInstanceError):
        ti.names = ("other",)
    with pytest.raises(TypeError):
        ti.numbers["cols"] = 81
    with pytest.raises(TypeError):
        ti.strings["bel"] = b"\x07"
    assert isinstance(ti.names, tuple)


def test_record_repr():
    ti = decode(read_fixture("dumb"))
    assert "dumb" in repr(ti)
    assert "1 booleans" in repr(ti)


def test_msys_terminfo():
    ti = msys_terminfo()

    assert ti.names == ("cygwin",)
    assert dict(ti.booleans) == {}
    assert dict(ti.numbers) == {"colors": 8}
    assert ti.strings["sgr0"] == b"\x1b[0m"
    assert ti.strings["bold"] == b"\x1b[1m"
    assert expand(ti.strings["setaf"], [1]) == b"\x1b[31m"
    assert expand(ti.strings["setab"], [7]) == b"\x1b[47m"

    # A new instance each time, but all the same
    assert msys_terminfo() == ti
    assert msys_terminfo() is not ti
