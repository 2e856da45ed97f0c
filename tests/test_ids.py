import json

import pytest

from trpc_cli.rpc.ids import RECENTLY_ACTIVE, Ids, IdsKind


def test_single_id_encodes_as_bare_integer():
    assert Ids.single(7).to_wire() == 7


def test_one_element_sequence_stays_an_array():
    ids = Ids.of([7])
    assert ids.kind is IdsKind.SEQUENCE
    assert ids.to_wire() == [7]
    assert Ids.single(7).to_wire() != ids.to_wire()


def test_sequence_keeps_order_and_mixed_identifiers():
    ids = Ids.of([3, "6a0a9282c65fc6a1324e6e1605fe9bb9746c3aa8", 1])
    assert ids.to_wire() == [3, "6a0a9282c65fc6a1324e6e1605fe9bb9746c3aa8", 1]


def test_default_is_recently_active_sentinel():
    assert Ids() == Ids.recently_active()
    assert Ids().to_wire() == RECENTLY_ACTIVE == "recently-active"


def test_empty_sequence_encodes_as_empty_array():
    assert json.dumps(Ids.of([]).to_wire()) == "[]"


@pytest.mark.parametrize("bad", [True, 1.5, None, b"abc"])
def test_invalid_identifiers_are_rejected(bad):
    with pytest.raises(TypeError):
        Ids.of([bad])


def test_single_rejects_bool_and_strings():
    with pytest.raises(TypeError):
        Ids.single(True)
    with pytest.raises(TypeError):
        Ids.single("abc")


def test_sentinel_cannot_carry_a_value():
    with pytest.raises(TypeError):
        Ids(IdsKind.RECENTLY_ACTIVE, 3)


def test_coerce():
    assert Ids.coerce(4) == Ids.single(4)
    assert Ids.coerce("abcd") == Ids.of(["abcd"])
    assert Ids.coerce([1, 2]) == Ids.of([1, 2])
    sentinel = Ids.recently_active()
    assert Ids.coerce(sentinel) is sentinel


def test_parse_command_line_text():
    assert Ids.parse("5") == Ids.single(5)
    assert Ids.parse("5,") == Ids.of([5])
    assert Ids.parse("1, 2,abc") == Ids.of([1, 2, "abc"])
    assert Ids.parse("recent") == Ids.recently_active()
    assert Ids.parse("Recently-Active") == Ids.recently_active()


def test_parse_keeps_non_ascii_digits_as_hash_strings():
    assert Ids.parse("\u00b2") == Ids.of(["\u00b2"])
    assert Ids.parse("1,\u0663") == Ids.of([1, "\u0663"])


def test_parse_rejects_empty_text():
    with pytest.raises(ValueError):
        Ids.parse(" , ")
