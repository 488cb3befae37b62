from parsers.splitter import split_alternatives, split_parameters


def test_alternation_stays_one_field():
    assert split_parameters("<item:a> | <item:b>, <item:c>") == ["<item:a> | <item:b>", "<item:c>"]


def test_modifier_chain_and_quantity_are_opaque():
    fields = split_parameters("(<item:minecraft:bowl>).mutable(), <chemical:a> * 10, 1.0")
    assert fields == ["(<item:minecraft:bowl>).mutable()", "<chemical:a> * 10", "1.0"]


def test_lists_and_maps_nest():
    fields = split_parameters('<item:out>, [<item:a>, <item:b>], {count: 2, nbt: "x"}, 200')
    assert fields == ["<item:out>", "[<item:a>, <item:b>]", '{count: 2, nbt: "x"}', "200"]


def test_commas_inside_reference_tokens_and_strings_are_ignored():
    assert split_parameters('<tag:items:odd,name>, "a, b", c') == ["<tag:items:odd,name>", '"a, b"', "c"]


def test_trailing_comma_dropped_middle_empty_kept():
    assert split_parameters("a, b,") == ["a", "b"]
    assert split_parameters("a,,b") == ["a", "", "b"]
    assert split_parameters("") == []


def test_unmatched_closer_does_not_go_negative():
    assert split_parameters("a), b") == ["a)", "b"]
    assert split_parameters("x)), (y, z)") == ["x))", "(y, z)"]


def test_rejoin_and_resplit_is_stable():
    fields = split_parameters("<item:a> * 2, [<item:b>, <item:c>], (<item:d>).mutable(), 0.5")
    assert split_parameters(", ".join(fields)) == fields


def test_split_alternatives():
    assert split_alternatives("<item:a> | <tag:items:forge:b> | <item:c>") == [
        "<item:a>",
        "<tag:items:forge:b>",
        "<item:c>",
    ]
    assert split_alternatives("<item:a>") == ["<item:a>"]
