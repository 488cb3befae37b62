import logging

from ingestor.dispatcher import ERROR, PARSED, UNHANDLED, dispatch, process_segments
from ingestor.segmenter import Segment, segment_text
from ingestor.stats import analyze_results
from parsers import RecipeHandler
from parsers.base import layout


def seg(text: str, recipe_type: str | None = None, line: int = 1) -> Segment:
    return Segment(raw_text=text, recipe_type=recipe_type, start_line=line, end_line=line)


def test_parsed_outcome():
    outcome = dispatch(
        seg(
            '<recipetype:mekanism:enriching>.addRecipe("e", <item:a>, <item:b>);',
            "<recipetype:mekanism:enriching>",
            7,
        )
    )
    assert outcome.status == PARSED
    assert outcome.ok
    assert outcome.handler == "mekanism-enriching-handler"
    assert outcome.score == 1
    assert outcome.result["recipe_id"] == "e"
    assert (outcome.start_line, outcome.end_line) == (7, 7)
    assert outcome.error is None


def test_unhandled_outcome():
    outcome = dispatch(seg('<recipetype:create:pressing>.addRecipe("p", <item:a>, <item:b>);'))
    assert outcome.status == UNHANDLED
    assert outcome.handler is None
    assert outcome.score == 0
    assert outcome.result is None


def test_error_outcome_is_logged(caplog):
    caplog.set_level(logging.WARNING, logger="ingestor.dispatcher")
    outcome = dispatch(seg('<recipetype:mekanism:chemical_infusing>.addRecipe("ci", <chemical:a>, <chemical:b>);', line=12))
    assert outcome.status == ERROR
    assert outcome.handler == "mekanism-chemical_infusing-handler"
    assert "expected 3 parameters, got 2" in outcome.error
    assert "lines 12-12" in caplog.text


def test_unexpected_handler_failure_is_isolated():
    class Boom(RecipeHandler):
        def extract(self, segment):
            raise RuntimeError("kaboom")

    boom = Boom("boom", "addBoom", "boom.add(", [layout("a")])
    segments = [seg('boom.add("x", 1);', line=1), seg('other.add("y");', line=2)]
    outcomes = list(process_segments(segments, [boom]))
    assert [o.status for o in outcomes] == [ERROR, UNHANDLED]
    assert outcomes[0].error == "kaboom"


def test_process_segments_is_lazy():
    pulled = []

    def segments():
        for i in range(1, 4):
            pulled.append(i)
            yield seg('furnace.addRecipe("s", <item:a>, <item:b>, 0.1, 200);', line=i)

    outcomes = process_segments(segments())
    first = next(outcomes)
    assert first.status == PARSED
    assert pulled == [1]


def test_bad_statement_then_good_statement():
    text = (
        '<recipetype:mekanism:crushing>.addRecipe("bad", <item:a>, <item:b>\n'
        '<recipetype:mekanism:crushing>.addRecipe("good", <item:a>, <item:b>);\n'
    )
    outcomes = list(process_segments(segment_text(text)))
    assert [o.status for o in outcomes] == [ERROR, PARSED]
    summary = analyze_results(outcomes)["summary"]
    assert summary["total"] == 2
    assert summary["errors"] == 1
    assert summary["parsed"] == 1
    assert summary["unhandled"] == 0


def test_cooking_with_garbage_numbers_still_parses():
    outcome = dispatch(
        seg(
            '<recipetype:farmersdelight:cooking>.addRecipe("stew", <item:x:stew>, [<item:x:a>],'
            " <item:minecraft:bowl>, fast, soon);"
        )
    )
    assert outcome.status == PARSED
    assert outcome.result["experience"] == 0.0
    assert outcome.result["cook_time"] == 200
