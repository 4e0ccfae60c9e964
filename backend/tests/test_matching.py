import pytest

from aula.matching import UNKNOWN_NAME, WizardSelection, filter_activities, lookup_name, match, toggle_style
from aula.schemas import Activity, MatchQuery


def activity(aid, barriers, styles):
    return Activity(id=aid, name=f"Actividad {aid}", barrier_ids=set(barriers), learning_style_ids=set(styles))


@pytest.fixture
def a():
    return activity("A", {"b1"}, {"s1", "s2"})


class TestFilterActivities:

    def test_subset_of_styles_matches(self, a):
        assert filter_activities([a], "b1", {"s1"}) == [a]

    def test_missing_style_excludes(self, a):
        assert filter_activities([a], "b1", {"s1", "s3"}) == []

    def test_wrong_barrier_excludes(self, a):
        assert filter_activities([a], "b2", {"s1"}) == []

    def test_any_of_several_barriers(self):
        multi = activity("M", {"b1", "b2"}, {"s1"})
        assert filter_activities([multi], "b2", {"s1"}) == [multi]

    def test_empty_styles_only_checks_barrier(self, a):
        other = activity("O", {"b2"}, set())
        assert filter_activities([a, other], "b1", set()) == [a]

    def test_order_is_preserved(self):
        acts = [
            activity("C", {"b1"}, {"s1"}),
            activity("X", {"b2"}, {"s1"}),
            activity("A", {"b1"}, {"s1", "s2"}),
            activity("B", {"b1"}, {"s1"}),
        ]
        assert [x.id for x in filter_activities(acts, "b1", {"s1"})] == ["C", "A", "B"]

    def test_match_query(self, a):
        assert match([a], MatchQuery(target_barrier_id="b1", target_learning_style_ids={"s2"})) == [a]


class TestLookupName:

    def test_miss_returns_sentinel(self):
        assert lookup_name("nonexistent-id", []) == "Desconocido"
        assert UNKNOWN_NAME == "Desconocido"

    def test_dicts_and_objects(self, a):
        assert lookup_name("x", [{"id": "x", "name": "Equis"}]) == "Equis"
        assert lookup_name("A", [a]) == "Actividad A"

    def test_none_inputs(self):
        assert lookup_name(None, [{"id": "x", "name": "Equis"}]) == UNKNOWN_NAME
        assert lookup_name("x", None) == UNKNOWN_NAME
        assert lookup_name("x", [{"id": "x", "name": None}]) == UNKNOWN_NAME


class TestWizardSelection:

    def test_toggle_adds_and_removes_in_order(self):
        selected = toggle_style([], "s1")
        selected = toggle_style(selected, "s2")
        assert selected == ["s1", "s2"]
        assert toggle_style(selected, "s1") == ["s2"]

    def test_not_ready_without_barrier_or_styles(self, a):
        assert not WizardSelection().ready
        assert not WizardSelection(barrier_id="b1").ready
        assert not WizardSelection(style_ids=["s1"]).ready
        assert WizardSelection(barrier_id="b1").candidates([a]) == []

    def test_query_requires_ready(self):
        with pytest.raises(ValueError):
            WizardSelection(barrier_id="b1").query()

    def test_candidates_when_ready(self, a):
        selection = WizardSelection(barrier_id="b1", style_ids=["s2"])
        assert selection.ready
        assert selection.query().target_learning_style_ids == {"s2"}
        assert selection.candidates([a, activity("B", {"b1"}, {"s1"})]) == [a]
