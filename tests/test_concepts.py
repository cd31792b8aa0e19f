from oer_search.search.concepts import (
    MAX_CONCEPTS,
    concept_names,
    concept_weights,
    extract_concepts,
    rank_concepts,
)
from oer_search.search.models import MaterialRecord


def record_with_concepts(material_id, names):
    return MaterialRecord.model_validate({
        "material_id": material_id,
        "wikipedia": [{"sec_name": name, "name": name} for name in names],
    })


def test_two_most_common_concepts_are_dropped():
    ranked = rank_concepts([
        ["A", "B", "C", "D"],
        ["A", "B", "C"],
        ["A", "B", "E"],
    ])
    assert ranked == [("C", 2), ("D", 1), ("E", 1)]


def test_nothing_dropped_with_two_concepts_or_fewer():
    assert rank_concepts([["A", "B"], ["A"]]) == [("A", 2), ("B", 1)]


def test_ties_keep_first_seen_order():
    assert rank_concepts([["X", "Y", "Z", "W"]]) == [("Z", 1), ("W", 1)]


def test_at_most_twenty_concepts_are_kept():
    names = [f"concept-{i}" for i in range(25)]
    ranked = rank_concepts([names])

    assert len(ranked) == MAX_CONCEPTS
    assert ranked[0] == ("concept-2", 1)


def test_concept_names_truncate_per_document():
    record = record_with_concepts(1, [f"c{i}" for i in range(40)])
    assert concept_names(record) == [f"c{i}" for i in range(30)]


def test_concept_names_fall_back_to_name():
    record = MaterialRecord.model_validate({
        "material_id": 1,
        "wikipedia": [{"name": "Plain name"}, {"sec_name": "Secondary", "name": "Primary"}, {}],
    })
    assert concept_names(record) == ["Plain name", "Secondary"]


def test_extract_concepts_across_references():
    references = [
        record_with_concepts(1, ["Science", "Learning", "Neural network", "Perceptron"]),
        record_with_concepts(2, ["Science", "Learning", "Neural network"]),
        record_with_concepts(3, ["Science", "Learning"]),
        record_with_concepts(4, []),
    ]
    assert extract_concepts(references) == [("Neural network", 2), ("Perceptron", 1)]


def test_concept_weights_divide_by_reference_count():
    assert concept_weights([("Graph", 2), ("Tree", 1)], 4) == [("Graph", 0.5), ("Tree", 0.25)]


def test_concept_weights_without_references():
    assert concept_weights([("Graph", 2)], 0) == []
