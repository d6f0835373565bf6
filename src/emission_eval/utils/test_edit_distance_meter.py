from emission_eval.utils.edit_distance_meter import (
    EditDistanceMeter,
    edit_distance,
    edit_operations,
)


def test_edit_distance_identity_and_symmetry():
    sequences = [[], ["a"], ["c", "a", "t"], ["k", "i", "t", "t", "e", "n"], [1, 2, 2, 3]]
    for a in sequences:
        assert edit_distance(a, a) == 0
        assert edit_distance(a, []) == len(a)
        for b in sequences:
            assert edit_distance(a, b) == edit_distance(b, a)


def test_edit_operations_breakdown():
    # hypothesis, reference
    assert edit_operations(["c", "a", "t"], ["c", "a", "a", "t"]) == (0, 0, 1)
    assert edit_operations(["c", "a", "a", "t"], ["c", "a", "t"]) == (0, 1, 0)
    assert edit_operations(["b", "a", "t"], ["c", "a", "t"]) == (1, 0, 0)
    assert edit_distance(list("sitting"), list("kitten")) == 3


def test_meter_accumulates_corpus_rate():
    meter = EditDistanceMeter()
    assert meter.add(["c", "a", "t"], ["c", "a", "a", "t"]) == 1
    assert meter.edits == 1
    assert meter.length == 4
    assert meter.value() == [25.0]

    meter.add(list("coats"), list("coats"))
    assert meter.edits == 1
    assert meter.length == 9
    assert abs(meter.value()[0] - 100.0 / 9) < 1e-9


def test_meter_is_monotonic_until_reset():
    meter = EditDistanceMeter()
    pairs = [([1, 2], [1, 3]), ([], [4, 5]), ([6], []), ([7, 8], [7, 8])]
    previous = (0, 0)
    for hypothesis, reference in pairs:
        meter.add(hypothesis, reference)
        assert meter.edits >= previous[0]
        assert meter.length >= previous[1]
        previous = (meter.edits, meter.length)

    assert (meter.substitutions, meter.insertions, meter.deletions) == (1, 1, 2)
    meter.reset()
    assert meter.edits == 0
    assert meter.length == 0


def test_meter_with_empty_reference_reports_zero():
    meter = EditDistanceMeter()
    assert meter.value() == [0.0]

    # insertions against an empty reference add edits but no length
    meter.add(["a", "b"], [])
    assert meter.insertions == 2
    assert meter.length == 0
    assert meter.value() == [0.0]
