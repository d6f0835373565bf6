from unittest.mock import patch

from emission_eval.utils.meters import TestMeters, TimeMeter


def test_corpus_and_sample_meters_are_independent():
    meters = TestMeters()

    meters.add(list("cat"), list("caat"), ["cat"], ["caat"], per_sample=True)
    assert meters.total_ler == 25.0
    assert meters.total_wer == 100.0
    assert meters.sample_ler_value == 25.0

    meters.add(list("coats"), list("coats"), ["coats"], ["coats"], per_sample=True)
    assert abs(meters.total_ler - 100.0 / 9) < 1e-9
    assert meters.total_wer == 50.0
    assert meters.sample_ler_value == 0.0
    assert meters.sample_wer_value == 0.0


def test_sample_meters_untouched_without_diagnostics():
    meters = TestMeters()
    meters.add(["a"], ["b"], ["a"], ["b"])
    assert meters.total_ler == 100.0
    assert meters.sample_ler.length == 0


def test_time_meter_accumulates_intervals():
    timer = TimeMeter()
    with patch("emission_eval.utils.meters.time.time", side_effect=[10.0, 12.5, 20.0, 21.0]):
        timer.resume()
        timer.stop()
        assert timer.value() == 2.5
        timer.resume()
        assert timer.running
        timer.stop()
    assert timer.value() == 3.5
    assert not timer.running
