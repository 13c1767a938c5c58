import math

import pytest

from syscourse.picalc import (
    RAND_MAX,
    GlibcRandom,
    HitCounting,
    PiEstimate,
    estimate_pi,
    estimate_pi_threaded,
    format_report,
    main,
    main_threaded,
    rand_r,
)


def test_glibc_random_seed_one_matches_libc_sequence():
    gen = GlibcRandom(1)
    assert gen.rand() == 1804289383
    assert gen.rand() == 846930886


def test_glibc_random_seed_zero_behaves_like_one():
    a = GlibcRandom(0)
    b = GlibcRandom(1)
    assert [a.rand() for _ in range(20)] == [b.rand() for _ in range(20)]


def test_glibc_random_is_deterministic_and_in_range():
    a = GlibcRandom(123456789)
    b = GlibcRandom(123456789)
    values = [a.rand() for _ in range(500)]
    assert values == [b.rand() for _ in range(500)]
    assert all(0 <= v <= RAND_MAX for v in values)


def test_rand_r_is_deterministic_and_advances_state():
    value, state = rand_r(123456789)
    assert rand_r(123456789) == (value, state)
    assert state != 123456789
    assert 0 <= value <= RAND_MAX
    assert 0 <= state <= 0xFFFFFFFF


def test_rand_r_wraps_large_states():
    assert rand_r(2**32 + 5) == rand_r(5)


def test_estimate_pi_close_to_pi():
    est = estimate_pi(20000)
    assert 0 <= est.hits <= est.npoints
    assert abs(est.pi_est - math.pi) < 0.1


def test_estimate_pi_with_rand_is_repeatable():
    first = estimate_pi(5000, use_rand=True)
    second = estimate_pi(5000, use_rand=True)
    assert first == second
    assert abs(first.pi_est - math.pi) < 0.2


def test_zero_points_gives_nan():
    est = estimate_pi(0)
    assert est.hits == 0
    assert math.isnan(est.pi_est)


def test_single_thread_matches_rand_r_estimate():
    assert estimate_pi_threaded(3000, 1).hits == estimate_pi(3000).hits


def test_locked_and_local_counting_agree():
    local = estimate_pi_threaded(8000, 4, HitCounting.LOCAL)
    locked = estimate_pi_threaded(8000, 4, HitCounting.LOCKED)
    assert local == locked
    assert abs(local.pi_est - math.pi) < 0.2


def test_unsynchronized_counting_never_exceeds_correct_count():
    correct = estimate_pi_threaded(4000, 4, HitCounting.LOCAL)
    racy = estimate_pi_threaded(4000, 4, HitCounting.UNSYNCHRONIZED)
    assert 0 <= racy.hits <= correct.hits


def test_points_are_split_with_truncation():
    est = estimate_pi_threaded(10, 4)
    assert est.npoints == 10
    assert est.hits <= 8


def test_threaded_rejects_zero_threads():
    with pytest.raises(ValueError):
        estimate_pi_threaded(100, 0)


def test_format_report_layout():
    lines = format_report(PiEstimate(4, 3)).splitlines()
    assert lines[0] == "npoints: " + f"{4:8d}"
    assert lines[1] == "hits:    " + f"{3:8d}"
    assert lines[2] == "pi_est:  3.000000"


def test_main_without_arguments_prints_usage(capsys):
    assert main([]) == 1
    assert "usage:" in capsys.readouterr().out


def test_main_reports_estimate(capsys):
    assert main(["1000"]) == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0].split() == ["npoints:", "1000"]
    assert out == format_report(estimate_pi(1000)) + "\n"


def test_main_threaded_usage_and_run(capsys):
    assert main_threaded([]) == -1
    assert "num_threads" in capsys.readouterr().out
    assert main_threaded(["2000", "2"]) == 0
    out = capsys.readouterr().out
    assert out == format_report(estimate_pi_threaded(2000, 2)) + "\n"


def test_main_threaded_rejects_unknown_counting(capsys):
    assert main_threaded(["--counting=bogus", "100"]) == -1
    assert "usage:" in capsys.readouterr().out