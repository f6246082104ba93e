import asyncio
import concurrent.futures

import pytest
import reactivex
from reactivex.scheduler import ImmediateScheduler

from race_core import (
    CandidateAdaptationError,
    InputNormalizer,
    RaceOptions,
    adapt_candidate,
    args_or_arg_array,
    race,
)


def test_args_or_arg_array_collapses_single_sequence():
    a, b = reactivex.never(), reactivex.empty()
    assert args_or_arg_array((a, b)) == [a, b]
    assert args_or_arg_array(([a, b],)) == [a, b]
    assert args_or_arg_array(((a, b),)) == [a, b]
    assert args_or_arg_array(([],)) == []
    assert args_or_arg_array(()) == []
    assert args_or_arg_array((a,)) == [a]


def test_args_or_arg_array_keeps_lists_among_several_arguments():
    assert args_or_arg_array(([1], [2])) == [[1], [2]]


def test_adapt_candidate_returns_observables_unchanged():
    source = reactivex.never()
    assert adapt_candidate(source) is source


def test_adapt_candidate_wraps_iterables_and_futures():
    values = []
    adapt_candidate([1, 2], ImmediateScheduler()).subscribe(values.append)
    assert values == [1, 2]

    future = concurrent.futures.Future()
    future.set_result("ok")
    results = []
    adapt_candidate(future).subscribe(results.append)
    assert results == ["ok"]

    loop = asyncio.new_event_loop()
    try:
        assert isinstance(adapt_candidate(loop.create_future()), reactivex.Observable)
    finally:
        loop.close()


def test_adapt_candidate_rejects_unknown_inputs():
    with pytest.raises(CandidateAdaptationError) as excinfo:
        adapt_candidate(3.5, index=2)
    assert excinfo.value.index == 2
    assert excinfo.value.raw == 3.5
    assert "position 2" in str(excinfo.value)
    assert isinstance(excinfo.value, TypeError)


def test_adapt_all_stops_at_first_bad_candidate():
    with pytest.raises(CandidateAdaptationError) as excinfo:
        InputNormalizer.adapt_all([[1], None, object()])
    assert excinfo.value.index == 1


def test_options_defaults():
    options = InputNormalizer.validate_options(None)
    assert options.scheduler is None
    assert options.passthrough_single is True
    assert options.label is None


def test_options_accept_dict_and_model():
    scheduler = ImmediateScheduler()
    options = InputNormalizer.validate_options(
        {"scheduler": scheduler, "label": "  fetch  ", "passthrough_single": False}
    )
    assert options.scheduler is scheduler
    assert options.label == "fetch"
    assert options.passthrough_single is False

    model = RaceOptions(label="x")
    assert InputNormalizer.validate_options(model) is model


@pytest.mark.parametrize(
    "raw",
    [
        {"label": "   "},
        {"label": "x" * 101},
        {"scheduler": "not a scheduler"},
        {"unknown": 1},
    ],
)
def test_invalid_options_raise_value_error(raw):
    with pytest.raises(ValueError):
        InputNormalizer.validate_options(raw)


def test_race_rejects_invalid_options_at_call_time():
    with pytest.raises(ValueError):
        race(reactivex.never(), reactivex.never(), options={"label": ""})


def test_options_are_frozen():
    options = RaceOptions()
    with pytest.raises(Exception):
        options.label = "changed"
