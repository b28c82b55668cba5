import pytest

from minikeras import BatchEvent, TrainingHistory


def _history():
    history = TrainingHistory()
    history.append(1, 0, 0.9, 0.5)
    history.append(1, 1, 0.7, 0.6)
    history.append(2, 0, 0.4, 0.8)
    return history


def test_events_are_kept_in_order():
    history = _history()

    assert len(history) == 3
    assert history[0] == BatchEvent(1, 0, 0.9, 0.5)
    assert [event.loss for event in history] == [0.9, 0.7, 0.4]
    assert [event.batch_index for event in history.epoch_events(1)] == [0, 1]
    assert history.epoch_events(3) == []


def test_to_frame():
    frame = _history().to_frame()

    assert list(frame.columns) == ["epoch", "batch_index", "loss", "metric"]
    assert frame.shape == (3, 4)
    assert frame.groupby("epoch")["loss"].mean().to_dict() == pytest.approx({1: 0.8, 2: 0.4})


def test_repr():
    assert repr(_history()) == "TrainingHistory(events=3)"
