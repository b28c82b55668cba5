"""
Training history records.
"""
from typing import List, NamedTuple

import pandas as pd


class BatchEvent(NamedTuple):
    """Loss and metric values of one training batch."""
    epoch: int
    batch_index: int
    loss: float
    metric: float


class TrainingHistory:
    """
    Chronological record of per-batch loss and metric values.
    """

    def __init__(self):
        self.history: List[BatchEvent] = []

    def append(self, epoch, batch_index, loss, metric):
        """Add the values of the next training batch."""
        self.history.append(BatchEvent(epoch, batch_index, float(loss), float(metric)))

    def epoch_events(self, epoch):
        return [event for event in self.history if event.epoch == epoch]

    def to_frame(self) -> pd.DataFrame:
        """
        :return: DataFrame with columns epoch, batch_index, loss and metric, one row per batch
        """
        return pd.DataFrame(self.history, columns=list(BatchEvent._fields))

    def __len__(self):
        return len(self.history)

    def __iter__(self):
        return iter(self.history)

    def __getitem__(self, index):
        return self.history[index]

    def __repr__(self):
        return f"TrainingHistory(events={len(self.history)})"
