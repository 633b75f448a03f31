## Project: Megasena Predictor
## Purpose of File: Epoch Logging Utility
## Description:
## Provides a custom Keras callback that reports training progress through the logging module.
## The network engine drives its own resilient-propagation loop and feeds each epoch's full-batch
## error to the callback, so the same callback also works with model.fit().

import logging
from datetime import datetime

import tensorflow as tf

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


class EpochLogger(tf.keras.callbacks.Callback):
    """
    Logs "[label] Epoch n: Error = e" every `log_every` epochs and a summary when training ends.
    Each training run is tagged with the run_date it started on.
    """

    def __init__(self, log_every=100, label="Training"):
        super().__init__()
        self.run_date = get_run_date()
        self.log_every = max(1, int(log_every))
        self.label = label
        self.last_logs = {}

    def on_train_begin(self, logs=None):
        self.run_date = get_run_date()
        logging.info(f"[{self.label}] Run started at {self.run_date}.")

    def on_epoch_end(self, epoch, logs=None):
        if logs is None:
            return
        self.last_logs = dict(logs)

        if epoch % self.log_every == 0:
            logging.info(f"[{self.label}] Epoch {epoch}: Error = {float(logs.get('loss', 0.0))}")

    def on_train_end(self, logs=None):
        logs = logs or self.last_logs
        if not logs:
            return
        logging.info(
            f"[{self.label}] Run {self.run_date} finished: best error = "
            f"{float(logs.get('best_loss', logs.get('loss', 0.0)))}"
        )


def get_run_date():
    """
    Utility to fetch the current run_date string (for grouping log lines).
    """
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")
