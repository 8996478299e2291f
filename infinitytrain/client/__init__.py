"""
Python client for the InfinityTrain API: an HTTP wrapper and the
application-state container built on it.
"""
from infinitytrain.client.api import APIClientError, TrainingAPI
from infinitytrain.client.state import StateError, TrainingState

__all__ = ["APIClientError", "TrainingAPI", "StateError", "TrainingState"]
