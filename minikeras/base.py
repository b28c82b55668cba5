# pylint: disable=missing-docstring
from abc import abstractmethod
from typing import Any, List, Tuple

import numpy as np


# pylint: disable=invalid-name line-too-long
class BaseModel:
    """
    Trainable model contract: compile once, then fit/evaluate/predict any
    number of times, then close.
    """

    @abstractmethod
    def compile(self, optimizer: Any, loss: Any, metric: Any) -> None:
        """
        :param optimizer: optimizer building the parameter updates
        :param loss: loss function to minimize
        :param metric: metric reported during training
        """
        raise NotImplementedError

    @abstractmethod
    def fit(self, dataset: Any, epochs: int, batch_size: int) -> Any:
        """
        :param dataset: training dataset combining images and one-hot labels
        :param epochs: number of passes over the dataset
        :param batch_size: number of samples per parameter update
        :return: training history
        """
        raise NotImplementedError

    @abstractmethod
    def evaluate(self, dataset: Any, metric: Any, batch_size: int) -> float:
        raise NotImplementedError

    @abstractmethod
    def predict_all(self, dataset: Any, batch_size: int) -> np.ndarray:
        raise NotImplementedError

    @abstractmethod
    def predict_softly_and_get_activations(self, image: np.ndarray,
                                           form_activation_data: bool) -> Tuple[np.ndarray, List[np.ndarray]]:
        """
        :param image: a single image, flattened or with the input layer dimensions
        :param form_activation_data: whether to fetch the activations of every layer that has one
        :return: class probabilities and the list of activations
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, path_to_model_directory: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError

    def predict(self, image: np.ndarray) -> int:
        """
        :param image: a single image
        :return: index of the most probable class
        """
        soft_prediction = self.predict_softly(image)
        return int(np.argmax(soft_prediction))

    def predict_softly(self, image: np.ndarray) -> np.ndarray:
        soft_prediction, _ = self.predict_softly_and_get_activations(image, False)
        return soft_prediction

    def predict_and_get_activations(self, image: np.ndarray) -> Tuple[int, List[np.ndarray]]:
        soft_prediction, activations = self.predict_softly_and_get_activations(image, True)
        return int(np.argmax(soft_prediction)), activations

    def get_params(self, mode: str = "all") -> Any:
        """
        Get parameters for this model.

        :param mode: Specifies which parameters to return. Options are:
            - "all": Return all parameters.
            - "trainable": Return only trainable parameters (the variables).
            - "non_trainable": Return only configuration settings.
        :return: Dictionary of parameter names mapped to their values.
        """
        params = {k: v for k, v in self.__dict__.items() if not k.startswith("_")}
        if mode == "all":
            return params
        if mode == "trainable":
            return {k: v for k, v in params.items() if k == "trainable_variables"}
        if mode == "non_trainable":
            return {k: v for k, v in params.items() if k != "trainable_variables"}

        raise ValueError(
            f"Invalid mode '{mode}'. Choose from 'all', 'trainable', or 'non_trainable'."
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if not self.closed:
            self.close()

    @property
    def closed(self) -> bool:
        return False
