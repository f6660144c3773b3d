"""Base class for text-generation providers."""

from abc import ABC, abstractmethod
from typing import Any


class BaseLLMProvider(ABC):
    """Abstract text-generation client supplied by the caller.

    The clustering engine never talks to a model itself; it only consumes
    the raw text a provider returns.
    """

    def __init__(self, model: str, **kwargs: Any) -> None:
        """Initialize the provider.

        Args:
            model: Model name to use
            **kwargs: Additional provider-specific parameters
        """
        self.model = model
        self.config = kwargs

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        max_tokens: int = 2000,
        temperature: float = 0.3,
        **kwargs: Any,
    ) -> str:
        """Generate a completion from the model.

        Args:
            prompt: The prompt to send
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature (0.0-1.0)
            **kwargs: Additional provider-specific parameters

        Returns:
            The raw generated text, with no schema enforced

        Raises:
            Exception: If the underlying call fails
        """
        pass
