"""Protocol for embedding model backends."""

from typing import List, Protocol, Sequence, runtime_checkable


@runtime_checkable
class EmbeddingBackend(Protocol):
    """Protocol for embedding model backends.

    Allows swapping between a local model (sentence-transformers) and the
    OpenAI embeddings API. Both methods are blocking; the indexer runs them
    in a worker thread.
    """

    @property
    def model_name(self) -> str:
        """Return identifier for the model used."""
        ...

    def load(self) -> None:
        """Prepare the model or client. Called once per indexer."""
        ...

    def encode(self, texts: Sequence[str]) -> List[List[float]]:
        """Return one vector per text, in input order."""
        ...
