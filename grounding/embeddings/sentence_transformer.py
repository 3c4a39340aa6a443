"""SentenceTransformer-based embedding backend."""

from typing import List, Sequence

from sentence_transformers import SentenceTransformer


class SentenceTransformerBackend:
    """Embedding backend using the sentence-transformers library.

    Uses all-MiniLM-L6-v2 by default - a small model that mean-pools token
    embeddings into a 384-dimensional sentence vector.
    """

    DEFAULT_MODEL = "all-MiniLM-L6-v2"

    def __init__(self, model_name: str | None = None, device: str = "cpu"):
        self._model_name = model_name or self.DEFAULT_MODEL
        self._device = device
        self._model: SentenceTransformer | None = None

    @property
    def model_name(self) -> str:
        return self._model_name

    def load(self) -> None:
        if self._model is None:
            self._model = SentenceTransformer(self._model_name, device=self._device)

    def encode(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        if self._model is None:
            self.load()
        embeddings = self._model.encode(
            list(texts),
            convert_to_numpy=True,
            normalize_embeddings=True,
        )
        return embeddings.tolist()
