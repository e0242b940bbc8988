"""Search result models."""

from pydantic import BaseModel, ConfigDict, Field

from vecspace.vectors.models import Vector


class SearchHit(BaseModel):
    """One entry of a top-k result.

    Attributes:
        score: Value returned by the scoring function (higher is better).
        index: Position of the vector in the scanned sequence.
        vector: The matching vector, borrowed from the scanned space.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    score: float = Field(description="Similarity score")
    index: int = Field(ge=0, description="Position in the space")
    vector: Vector = Field(description="Matching vector")

    @property
    def term(self) -> str:
        return self.vector.term
