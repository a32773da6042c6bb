"""
Pydantic models for the product catalog and search explanations.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Catalog
# ============================================================================

class Product(BaseModel):
    """A catalog entry as stored in the product index."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = Field(..., description="Caller-assigned product id")
    name: str
    description: str = Field(..., description="Long text; source of the semantic embedding")
    category: str
    price: float = Field(..., ge=0)
    image_url: str = Field("", alias="imageUrl", serialization_alias="image_url")


# ============================================================================
# Explain Search
# ============================================================================

class ScoredResult(BaseModel):
    """A product hit with the engine's raw score and the response max score."""

    model_config = ConfigDict(populate_by_name=True)

    product: Product
    score: float = Field(..., ge=0, description="Engine-defined relevance score")
    max_score: float = Field(..., ge=0, alias="maxScore", description="Max score across the response")

    @model_validator(mode="after")
    def validate_score_bound(self):
        """Ensure score <= max_score so clients can normalize to [0, 1]."""
        if self.score > self.max_score:
            raise ValueError(f"score ({self.score}) must be <= maxScore ({self.max_score})")
        return self


class SearchExplanation(BaseModel):
    """Query tokens from sparse-embedding inference plus scored semantic hits."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    query_tokens: Dict[str, float] = Field(
        default_factory=dict,
        alias="queryTokens",
        description="Top weighted tokens, descending by weight (at most 20)",
    )
    results: List[ScoredResult] = Field(default_factory=list)
