"""
Pydantic base model shared by request/response and stored records.

DESIGN PRINCIPLE:
- Python code uses snake_case attributes
- The wire and persisted form uses camelCase (communityUpvotes, submittedAt, ...)
  so stored documents keep the layout the frontend already consumes
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model with camelCase aliases.
    Accepts either spelling on input; dump with by_alias=True for output.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_document(self) -> dict:
        """JSON-safe dict in the persisted (camelCase) layout."""
        return self.model_dump(mode="json", by_alias=True)
