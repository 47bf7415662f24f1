from pydantic import BaseModel, Field

class Caller(BaseModel):
    """Identity of the authenticated caller, as supplied by the identity service."""
    id: str = Field(..., min_length=1, description="Identifier of the caller")
    first_name: str = Field(..., min_length=1, description="Display name of the caller")
