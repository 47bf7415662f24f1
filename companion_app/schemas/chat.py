# companion_app/schemas/chat.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

class ChatRequest(BaseModel):
    prompt: str = Field("", description="The message the user sends to the companion")

class MessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    role: str = Field(..., description="Role of the message sender (user or system)")
    content: str
    companion_id: str
    user_id: str
    created_at: Optional[datetime] = None
