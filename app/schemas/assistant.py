from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

class RecommendedAction(BaseModel):
    type: str  # book_appointment, call_doctor, emergency, learn_more
    label: str
    priority: str

class AssistantReply(BaseModel):
    message: str
    category: str
    confidence: float
    suggestions: List[str]
    requires_follow_up: bool
    recommended_actions: List[RecommendedAction]

class ConversationResponse(BaseModel):
    id: str
    user_id: int
    created_at: str
    updated_at: str
    messages: List[Dict[str, Any]]

class MessageExchange(BaseModel):
    conversation_id: str
    reply: AssistantReply

class SymptomCheckRequest(BaseModel):
    symptoms: List[str] = Field(..., min_length=1, max_length=20)

class SymptomCheckResponse(BaseModel):
    urgency: str  # low, medium, high, emergency
    recommendations: List[str]
    suggested_specialization: Optional[str]
    doctors: List[Dict[str, Any]]
