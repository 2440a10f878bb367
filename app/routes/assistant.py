import redis
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.config.database import get_db
from app.config.redis_config import get_redis_client
from app.models.user import User
from app.schemas.assistant import (
    ConversationResponse,
    MessageCreate,
    MessageExchange,
    SymptomCheckRequest,
    SymptomCheckResponse
)
from app.services.assistant_service import AssistantService
from app.services.redis_service import ConversationStore
from app.utils.auth import get_current_user

router = APIRouter(prefix="/assistant", tags=["Health Assistant"])

def get_assistant_service(redis_client: redis.Redis = Depends(get_redis_client)) -> AssistantService:
    return AssistantService(ConversationStore(redis_client))

@router.post("/conversations", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
def start_conversation(
    current_user: User = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant_service)
):
    """Start a new assistant conversation"""
    return assistant.start_conversation(current_user)

@router.get("/conversations/{conversation_id}", response_model=ConversationResponse)
def get_conversation(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant_service)
):
    return assistant.get_conversation(conversation_id, current_user)

@router.post("/conversations/{conversation_id}/messages", response_model=MessageExchange)
def send_message(
    conversation_id: str,
    message: MessageCreate,
    current_user: User = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant_service)
):
    """Send a message and receive the assistant's rule-based reply"""
    return assistant.send_message(conversation_id, message.content, current_user)

@router.delete("/conversations/{conversation_id}")
def delete_conversation(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant_service)
):
    return assistant.delete_conversation(conversation_id, current_user)

@router.post("/symptom-check", response_model=SymptomCheckResponse)
def check_symptoms(
    request: SymptomCheckRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Assess urgency for a list of symptoms and suggest matching doctors"""
    return AssistantService.check_symptoms(db, request.symptoms)
