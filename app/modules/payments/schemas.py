from uuid import UUID
from pydantic import BaseModel, Field
from app.modules.subscriptions.models import SubscriptionTier

class ConnectUrlResponse(BaseModel):
    url: str

class ConnectCallback(BaseModel):
    code: str = Field(min_length=1)
    state: str = Field(min_length=1)

class ConnectCallbackResponse(BaseModel):
    message: str
    success: bool

class CreateSubscription(BaseModel):
    creator_id: UUID
    tier: SubscriptionTier

class CreateSubscriptionWithPayment(CreateSubscription):
    setup_intent_id: str = Field(min_length=1)

class WebhookAck(BaseModel):
    received: bool = True
