"""Pydantic models for Twilio webhook payloads."""

from pydantic import BaseModel, ConfigDict, Field


class InboundSms(BaseModel):
    """Form fields Twilio posts for an inbound SMS."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    from_number: str = Field(alias="From", min_length=1)
    body: str = Field(default="", alias="Body")
    to_number: str | None = Field(default=None, alias="To")
    message_sid: str | None = Field(default=None, alias="MessageSid")
