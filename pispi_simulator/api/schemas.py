"""
Pydantic schemas for API requests

Bodies are deliberately permissive: field rules live in the domain so that
every violation is reported in a single problem document.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field


class TransferRequest(BaseModel):
    compteDebiteur: Optional[Any] = Field(None, description="Debit account (CIC[0-9]+)")
    compteCrediteur: Optional[Any] = Field(None, description="Credit account (CIC[0-9]+)")
    montant: Optional[Any] = Field(None, description="Amount in minor currency units, > 0")
    motif: Optional[Any] = Field(None, description="Transfer description, max 140 characters")


class CreateAliasRequest(BaseModel):
    type: Optional[str] = Field(None, description="Alias type (SHID, MCOD)")


class WebhookRequest(BaseModel):
    callbackUrl: Optional[str] = None
    events: Optional[Any] = Field(None, description="List of subscribed event names")
    alias: Optional[str] = None
