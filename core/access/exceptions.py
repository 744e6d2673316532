#!/usr/bin/env python3
"""
Engine error taxonomy.

Quota and credit failures are terminal for the triggering action and leave
state unchanged. ConcurrentModification is the only kind the caller-facing
layer retries automatically.
"""

from datetime import datetime
from typing import Any, Dict, Optional


class EngineError(Exception):
    """Base exception for engine errors."""

    def to_dict(self) -> Dict[str, Any]:
        return {}


class NotFound(EngineError):
    """Raised when a referenced opportunity or account does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = str(entity_id)
        super().__init__(f"{entity} not found: {entity_id}")

    def to_dict(self) -> Dict[str, Any]:
        return {'entity': self.entity, 'id': self.entity_id}


class InsufficientCredits(EngineError):
    """Raised when a debit exceeds the available balance."""

    def __init__(self, required: int, available: int, suggestion: Optional[str] = None):
        self.required = required
        self.available = available
        self.shortfall = required - available
        self.suggestion = suggestion or "Top up credits or upgrade your plan to continue."
        super().__init__(
            f"Insufficient credits: {required} required, {available} available"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'required': self.required,
            'available': self.available,
            'shortfall': self.shortfall,
            'suggestion': self.suggestion,
        }


class QuotaExceeded(EngineError):
    """Raised when the monthly action quota is exhausted."""

    def __init__(
        self,
        used: int,
        max_actions: int,
        next_reset_at: datetime,
        suggestion: Optional[str] = None
    ):
        self.used = used
        self.max_actions = max_actions
        self.next_reset_at = next_reset_at
        self.suggestion = suggestion
        super().__init__(
            f"Monthly limit of {max_actions} actions reached; resets at {next_reset_at.isoformat()}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'used': self.used,
            'max': self.max_actions,
            'next_reset_at': self.next_reset_at.isoformat(),
            'suggestion': self.suggestion,
        }


class OpportunityLocked(EngineError):
    """Raised when acting on an early-access opportunity the user has not unlocked."""

    def __init__(self, opportunity_id: str, restricted_until: datetime, unlock_cost: int):
        self.opportunity_id = opportunity_id
        self.restricted_until = restricted_until
        self.unlock_cost = unlock_cost
        super().__init__(f"Opportunity {opportunity_id} is in early access until {restricted_until.isoformat()}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'opportunity_id': self.opportunity_id,
            'restricted_until': self.restricted_until.isoformat(),
            'unlock_cost': self.unlock_cost,
        }


class ConcurrentModification(EngineError):
    """Raised when an atomic update lost a race with a concurrent write."""
    pass
