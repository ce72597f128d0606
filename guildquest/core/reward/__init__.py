"""Reward ledger core package"""

from guildquest.core.reward.ledger import (
    ApprovalResult,
    LedgerEntry,
    apply_reward,
    approve_and_reward,
)

__all__ = ["ApprovalResult", "LedgerEntry", "apply_reward", "approve_and_reward"]
