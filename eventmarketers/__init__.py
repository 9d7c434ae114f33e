"""EventMarketers content core: moderation, mobile sync, entitlement, usage ledger, payment expiry."""
