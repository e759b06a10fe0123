"""
UI Module - Discord UI Components

Modals used by the admin commands.

Available components:
- AdminLoginModal: shared-secret entry that unlocks admin mode
- AdminConfirmationModal: typed confirmation for destructive operations
"""
