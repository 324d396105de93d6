"""
Conversation sessions for the Arena Copilot runtime.

Includes:
- ChatSession: lifecycle + serialized turn exchange
- TurnStream: lazy, closeable reply stream for a single turn
"""
