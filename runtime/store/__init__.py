"""
Storage abstractions for the Arena Copilot runtime.

Includes:
- SessionRegistry: process-wide table of named chat sessions
- LogStore: append-only JSONL event log for debugging / analysis
"""
