"""
Agents used by the Arena Copilot runtime.

For now there is a single CopilotOrchestrator that:

- builds one-shot requests and decodes structured replies
- owns the "interview" and "mentor" sessions through the registry
- returns typed results or raises one of the core exceptions
"""
