"""
Chat-related prompts.
"""

# System message prepended when a chat request asks for memory context
# Template variables: {memory} - one "key: value" line per memory entry
MEMORY_CONTEXT_TEMPLATE = "User context:\n{memory}"

MEMORY_ENTRY_TEMPLATE = "{key}: {value}"
