"""
Hand-maintained model lists for providers without a usable model-listing endpoint.

A successful key probe only proves the key is accepted; these lists are what
the user is offered afterwards.
"""

# Cheap model used for the one-token Anthropic key probe
ANTHROPIC_PROBE_MODEL = "claude-3-5-haiku-latest"

ANTHROPIC_MODELS = [
    "claude-sonnet-4-5",
    "claude-opus-4-1",
    "claude-3-7-sonnet-latest",
    "claude-3-5-haiku-latest",
]

# Cheap model used for the one-token Gemini key probe
GOOGLE_PROBE_MODEL = "gemini-2.0-flash"

GOOGLE_MODELS = [
    "gemini-2.5-pro",
    "gemini-2.5-flash",
    "gemini-2.0-flash",
    "gemini-2.0-flash-lite",
]

# OpenAI's model list also contains embeddings, audio, moderation etc.
OPENAI_CHAT_MODEL_PREFIX = "gpt"

# OpenRouter lists hundreds of models; only the first ones are cached on the key
OPENROUTER_MODEL_LIMIT = 20

ANTHROPIC_API_VERSION = "2023-06-01"
