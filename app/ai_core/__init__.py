# AI Core module

"""
AI Core Module - optional LLM features.

Key responsibilities:
- AI code review on @mention (full review or Q&A)
- Review prompt templates
"""
