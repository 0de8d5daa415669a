"""
Platform Tester Agent

Asks Perplexity, Gemini and ChatGPT about a brand and merges what they say.
"""

from agents.platform_tester_agent.runner import run_platform_queries


__all__ = ["run_platform_queries"]
