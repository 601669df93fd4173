"""Lumen: a tool-using LLM agent with skills and episodic memory."""

__version__ = "0.1.0"
