"""LuminAI document summarization and quiz service."""
