"""LVLD coach relay: forwards coach requests to an LLM and normalizes its replies."""
