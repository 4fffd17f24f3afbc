"""Generative model clients used by the audit report orchestrator."""
