"""
Scan Orchestrator

LangGraph workflow that runs one full visibility scan.
"""

from agents.scan_orchestrator.graph import run_scan_workflow


__all__ = ["run_scan_workflow"]
