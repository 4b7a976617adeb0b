"""
Orchestration module for rankings ingestion.

Fans a run out across all statistics and reports the result.
"""

from apps.rankings_ingestion.orchestrate.orchestrator import Orchestrator
from apps.rankings_ingestion.orchestrate.report import Notifier, SesNotifier, build_report

__all__ = ['Orchestrator', 'Notifier', 'SesNotifier', 'build_report']
