"""
econpulse_pipeline — economic indicator sync for the econpulse document.

Architecture:
  sources/     — one module per provider (FRED, World Bank)
  transforms/  — observation normalization, windowing, year-over-year change
  loaders/     — read-merge-write publisher for the remote JSON document
  pipelines/   — orchestrator that wires sources -> transforms -> loader
  utils/       — structlog configuration, tenacity retry helper

Quick start:
    import asyncio
    from econpulse_pipeline.pipelines.economic_data import run
    from econpulse_shared.config import get_settings

    result = asyncio.run(run(get_settings(), countries=["US"], dry_run=True))

CLI:
    econpulse run --countries US,CN --dry-run
    econpulse status
"""

__version__ = "0.1.0"
