"""
Mathdash - Timed Mental Arithmetic Quiz Engine

A rules-driven engine for timed arithmetic runs. The engine provides:
- Question generation per difficulty, with boss questions near the end
- Pure scoring (combo multiplier, boss multiplier, speed bonus)
- A reducer-based state machine for answers, retries and shields
- Run summaries persisted to a bounded recent-history list
"""

__version__ = "0.1.0"
