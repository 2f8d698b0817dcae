"""
Task subsystem.

Components:
- extraction.py: pull a JSON payload out of model output, parse candidates
- generator.py: prompt building + LLM-backed generation with dedup
- fallback.py: canned tasks used when generation fails
- remote.py: generation through the HTTP endpoint
- lifecycle.py: status transitions (completed_at bookkeeping)
"""
