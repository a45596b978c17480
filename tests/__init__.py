"""VoiceAI Test Suite

This package contains all tests for the VoiceAI command interpretation core.

Test organization:
- unit/: Unit tests for individual modules
  - parser/: Entity extraction rules and extractor
  - context/: Business context renderer
  - classifier/: Command classifier
  - providers/: Provider payloads, HTTP providers, keywords, orchestrator
  - response/: Response builder and action executor
  - registry/: Command registry and role presets
  - config/: Configuration models
  - session/: Voice session
  - logging/: structlog logging setup
- integration/: End-to-end pipeline tests

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/providers/
"""
