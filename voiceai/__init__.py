"""Voice AI - Command interpretation core for a workforce voice assistant

Turns a free-text transcript into a structured, actionable command:
    transcript → entities → provider intent → classification → response

Components:
    models.py: Data models (enums, commands, classifications, responses)
    config_models.py: Validated configuration (args/voice.yaml)
    registry/: Static command definitions and role presets
    parser/: Rule-based entity extraction
    context/: Business context variables and template rendering
    providers/: AI providers, keyword fallback, and the orchestrator
    classifier/: Local-vs-fallback decision based on business relevance
    response/: Response composition and action execution
    session.py: One assistant session (state machine + public operations)
    logging_config.py: structlog rendering for stdlib loggers
    cli.py: `voiceai` command line

Usage:
    from voiceai.session import VoiceSession

    session = VoiceSession()
    response = await session.process_text("complete task 5")
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_PATH = ARGS_DIR / "voice.yaml"

__version__ = "0.1.0"

__all__ = [
    "ARGS_DIR",
    "CONFIG_PATH",
    "PROJECT_ROOT",
    "__version__",
]
